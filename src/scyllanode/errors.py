# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/errors.py

from __future__ import annotations


class ScyllaNodeError(RuntimeError):
    """Base class for every error raised by scyllanode."""


class RemoteCommandError(ScyllaNodeError):
    def __init__(self, node: str, cmd: str, rc: int, stderr: str = ""):
        self.node = node
        self.cmd = cmd
        self.rc = rc
        self.stderr = stderr
        super().__init__(f"[{node}] command failed (rc={rc}): {cmd}\n{stderr.strip()}")


class ManagementError(ScyllaNodeError):
    """The management endpoint of a node could not answer an attribute read."""


class RecoveryTimeoutError(ScyllaNodeError):
    """
    The driver did not report every host up within the bound. Fatal: the
    cluster is considered broken for the rest of the run.
    """

    def __init__(self, node: str, timeout_secs: float, down: tuple = ()):
        self.node = node
        self.timeout_secs = timeout_secs
        self.down = tuple(down)
        detail = f" (still down: {', '.join(self.down)})" if self.down else ""
        super().__init__(
            f"Driver didn't report all nodes were up in {timeout_secs}s "
            f"while setting up {node} - failing{detail}"
        )


class StopTimeoutError(ScyllaNodeError):
    def __init__(self, node: str, process: str, max_wait: float):
        self.node = node
        self.process = process
        self.max_wait = max_wait
        super().__init__(f"[{node}] {process} still running after {max_wait}s")


class BootstrapTimeoutError(ScyllaNodeError):
    def __init__(self, node: str, timeout_secs: float):
        self.node = node
        self.timeout_secs = timeout_secs
        super().__init__(f"{node} did not finish joining the cluster within {timeout_secs}s")


class MembershipChangeInProgressError(ScyllaNodeError):
    """Another task already owns a bootstrap or decommission of this node."""

    def __init__(self, node: str, change: str):
        self.node = node
        self.change = change
        super().__init__(f"{node} is already {change}; refusing to start a second {change}")
