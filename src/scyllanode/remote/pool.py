# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/remote/pool.py

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, Optional

from ..config.models import HarnessSettings
from ..errors import RemoteCommandError
from ..utils.shell import shq
from .ssh import SshTarget, open_ssh
from .ssh_runner import SSHRunner

log = logging.getLogger("scyllanode")


class Remote:
    """
    Runs shell commands on harness nodes. Each node gets its own SSH session,
    opened on first use and reused by every later call for that node.
    """

    def __init__(
        self,
        settings: HarnessSettings,
        connect: Callable[[SshTarget], SSHRunner] = open_ssh,
    ):
        self.settings = settings
        self._connect = connect
        self._sessions: Dict[str, SSHRunner] = {}
        self._node_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    # ------------------ sessions ------------------

    def _node_lock(self, node: str) -> threading.Lock:
        with self._lock:
            return self._node_locks.setdefault(node, threading.Lock())

    def session(self, node: str) -> SSHRunner:
        with self._node_lock(node):
            runner = self._sessions.get(node)
            if runner is None:
                target = SshTarget.for_node(self.settings.node(node), self.settings.ssh)
                runner = self._connect(target)
                self._sessions[node] = runner
            return runner

    def close(self) -> None:
        with self._lock:
            sessions, self._sessions = self._sessions, {}
        for node, runner in sessions.items():
            try:
                runner.close()
            except Exception as exc:
                log.debug("[%s] error closing ssh session: %s", node, exc)

    # ------------------ commands ------------------

    def execute(self, node: str, cmd: str, *, sudo: bool = True, timeout: Optional[float] = None) -> str:
        """Run cmd on node and return stdout. Raises RemoteCommandError on a non-zero exit."""
        timeout = timeout if timeout is not None else self.settings.ssh.cmd_timeout
        log.debug("[%s] $ %s", node, cmd)
        rc, out, err = self.session(node).run(cmd, sudo=sudo, timeout=timeout)
        if rc != 0:
            raise RemoteCommandError(node, cmd, rc, err)
        return out

    def execute_quietly(self, node: str, cmd: str, *, sudo: bool = True) -> bool:
        """Best-effort form of execute: a failing command is logged and ignored."""
        try:
            self.execute(node, cmd, sudo=sudo)
            return True
        except RemoteCommandError as exc:
            log.debug("[%s] ignoring failure (rc=%s): %s", node, exc.rc, cmd)
            return False

    def upload_text(self, node: str, content: str, remote_path: str, *, sudo: bool = True) -> None:
        log.debug("[%s] writing %s (%d bytes)", node, remote_path, len(content))
        self.session(node).put_text(content, remote_path, sudo=sudo)

    def read_text(self, node: str, remote_path: str) -> str:
        return self.execute(node, f"cat {shq(remote_path)}")

    def exists(self, node: str, remote_path: str) -> bool:
        return self.execute_quietly(node, f"test -e {shq(remote_path)}")


def nodetool(remote: Remote, node: str, *args: str) -> str:
    """Run a nodetool command on node."""
    cmd = " ".join(["nodetool", *(shq(a) for a in args)])
    return remote.execute(node, cmd)
