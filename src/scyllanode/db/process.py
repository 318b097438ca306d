# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/db/process.py

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Callable, Optional

from ..errors import StopTimeoutError
from ..remote.pool import Remote
from ..utils.shell import shq
from .paths import DATA_GLOB, LOG_FILE, SERVICE

log = logging.getLogger("scyllanode")

# stopped in this order: the JMX proxy first, then the database itself
PROCESSES = ("scylla-jmx", "scylla")


class StopState(Enum):
    PROBING = "probing"
    KILLING = "killing"
    CONFIRMED = "confirmed"


class ProcessController:
    """
    Starts, stops and wipes the database on a node.

    stop() blocks until the process table no longer lists the process. With
    max_wait=None that wait has no bound; set it to turn a hung process into a
    StopTimeoutError.
    """

    def __init__(
        self,
        remote: Remote,
        *,
        poll_interval: float = 0.1,
        max_wait: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.remote = remote
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self._clock = clock
        self._sleep = sleep

    def start(self, node: str) -> None:
        log.info("[%s] starting ScyllaDB", node)
        self.remote.execute(node, f"service {SERVICE} start")
        log.info("[%s] started ScyllaDB", node)

    def is_running(self, node: str, process: str) -> bool:
        return process in self.remote.execute(node, "ps -ef")

    def terminate(self, node: str, process: str) -> None:
        """Kill process on node and wait for the process table to confirm it is gone."""
        state = StopState.PROBING
        killed = False
        started = self._clock()

        while state is not StopState.CONFIRMED:
            if state is StopState.PROBING:
                state = StopState.KILLING if self.is_running(node, process) else StopState.CONFIRMED
                continue

            # KILLING: signal once, then keep probing until it is gone
            if not killed:
                self.remote.execute_quietly(node, f"killall {shq(process)}")
                killed = True
            if self.max_wait is not None and self._clock() - started >= self.max_wait:
                raise StopTimeoutError(node, process, self.max_wait)
            self._sleep(self.poll_interval)
            state = StopState.PROBING

        log.debug("[%s] %s not running", node, process)

    def stop(self, node: str) -> None:
        log.info("[%s] stopping ScyllaDB", node)
        for process in PROCESSES:
            self.terminate(node, process)
        log.info("[%s] has stopped ScyllaDB", node)

    def wipe(self, node: str) -> None:
        """Stop, then delete data and the log file. Missing files are fine."""
        self.stop(node)
        log.info("[%s] deleting data files", node)
        self.remote.execute_quietly(node, f"rm -rf {DATA_GLOB}")
        self.remote.execute_quietly(node, f"rm -rf {shq(LOG_FILE)}")
