# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/lifecycle/controller.py

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, ContextManager, Dict, List, Optional

from ..cluster.context import TestRunContext
from ..db.configure import ConfigWriter
from ..db.install import PackageInstaller
from ..db.paths import LOG_FILE
from ..db.process import ProcessController
from ..errors import BootstrapTimeoutError, MembershipChangeInProgressError, RecoveryTimeoutError
from ..observers.dispatcher import EventBus
from ..observers.events import (
    new_ctx,
    NodeInstalled,
    NodeConfigured,
    NodeStarted,
    NodeStartSkipped,
    NodeReady,
    RecoveryTimedOut,
    NodeStopped,
    NodeWiped,
    NodeDecommissioned,
    NodeBootstrapped,
)
from ..remote.pool import Remote, nodetool
from ..status.management import JolokiaClient
from ..status.prober import ClusterStatusProber, ProbePolicy
from ..status.readiness import RecoveryResult, open_session, require_recovery
from .states import NodeState

log = logging.getLogger("scyllanode")


class LifecycleController:
    """
    Drives one ScyllaDB node through install -> configure -> guarded start ->
    ready, and back down through stop -> wipe.

    The harness calls these methods from one thread per node. The only state
    shared between those threads is the run context's membership tracker.
    """

    def __init__(
        self,
        ctx: TestRunContext,
        remote: Remote,
        *,
        installer: Optional[PackageInstaller] = None,
        config_writer: Optional[ConfigWriter] = None,
        processes: Optional[ProcessController] = None,
        prober: Optional[ClusterStatusProber] = None,
        bus: Optional[EventBus] = None,
        session_opener: Callable[..., ContextManager] = open_session,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        settings = ctx.settings
        self.ctx = ctx
        self.remote = remote
        self.installer = installer or PackageInstaller(
            remote, settings.packages, management_port=settings.management_port
        )
        self.config_writer = config_writer or ConfigWriter(remote, ctx)
        self.processes = processes or ProcessController(
            remote,
            poll_interval=settings.timeouts.stop_poll_interval,
            max_wait=settings.timeouts.stop_max_wait,
        )
        self.prober = prober or ClusterStatusProber(JolokiaClient(port=settings.management_port))
        self.bus = bus or EventBus()
        self._open_session = session_opener
        self._clock = clock
        self._sleep = sleep

        self._states: Dict[str, NodeState] = {}
        self._lock = threading.Lock()

    # ------------------ state & events ------------------

    def state_of(self, node: str) -> NodeState:
        with self._lock:
            return self._states.get(node, NodeState.ABSENT)

    def _set_state(self, node: str, state: NodeState) -> None:
        with self._lock:
            self._states[node] = state
        log.debug("[%s] -> %s", node, state.value)

    def _emit(self, event_cls, node: str, **data) -> None:
        self.bus.emit(event_cls(node=node, **new_ctx(self.ctx.run_id), **data))

    # ------------------ leaf steps ------------------

    def install(self, node: str) -> None:
        version = self.ctx.settings.version
        self.installer.install(node, version)
        self._set_state(node, NodeState.INSTALLED)
        self._emit(NodeInstalled, node, version=version)

    def configure(self, node: str) -> str:
        document = self.config_writer.configure(node)
        self._set_state(node, NodeState.CONFIGURED)
        self._emit(NodeConfigured, node, seeds=self.ctx.seeds())
        return document

    def start(self, node: str) -> None:
        self.processes.start(node)
        self._set_state(node, NodeState.STARTED)
        self._emit(NodeStarted, node)

    def start_blocked_by(self, node: str) -> Optional[str]:
        """Why node must not be started right now, or None if it may be."""
        snap = self.ctx.membership.snapshot()
        if snap.is_bootstrapping(node):
            return "bootstrapping"
        if snap.is_decommissioned(self.ctx.address_of(node)):
            return "decommissioned"
        return None

    def guarded_start(self, node: str) -> bool:
        """
        Start node unless it is mid-bootstrap or has been decommissioned.
        Starting either would corrupt the join or bring a removed member back.
        """
        reason = self.start_blocked_by(node)
        if reason is not None:
            log.info("[%s] not starting ScyllaDB: node is %s", node, reason)
            self._set_state(node, NodeState.SKIPPED_START)
            self._emit(NodeStartSkipped, node, reason=reason)
            return False
        self.start(node)
        return True

    def await_ready(self, node: str) -> RecoveryResult:
        """Open a driver session to node and block until it reports every host up."""
        settings = self.ctx.settings
        timeout = settings.timeouts.recovery_timeout_secs
        with self._open_session(self.ctx.address_of(node), port=settings.cql_port) as session:
            try:
                result = require_recovery(
                    node,
                    timeout,
                    session,
                    poll_interval=settings.timeouts.recovery_poll_interval,
                )
            except RecoveryTimeoutError as exc:
                self._emit(RecoveryTimedOut, node, timeout_s=timeout, down=exc.down)
                raise
        self._set_state(node, NodeState.READY)
        self._emit(NodeReady, node, elapsed_s=round(result.elapsed, 3))
        return result

    # ------------------ setup / teardown ------------------

    def setup(self, node: str) -> NodeState:
        """
        install -> configure -> guarded start -> (if started) wait for the
        driver to see the whole cluster. A readiness timeout propagates.
        """
        self.install(node)
        self.configure(node)
        if self.guarded_start(node):
            self.await_ready(node)
            log.info("[%s] Scylla startup complete", node)
        return self.state_of(node)

    def stop(self, node: str) -> None:
        self.processes.stop(node)
        self._set_state(node, NodeState.STOPPED)
        self._emit(NodeStopped, node)

    def wipe(self, node: str) -> None:
        self.processes.wipe(node)
        self._set_state(node, NodeState.WIPED)
        self._emit(NodeWiped, node)

    def teardown(self, node: str) -> None:
        self.wipe(node)

    def log_files(self, node: str) -> List[str]:
        return [LOG_FILE]

    # ------------------ membership changes ------------------

    def decommission(self, node: str) -> str:
        """
        Record node as leaving, then remove it from the ring. The mark is made
        first so no concurrent setup restarts it while it streams data away.
        A node already marked as leaving is refused, so nodetool runs once.
        """
        address = self.ctx.address_of(node)
        if not self.ctx.membership.mark_decommissioning(node, address):
            raise MembershipChangeInProgressError(node, "decommissioning")
        log.info("[%s] decommissioning (%s)", node, address)
        nodetool(self.remote, node, "decommission")
        self._emit(NodeDecommissioned, node, address=address)
        return address

    def bootstrap(self, node: str) -> float:
        """
        Bring node (back) into the cluster as a fresh member: wipe it, rewrite
        its configuration, start it and wait until no node lists it as joining.
        Refused if the node is already bootstrapping; only a mark this call set
        is cleared afterwards.
        Returns the seconds the join took.
        """
        timeout = self.ctx.settings.timeouts.bootstrap_timeout_secs
        address = self.ctx.address_of(node)
        membership = self.ctx.membership

        if not membership.mark_bootstrapping(node):
            raise MembershipChangeInProgressError(node, "bootstrapping")
        membership.clear_decommissioning(node)
        try:
            self.wipe(node)
            self.configure(node)
            self.start(node)

            started = self._clock()
            while True:
                joining = self.prober.joining_nodes(self.ctx)
                live = self.prober.probe(self.ctx, "LiveNodes", ProbePolicy.FIRST_SUCCESS)
                elapsed = self._clock() - started
                if address in live and address not in joining:
                    break
                if elapsed >= timeout:
                    raise BootstrapTimeoutError(node, timeout)
                self._sleep(self.ctx.settings.timeouts.recovery_poll_interval)
        finally:
            membership.clear_bootstrapping(node)

        self._set_state(node, NodeState.READY)
        self._emit(NodeBootstrapped, node, elapsed_s=round(elapsed, 3))
        log.info("[%s] bootstrapped in %.1fs", node, elapsed)
        return elapsed
