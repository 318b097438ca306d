# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/status/readiness.py

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Tuple

from cassandra.cluster import Cluster, NoHostAvailable, Session

from ..errors import RecoveryTimeoutError

log = logging.getLogger("scyllanode")


@dataclass(frozen=True)
class RecoveryResult:
    converged: bool
    elapsed: float
    down: Tuple[str, ...] = ()

    @property
    def timed_out(self) -> bool:
        return not self.converged


def down_hosts(session: Session) -> List[str]:
    """Hosts the driver's cluster metadata does not currently consider up."""
    hosts = list(session.cluster.metadata.all_hosts())
    if not hosts:
        return ["<no hosts known>"]
    return sorted(str(h.address) for h in hosts if not h.is_up)


def await_recovery(
    timeout_secs: float,
    session: Session,
    *,
    poll_interval: float = 0.5,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> RecoveryResult:
    """
    Poll the driver until every known host is up. Returns as soon as that is
    true; a timed-out result is only produced once timeout_secs have elapsed.
    """
    started = clock()
    while True:
        down = down_hosts(session)
        elapsed = clock() - started
        if not down:
            return RecoveryResult(converged=True, elapsed=elapsed)
        if elapsed >= timeout_secs:
            return RecoveryResult(converged=False, elapsed=elapsed, down=tuple(down))
        log.debug("waiting on %s to come up (%.1fs elapsed)", ", ".join(down), elapsed)
        sleep(min(poll_interval, timeout_secs - elapsed))


def require_recovery(node: str, timeout_secs: float, session: Session, **kwargs) -> RecoveryResult:
    """await_recovery, but a timeout raises RecoveryTimeoutError."""
    result = await_recovery(timeout_secs, session, **kwargs)
    if result.timed_out:
        raise RecoveryTimeoutError(node, timeout_secs, result.down)
    return result


@contextmanager
def open_session(
    address: str,
    *,
    port: int = 9042,
    open_timeout: float = 120.0,
    retry_interval: float = 1.0,
    cluster_factory: Callable[..., Cluster] = Cluster,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[Session]:
    """
    Driver session to one node. The node may still be starting, so connecting
    is retried until open_timeout. The cluster object is shut down on every
    exit path.
    """
    cluster = cluster_factory(contact_points=[address], port=port)
    try:
        started = clock()
        while True:
            try:
                session = cluster.connect()
                break
            except (NoHostAvailable, OSError) as exc:
                if clock() - started >= open_timeout:
                    raise
                log.debug("CQL not open yet on %s: %s", address, exc)
                sleep(retry_interval)
        yield session
    finally:
        cluster.shutdown()
