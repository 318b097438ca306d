# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/cluster/membership.py

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Set


@dataclass(frozen=True)
class MembershipSnapshot:
    bootstrapping: FrozenSet[str]
    decommissioning: Dict[str, str]      # address -> node

    @property
    def decommissioned_addresses(self) -> FrozenSet[str]:
        return frozenset(self.decommissioning)

    def is_bootstrapping(self, node: str) -> bool:
        return node in self.bootstrapping

    def is_decommissioned(self, address: str) -> bool:
        return address in self.decommissioning


class MembershipTracker:
    """
    Nodes currently joining (bootstrapping) and leaving (decommissioning) the
    cluster. Written by the bootstrap/decommission side of the harness and read
    by every node's setup, so all access goes through one lock and readers that
    need both collections take a snapshot.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._bootstrapping: Set[str] = set()
        self._decommissioning: Dict[str, str] = {}

    # ------------------ bootstrapping ------------------

    def mark_bootstrapping(self, node: str) -> bool:
        """Returns False if node was already marked."""
        with self._lock:
            if node in self._bootstrapping:
                return False
            self._bootstrapping.add(node)
            return True

    def clear_bootstrapping(self, node: str) -> bool:
        with self._lock:
            if node not in self._bootstrapping:
                return False
            self._bootstrapping.discard(node)
            return True

    def is_bootstrapping(self, node: str) -> bool:
        with self._lock:
            return node in self._bootstrapping

    def bootstrapping(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._bootstrapping)

    # ------------------ decommissioning ------------------

    def mark_decommissioning(self, node: str, address: str) -> bool:
        """Returns False if address was already recorded as decommissioning."""
        with self._lock:
            if address in self._decommissioning:
                return False
            self._decommissioning[address] = node
            return True

    def clear_decommissioning(self, node: str) -> bool:
        with self._lock:
            addrs = [a for a, n in self._decommissioning.items() if n == node]
            for a in addrs:
                del self._decommissioning[a]
            return bool(addrs)

    def decommissioned_address_of(self, node: str) -> Optional[str]:
        with self._lock:
            for addr, n in self._decommissioning.items():
                if n == node:
                    return addr
            return None

    def decommissioned_addresses(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._decommissioning)

    # ------------------ combined ------------------

    def snapshot(self) -> MembershipSnapshot:
        with self._lock:
            return MembershipSnapshot(
                bootstrapping=frozenset(self._bootstrapping),
                decommissioning=dict(self._decommissioning),
            )
