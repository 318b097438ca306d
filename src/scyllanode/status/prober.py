# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/status/prober.py

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import List, Optional, Set

from ..cluster.context import TestRunContext
from ..errors import ManagementError
from .management import STORAGE_SERVICE, ManagementClient

log = logging.getLogger("scyllanode")


class ProbePolicy(Enum):
    FIRST_SUCCESS = "first_success"   # stop at the first node that answers
    ACCUMULATE = "accumulate"         # union the answers of every node that answers


def candidates(ctx: TestRunContext, rng: Optional[random.Random] = None) -> List[str]:
    """
    Addresses that may be asked about cluster status: every node that is not
    bootstrapping, minus decommissioned addresses, in random order.
    """
    snap = ctx.membership.snapshot()
    eligible = [n for n in ctx.nodes if not snap.is_bootstrapping(n)]
    addrs = sorted({ctx.address_of(n) for n in eligible} - snap.decommissioned_addresses)
    (rng or random).shuffle(addrs)
    return addrs


class ClusterStatusProber:
    def __init__(self, client: ManagementClient, rng: Optional[random.Random] = None):
        self.client = client
        self.rng = rng or random.Random()

    def probe(self, ctx: TestRunContext, attribute: str, policy: ProbePolicy) -> Set[str]:
        """
        Read a StorageService attribute from the candidates in turn. A node that
        cannot answer is skipped; if none answers the result is empty.
        """
        result: Set[str] = set()
        for addr in candidates(ctx, self.rng):
            try:
                values = self.client.read_attribute(addr, STORAGE_SERVICE, attribute)
            except (ManagementError, OSError) as exc:
                log.info("Couldn't get status from node %s: %s", addr, exc)
                continue

            result.update(values or ())
            if policy is ProbePolicy.FIRST_SUCCESS:
                break
        return result

    def live_nodes(self, ctx: TestRunContext) -> Set[str]:
        live = self.probe(ctx, "LiveNodes", ProbePolicy.FIRST_SUCCESS)
        # gossip can still list a node that is joining or leaving
        snap = ctx.membership.snapshot()
        excluded = set(snap.decommissioned_addresses)
        for node in snap.bootstrapping:
            excluded.add(node)
            excluded.add(ctx.address_of(node))
        return live - excluded

    def joining_nodes(self, ctx: TestRunContext) -> Set[str]:
        # joining status may differ per observer, so every answer counts
        return self.probe(ctx, "JoiningNodes", ProbePolicy.ACCUMULATE)
