# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/cluster/context.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..config.models import HarnessSettings
from .membership import MembershipTracker
from .resolve import Resolver


@dataclass
class TestRunContext:
    """
    State shared by every node task of one test run. ``nodes`` is fixed when
    the run starts; ``membership`` is the only part mutated during the run.
    """
    __test__ = False   # keep pytest from collecting this as a test class

    settings: HarnessSettings
    resolver: Resolver
    membership: MembershipTracker = field(default_factory=MembershipTracker)
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    nodes: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.nodes:
            self.nodes = tuple(self.settings.node_names)

    @classmethod
    def create(cls, settings: HarnessSettings, run_id: Optional[str] = None, resolver: Optional[Resolver] = None):
        pinned = {n.hostname: n.address for n in settings.nodes if n.address}
        kwargs = {"run_id": run_id} if run_id else {}
        return cls(settings=settings, resolver=resolver or Resolver(pinned), **kwargs)

    def address_of(self, node: str) -> str:
        return self.resolver.resolve(node)

    def seeds(self) -> str:
        """Comma-separated addresses of every node, in node order."""
        return ",".join(self.address_of(n) for n in self.nodes)
