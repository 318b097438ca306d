# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional, Tuple
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events of one test run
    node: str

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
    }


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class NodeInstalled(BaseEvent):
    version: str

@dataclass(frozen=True)
class NodeConfigured(BaseEvent):
    seeds: str

@dataclass(frozen=True)
class NodeStarted(BaseEvent):
    pass

@dataclass(frozen=True)
class NodeStartSkipped(BaseEvent):
    reason: str       # "bootstrapping" | "decommissioned"

@dataclass(frozen=True)
class NodeReady(BaseEvent):
    elapsed_s: float

@dataclass(frozen=True)
class RecoveryTimedOut(BaseEvent):
    timeout_s: float
    down: Tuple[str, ...] = ()


# ---------------------------------------------------------------------
# Teardown
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class NodeStopped(BaseEvent):
    pass

@dataclass(frozen=True)
class NodeWiped(BaseEvent):
    pass


# ---------------------------------------------------------------------
# Membership changes
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class NodeDecommissioned(BaseEvent):
    address: str

@dataclass(frozen=True)
class NodeBootstrapped(BaseEvent):
    elapsed_s: float
