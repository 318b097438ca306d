# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/config/tuning.py
"""
Environment knobs recognised by the harness. Each returns None when the
variable is unset so callers can tell "not given" from the default.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Mapping, Optional


def compaction_strategy(env: Mapping[str, str]) -> Optional[str]:
    return env.get("JEPSEN_COMPACTION_STRATEGY") or None


def commitlog_compression(env: Mapping[str, str]) -> Optional[bool]:
    raw = env.get("JEPSEN_COMMITLOG_COMPRESSION")
    if raw is None:
        return None
    return raw.strip().lower() != "false"


def coordinator_batchlog_disabled(env: Mapping[str, str]) -> Optional[bool]:
    if "JEPSEN_DISABLE_COORDINATOR_BATCHLOG" not in env:
        return None
    return bool(env["JEPSEN_DISABLE_COORDINATOR_BATCHLOG"])


def phi_threshold(env: Mapping[str, str]) -> Optional[int]:
    raw = env.get("JEPSEN_PHI_VALUE")
    if not raw:
        return None
    return int(raw)


def hints_disabled(env: Mapping[str, str]) -> Optional[bool]:
    if "JEPSEN_DISABLE_HINTS" not in env:
        return None
    return bool(env["JEPSEN_DISABLE_HINTS"])


def tuning_from_env(env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect the knobs that are set into a dict shaped like TuningSettings."""
    env = os.environ if env is None else env
    found = {
        "compaction_strategy": compaction_strategy(env),
        "commitlog_compression": commitlog_compression(env),
        "coordinator_batchlog_disabled": coordinator_batchlog_disabled(env),
        "phi_threshold": phi_threshold(env),
        "hints_disabled": hints_disabled(env),
    }
    return {k: v for k, v in found.items() if v is not None}
