# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/config/loader.py

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

import yaml

from .models import HarnessSettings
from .tuning import tuning_from_env

log = logging.getLogger("scyllanode")


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def load_settings(path: str | Path, env: Optional[Mapping[str, str]] = None) -> HarnessSettings:
    """
    Load and validate a harness run definition.

    The YAML file names the nodes, SSH defaults and timeouts. The JEPSEN_*
    environment knobs are applied on top of the file's ``tuning`` section,
    so a CI job can flip hints or the phi threshold without editing the file.
    """
    path = Path(path)
    data = _load_yaml(path)

    overrides = tuning_from_env(env)
    if overrides:
        log.debug("Applying tuning overrides from environment: %s", overrides)
        _deep_merge(data, {"tuning": overrides})

    return HarnessSettings.model_validate(data)
