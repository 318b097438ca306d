# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from enum import Enum


class NodeState(str, Enum):
    ABSENT = "absent"
    INSTALLED = "installed"
    CONFIGURED = "configured"
    STARTED = "started"
    SKIPPED_START = "skipped-start"
    READY = "ready"
    STOPPED = "stopped"
    WIPED = "wiped"
