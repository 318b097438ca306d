# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

"""Per-node lifecycle control for ScyllaDB under a fault-injection harness."""

__version__ = "0.1.0"
