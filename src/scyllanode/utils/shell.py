# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

def shq(s: str) -> str:
    """Shell-quote helper."""
    return "'" + s.replace("'", "'\\''") + "'"
