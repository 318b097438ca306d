# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/cluster/resolve.py

from __future__ import annotations

import logging
import socket
import threading
from typing import Callable, Dict, Mapping, Optional

log = logging.getLogger("scyllanode")


class Resolver:
    """
    Maps node names to dotted IPv4 addresses. An answer is fixed for the
    lifetime of the resolver, so a node keeps one address for the whole run.
    """

    def __init__(
        self,
        pinned: Optional[Mapping[str, str]] = None,
        lookup: Callable[[str], str] = socket.gethostbyname,
    ):
        self._cache: Dict[str, str] = dict(pinned or {})
        self._lookup = lookup
        self._lock = threading.Lock()

    def resolve(self, node: str) -> str:
        with self._lock:
            addr = self._cache.get(node)
        if addr is not None:
            return addr

        addr = self._lookup(node)
        with self._lock:
            # first answer wins if two threads raced on the lookup
            addr = self._cache.setdefault(node, addr)
        log.debug("resolved %s -> %s", node, addr)
        return addr

    __call__ = resolve
