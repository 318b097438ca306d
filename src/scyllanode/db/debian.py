# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/db/debian.py

from __future__ import annotations

import logging
from typing import Iterable, List, Set

from ..remote.pool import Remote
from ..utils.shell import shq

log = logging.getLogger("scyllanode")

APT_ENV = "env DEBIAN_FRONTEND=noninteractive"


class Debian:
    """apt/dpkg primitives. Both operations are safe to repeat."""

    def __init__(self, remote: Remote):
        self.remote = remote

    def add_repo(self, node: str, name: str, line: str, keyserver: str, key_id: str) -> bool:
        """
        Add an apt source. Returns False when the list file already holds the
        same line.
        """
        list_path = f"/etc/apt/sources.list.d/{name}.list"
        current = self.remote.execute(node, f"cat {shq(list_path)} 2>/dev/null || true")
        if current.strip() == line.strip():
            log.debug("[%s] apt repo %s already present", node, name)
            return False

        log.info("[%s] adding apt repo %s", node, name)
        self.remote.execute(node, f"apt-key adv --keyserver {shq(keyserver)} --recv-keys {shq(key_id)}")
        self.remote.upload_text(node, line.strip() + "\n", list_path)
        self.remote.execute(node, f"{APT_ENV} apt-get update")
        return True

    def installed(self, node: str, packages: Iterable[str]) -> Set[str]:
        names = [p for p in packages]
        if not names:
            return set()
        out = self.remote.execute(
            node,
            "dpkg-query -W -f='${Status} ${Package}\\n' "
            + " ".join(shq(p) for p in names)
            + " 2>/dev/null || true",
        )
        found = set()
        for line in out.splitlines():
            parts = line.split()
            # "install ok installed <pkg>"
            if len(parts) >= 4 and parts[2] == "installed":
                found.add(parts[3])
        return found

    def install(self, node: str, packages: Iterable[str]) -> List[str]:
        """
        Install packages that are missing. A trailing "-" on a name asks apt to
        remove that package instead. Returns the apt arguments that were run.
        """
        packages = list(packages)
        wanted = [p for p in packages if not p.endswith("-")]
        unwanted = [p[:-1] for p in packages if p.endswith("-")]

        present = self.installed(node, wanted + unwanted)
        args = [p for p in wanted if p not in present]
        args += [f"{p}-" for p in unwanted if p in present]
        if not args:
            log.debug("[%s] packages already in place: %s", node, ", ".join(packages))
            return []

        log.info("[%s] apt-get install %s", node, " ".join(args))
        self.remote.execute(
            node,
            f"{APT_ENV} apt-get install -y --allow-unauthenticated " + " ".join(shq(a) for a in args),
        )
        return args
