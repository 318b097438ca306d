# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/status/management.py

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from ..errors import ManagementError

log = logging.getLogger("scyllanode")

MANAGEMENT_PORT = 8778
STORAGE_SERVICE = "org.apache.cassandra.db:type=StorageService"


class ManagementClient(Protocol):
    def read_attribute(self, address: str, mbean: str, attribute: str) -> Any: ...


class JolokiaClient:
    """
    Reads MBean attributes through the Jolokia agent attached to scylla-jmx.
    Every failure is reported as ManagementError so callers have one thing to
    catch.
    """

    def __init__(self, port: int = MANAGEMENT_PORT, timeout: float = 5.0, session: requests.Session | None = None):
        self.port = port
        self.timeout = timeout
        self.http = session or requests.Session()

    def url(self, address: str, mbean: str, attribute: str) -> str:
        return f"http://{address}:{self.port}/jolokia/read/{mbean}/{attribute}"

    def read_attribute(self, address: str, mbean: str, attribute: str) -> Any:
        url = self.url(address, mbean, attribute)
        try:
            response = self.http.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ManagementError(f"{address}:{self.port} unreachable: {exc}") from exc

        if response.status_code != 200:
            raise ManagementError(f"{url} returned HTTP {response.status_code}")
        try:
            body = response.json()
        except ValueError as exc:
            raise ManagementError(f"{url} returned a non-JSON body") from exc

        if body.get("status") != 200:
            raise ManagementError(f"{url}: {body.get('error', 'unknown error')}")
        return body.get("value")

    def close(self) -> None:
        self.http.close()
