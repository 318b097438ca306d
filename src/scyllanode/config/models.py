# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/config/models.py

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class SshSettings(BaseModel):
    """Defaults applied to every node unless the node overrides them."""
    username: str = "root"
    port: int = 22
    password: Optional[str] = None
    pkey_path: Optional[Path] = None
    connect_timeout: float = 20.0
    connect_retries: int = Field(default=3, ge=1)
    connect_retry_delay: float = Field(default=2.0, ge=0)
    cmd_timeout: float = 300.0


class NodeSpec(BaseModel):
    hostname: str                      # name the harness knows the node by
    address: Optional[str] = None      # pin the IP instead of resolving hostname
    username: Optional[str] = None
    port: Optional[int] = None
    password: Optional[str] = None
    pkey_path: Optional[Path] = None


class TuningSettings(BaseModel):
    """
    Node-side knobs end up in scylla.yaml through ConfigParams. Compaction and
    the coordinator batchlog are client-side: workloads take them from
    client_options() when creating tables and issuing batches.
    """
    compaction_strategy: str = "SizeTieredCompactionStrategy"
    commitlog_compression: bool = True
    coordinator_batchlog_disabled: bool = False
    phi_threshold: int = Field(default=8, ge=1)
    hints_disabled: bool = False

    @property
    def hinted_handoff_enabled(self) -> bool:
        return not self.hints_disabled

    def client_options(self) -> Dict[str, Any]:
        return {
            "compaction": {"class": self.compaction_strategy},
            "coordinator_batchlog": not self.coordinator_batchlog_disabled,
        }


class TimeoutSettings(BaseModel):
    recovery_timeout_secs: float = Field(default=600.0, gt=0)
    recovery_poll_interval: float = Field(default=0.5, gt=0)
    stop_poll_interval: float = Field(default=0.1, gt=0)
    # None keeps stop blocking until the process table is clean
    stop_max_wait: Optional[float] = Field(default=None, gt=0)
    bootstrap_timeout_secs: float = Field(default=600.0, gt=0)


class PackageSettings(BaseModel):
    repo_name: str = "scylla"
    repo_url: str = "http://downloads.scylladb.com/downloads/scylla/deb/debian/scylladb-{version}"
    distribution: str = "buster"
    component: str = "non-free"
    keyserver: str = "hkp://keyserver.ubuntu.com:80"
    key_id: str = "5e08fbd8b5d6ec9c"
    packages: List[str] = Field(default_factory=lambda: ["scylla", "scylla-jmx", "scylla-tools", "ntp-"])
    # HTTP bridge attached to scylla-jmx; serves management reads
    jolokia_version: str = "1.7.2"
    jolokia_url: str = "https://repo1.maven.org/maven2/org/jolokia/jolokia-jvm/{version}/jolokia-jvm-{version}.jar"

    def repo_line(self, version: str) -> str:
        url = self.repo_url.format(version=version)
        return f"deb  [arch=amd64] {url} {self.distribution} {self.component}"

    def agent_url(self) -> str:
        return self.jolokia_url.format(version=self.jolokia_version)


class HarnessSettings(BaseModel):
    version: str = "4.6"
    cluster_name: str = "jepsen"
    nodes: List[NodeSpec]
    ssh: SshSettings = Field(default_factory=SshSettings)
    tuning: TuningSettings = Field(default_factory=TuningSettings)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    packages: PackageSettings = Field(default_factory=PackageSettings)
    management_port: int = 8778      # Jolokia agent, see PackageInstaller
    cql_port: int = 9042

    @field_validator("nodes", mode="before")
    @classmethod
    def _nodes_from_names(cls, value):
        # plain hostnames are accepted as shorthand
        if isinstance(value, list):
            return [{"hostname": v} if isinstance(v, str) else v for v in value]
        return value

    @model_validator(mode="after")
    def _unique_nodes(self) -> "HarnessSettings":
        if not self.nodes:
            raise ValueError("at least one node is required")
        names = [n.hostname for n in self.nodes]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ValueError(f"duplicate node hostnames: {', '.join(dupes)}")
        return self

    def node(self, hostname: str) -> NodeSpec:
        for n in self.nodes:
            if n.hostname == hostname:
                return n
        raise KeyError(hostname)

    @property
    def node_names(self) -> List[str]:
        return [n.hostname for n in self.nodes]
