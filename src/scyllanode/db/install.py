# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/db/install.py

from __future__ import annotations

import logging
from typing import Optional

from ..config.models import PackageSettings
from ..remote.pool import Remote
from ..utils.shell import shq
from ..status.management import MANAGEMENT_PORT
from .debian import Debian
from .paths import AGENT_DIR, AGENT_JAR, JMX_DEFAULTS_PATH, LOG_DIR, LOG_FILE, RSYSLOG_PATH, START_SCRIPT_PATH
from .render import TemplateRenderer

log = logging.getLogger("scyllanode")


class PackageInstaller:
    """
    Puts ScyllaDB and its tools on a node:
      - versioned apt repository + packages (NTP removed, it breaks in containers)
      - syslog routing into a single log file the harness collects
      - /start-scylla.sh for running a binary in the foreground
      - the Jolokia JVM agent on scylla-jmx, so StorageService attributes
        can be read over HTTP on management_port
    """

    def __init__(
        self,
        remote: Remote,
        packages: PackageSettings,
        renderer: Optional[TemplateRenderer] = None,
        debian: Optional[Debian] = None,
        management_port: int = MANAGEMENT_PORT,
    ):
        self.remote = remote
        self.packages = packages
        self.renderer = renderer or TemplateRenderer()
        self.debian = debian or Debian(remote)
        self.management_port = management_port

    def install(self, node: str, version: str) -> None:
        log.info("[%s] installing ScyllaDB %s", node, version)
        p = self.packages
        self.debian.add_repo(node, p.repo_name, p.repo_line(version), p.keyserver, p.key_id)
        self.debian.install(node, p.packages)

        self._configure_logging(node)
        self._upload_start_script(node, version)
        self._attach_management_agent(node)

    def _configure_logging(self, node: str) -> None:
        log.info("[%s] configuring scylla logging", node)
        self.remote.execute(node, f"mkdir -p {shq(LOG_DIR)}")
        self.remote.execute(node, f"install -o root -g adm -m 0640 /dev/null {shq(LOG_FILE)}")
        conf = self.renderer.render("rsyslog-scylla.conf.j2", {"log_file": LOG_FILE})
        self.remote.upload_text(node, conf, RSYSLOG_PATH)
        self.remote.execute(node, "service rsyslog restart")

    def _upload_start_script(self, node: str, version: str) -> None:
        script = self.renderer.render("start-scylla.sh.j2", {"version": version, "log_file": LOG_FILE})
        self.remote.upload_text(node, script, START_SCRIPT_PATH)
        self.remote.execute(node, f"chmod +x {shq(START_SCRIPT_PATH)}")

    def agent_jvm_opts(self) -> str:
        return f'JVM_OPTS="-javaagent:{AGENT_JAR}=port={self.management_port},host=0.0.0.0"'

    def _attach_management_agent(self, node: str) -> None:
        log.info("[%s] attaching Jolokia agent to scylla-jmx (port %d)", node, self.management_port)
        if not self.remote.exists(node, AGENT_JAR):
            self.debian.install(node, ["curl"])
            self.remote.execute(node, f"mkdir -p {shq(AGENT_DIR)}")
            self.remote.execute(node, f"curl -fsSL -o {shq(AGENT_JAR)} {shq(self.packages.agent_url())}")

        # replace only our JVM_OPTS line
        defaults = shq(JMX_DEFAULTS_PATH)
        self.remote.execute(
            node,
            f"touch {defaults} && sed -i '/^JVM_OPTS=.*jolokia/d' {defaults} "
            f"&& echo {shq(self.agent_jvm_opts())} >> {defaults}",
        )
