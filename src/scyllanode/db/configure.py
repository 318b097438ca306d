# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/db/configure.py
"""
scylla.yaml generation.

The packaged scylla.yaml is saved once as scylla.yaml.orig and every configure
rebuilds scylla.yaml from that copy, so the result depends only on the run
context and the node, never on what an earlier configure left behind.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..cluster.context import TestRunContext
from ..remote.pool import Remote
from ..utils.shell import shq
from .paths import CONFIG_PATH, DEFAULTS_PATH, PRISTINE_CONFIG_PATH
from .render import TemplateRenderer

log = logging.getLogger("scyllanode")


@dataclass(frozen=True)
class ConfigParams:
    cluster_name: str
    seeds: str
    listen_address: str
    rpc_address: str
    broadcast_rpc_address: str
    hinted_handoff_enabled: bool
    phi_threshold: int
    commitlog_compression: bool

    @classmethod
    def for_node(cls, ctx: TestRunContext, node: str, broadcast_rpc_address: str) -> "ConfigParams":
        addr = ctx.address_of(node)
        tuning = ctx.settings.tuning
        return cls(
            cluster_name=ctx.settings.cluster_name,
            seeds=ctx.seeds(),
            listen_address=addr,
            rpc_address=addr,
            broadcast_rpc_address=broadcast_rpc_address,
            hinted_handoff_enabled=tuning.hinted_handoff_enabled,
            phi_threshold=tuning.phi_threshold,
            commitlog_compression=tuning.commitlog_compression,
        )


Rule = Tuple[str, Optional[str]]     # (pattern, replacement); None deletes the line


def substitution_rules(params: ConfigParams) -> List[Rule]:
    """Line rewrites in the order they are applied."""
    rules: List[Rule] = [
        (r".*cluster_name: .*", f"cluster_name: '{params.cluster_name}'"),
        (r"row_cache_size_in_mb: .*", "row_cache_size_in_mb: 20"),
        (r"seeds: .*", f"seeds: '{params.seeds}'"),
        (r"listen_address: .*", f"listen_address: {params.listen_address}"),
        (r"rpc_address: .*", f"rpc_address: {params.rpc_address}"),
        (r"broadcast_rpc_address: .*", f"broadcast_rpc_address: {params.broadcast_rpc_address}"),
        (r"internode_compression: .*", "internode_compression: none"),
        (r"hinted_handoff_enabled:.*", f"hinted_handoff_enabled: {str(params.hinted_handoff_enabled).lower()}"),
        (r"commitlog_sync: .*", "commitlog_sync: batch"),
        (r"# commitlog_sync_batch_window_in_ms: .*", "commitlog_sync_batch_window_in_ms: 1"),
        (r"commitlog_sync_period_in_ms: .*", "#"),
        (r"# phi_convict_threshold: .*", f"phi_convict_threshold: {params.phi_threshold}"),
        (r"# developer_mode: false", "developer_mode: true"),
        (r"auto_bootstrap: .*", None),
    ]
    if params.commitlog_compression:
        rules += [
            (r"#commitlog_compression.*", "commitlog_compression:"),
            (r"#   - class_name: LZ4Compressor", "    - class_name: LZ4Compressor"),
        ]
    return rules


def _apply(text: str, pattern: str, replacement: Optional[str]) -> str:
    rx = re.compile(pattern)
    if replacement is None:
        return "".join(line for line in text.splitlines(keepends=True) if not rx.search(line))
    # callable replacement so addresses and names are never read as group refs
    return rx.sub(lambda _m: replacement, text)


def render_config(pristine: str, params: ConfigParams) -> str:
    """Build the node's scylla.yaml from the packaged one."""
    text = pristine
    for pattern, replacement in substitution_rules(params):
        text = _apply(text, pattern, replacement)
    if text and not text.endswith("\n"):
        text += "\n"
    return text + "auto_bootstrap: true\n"


def local_ip(remote: Remote, node: str) -> str:
    """First address the node reports for itself."""
    out = remote.execute(node, "hostname -I", sudo=False).split()
    if not out:
        raise ValueError(f"{node} reported no local addresses")
    return out[0]


class ConfigWriter:
    def __init__(
        self,
        remote: Remote,
        ctx: TestRunContext,
        renderer: Optional[TemplateRenderer] = None,
        broadcast_address: Optional[Callable[[str], str]] = None,
    ):
        self.remote = remote
        self.ctx = ctx
        self.renderer = renderer or TemplateRenderer()
        self._broadcast_address = broadcast_address or (lambda node: local_ip(remote, node))

    def configure(self, node: str) -> str:
        """Regenerate the node's configuration files; returns the scylla.yaml written."""
        log.info("[%s] configuring ScyllaDB", node)
        defaults = self.renderer.render("scylla-server.default.j2", {"node": node})
        self.remote.upload_text(node, defaults, DEFAULTS_PATH)

        if not self.remote.exists(node, PRISTINE_CONFIG_PATH):
            self.remote.execute(node, f"cp -p {shq(CONFIG_PATH)} {shq(PRISTINE_CONFIG_PATH)}")
        pristine = self.remote.read_text(node, PRISTINE_CONFIG_PATH)

        params = ConfigParams.for_node(self.ctx, node, self._broadcast_address(node))
        document = render_config(pristine, params)
        self.remote.upload_text(node, document, CONFIG_PATH)
        log.debug("[%s] wrote %s (seeds=%s)", node, CONFIG_PATH, params.seeds)
        return document
