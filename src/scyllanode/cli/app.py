# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/scyllanode/cli/app.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional

import typer

from scyllanode.cluster.context import TestRunContext
from scyllanode.config.loader import load_settings
from scyllanode.lifecycle.controller import LifecycleController
from scyllanode.logging.log import init_logging
from scyllanode.observers.dispatcher import EventBus
from scyllanode.observers.logger import LoggerObserver
from scyllanode.remote.pool import Remote

app = typer.Typer(help="ScyllaDB node lifecycle for fault-injection test runs")


@dataclass
class Harness:
    ctx: TestRunContext
    remote: Remote
    controller: LifecycleController


def build_harness(config: Path, *, debug: bool = False, log_dir: Optional[Path] = None) -> Harness:
    logger, run_id, log_path = init_logging(base_dir=log_dir, verbose=debug)
    settings = load_settings(config)
    ctx = TestRunContext.create(settings, run_id=run_id)
    remote = Remote(settings)
    bus = EventBus(observers=[LoggerObserver(logger)])
    controller = LifecycleController(ctx, remote, bus=bus)
    typer.echo(f"  Run ID   : {run_id}")
    typer.echo(f"  Logs     : {log_path}")
    return Harness(ctx=ctx, remote=remote, controller=controller)


def run_on_nodes(nodes: List[str], fn: Callable[[str], object]) -> Dict[str, Optional[BaseException]]:
    """Run fn once per node, concurrently. Returns node -> exception (None on success)."""
    results: Dict[str, Optional[BaseException]] = {}
    with ThreadPoolExecutor(max_workers=max(1, len(nodes)), thread_name_prefix="node") as pool:
        futures = {node: pool.submit(fn, node) for node in nodes}
        for node, fut in futures.items():
            results[node] = fut.exception()
    return results


def _report(action: str, results: Dict[str, Optional[BaseException]]) -> None:
    failed = {n: e for n, e in results.items() if e is not None}
    for node, exc in results.items():
        if exc is None:
            typer.echo(f"  {node}: {action} ok")
        else:
            typer.secho(f"  {node}: {action} FAILED: {exc}", fg=typer.colors.RED)
    if failed:
        raise typer.Exit(code=1)


def _select(harness: Harness, nodes: Optional[List[str]]) -> List[str]:
    if not nodes:
        return list(harness.ctx.nodes)
    unknown = [n for n in nodes if n not in harness.ctx.nodes]
    if unknown:
        raise typer.BadParameter(f"unknown node(s): {', '.join(unknown)}")
    return nodes


@app.command()
def setup(
    config: Path = typer.Argument(..., help="Run definition YAML"),
    node: Optional[List[str]] = typer.Option(None, "--node", help="Limit to these nodes"),
    debug: bool = typer.Option(False, "--debug"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir"),
):
    """Install, configure and start every node, then wait for the cluster to converge."""
    harness = build_harness(config, debug=debug, log_dir=log_dir)
    try:
        results = run_on_nodes(_select(harness, node), harness.controller.setup)
    finally:
        harness.remote.close()
    _report("setup", results)


@app.command()
def teardown(
    config: Path = typer.Argument(..., help="Run definition YAML"),
    node: Optional[List[str]] = typer.Option(None, "--node", help="Limit to these nodes"),
    debug: bool = typer.Option(False, "--debug"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir"),
):
    """Stop ScyllaDB and delete its data and log files."""
    harness = build_harness(config, debug=debug, log_dir=log_dir)
    try:
        results = run_on_nodes(_select(harness, node), harness.controller.teardown)
    finally:
        harness.remote.close()
    _report("teardown", results)


@app.command()
def stop(
    config: Path = typer.Argument(..., help="Run definition YAML"),
    node: str = typer.Argument(..., help="Node to stop"),
    debug: bool = typer.Option(False, "--debug"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir"),
):
    """Stop ScyllaDB on one node, blocking until no process remains."""
    harness = build_harness(config, debug=debug, log_dir=log_dir)
    try:
        results = run_on_nodes(_select(harness, [node]), harness.controller.stop)
    finally:
        harness.remote.close()
    _report("stop", results)


@app.command()
def status(
    config: Path = typer.Argument(..., help="Run definition YAML"),
    debug: bool = typer.Option(False, "--debug"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir"),
):
    """Print the live and joining node sets as seen by a random cluster member, and the client-side tuning."""
    harness = build_harness(config, debug=debug, log_dir=log_dir)
    prober = harness.controller.prober
    try:
        live = prober.live_nodes(harness.ctx)
        joining = prober.joining_nodes(harness.ctx)
    finally:
        harness.remote.close()
    typer.echo(f"live    : {', '.join(sorted(live)) or '-'}")
    typer.echo(f"joining : {', '.join(sorted(joining)) or '-'}")
    client = harness.ctx.settings.tuning.client_options()
    batchlog = "on" if client["coordinator_batchlog"] else "off"
    typer.echo(f"tuning  : compaction={client['compaction']['class']}, coordinator_batchlog={batchlog}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
