"""Reconcile command - drive Releases in a state file until they settle."""

from __future__ import annotations

from pathlib import Path

import typer

from rs.api import Release
from rs.cli.commands._helpers import load_store_or_exit, parse_key_or_exit, save_store_or_exit
from rs.cli.context import build_context
from rs.controllers.release import setup_controller
from rs.core.errors import ErrorCode


def reconcile(
    state: Path = typer.Option(..., "--state", help="JSON cluster state file (rewritten in place)."),
    release: str | None = typer.Option(
        None, "--release", help="Only enqueue this Release (namespace/name)."
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: $RS_CONFIG or ./rs.toml)."
    ),
    max_passes: int | None = typer.Option(
        None, "--max-passes", min=1, help="Override [controller] max_passes."
    ),
    timeout: float = typer.Option(
        30.0, "--timeout", min=0.0, help="Give up on keys backed off longer than this (seconds)."
    ),
) -> None:
    """Reconcile Releases until nothing is left to do."""
    ctx = build_context(config)
    store = load_store_or_exit(ctx, state)
    driver = setup_controller(store, ctx.config, ctx.console)

    if release is not None:
        driver.enqueue(parse_key_or_exit(ctx, release))
    else:
        for obj in store.objects(Release):
            driver.enqueue(obj.key)

    report = driver.run_until_idle(max_passes=max_passes, timeout=timeout)
    save_store_or_exit(ctx, store, state)

    summary = f"{report.passes} pass(es), {report.errors} error(s)"
    if not report.idle:
        ctx.console.warning(f"stopped with work still queued: {summary}", queued=len(driver.queue))
        raise typer.Exit(code=int(ErrorCode.RECONCILE_ERROR))

    ctx.console.success(f"settled: {summary}")
