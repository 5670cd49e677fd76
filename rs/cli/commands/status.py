"""Status command - tabulate Releases and their conditions."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from rs.api import Release
from rs.api.meta import find_status_condition
from rs.api.release import DEPLOYED_CONDITION, SUCCEEDED_CONDITION
from rs.cli.commands._helpers import load_store_or_exit
from rs.cli.context import build_context

_console = Console(legacy_windows=False)

_STATUS_COLORS = {"True": "green", "False": "red", "Unknown": "yellow"}


def status(
    state: Path = typer.Option(..., "--state", help="JSON cluster state file."),
) -> None:
    """Show every Release with its Succeeded and Deployed conditions."""
    ctx = build_context()
    store = load_store_or_exit(ctx, state)

    releases = store.objects(Release)
    if not releases:
        ctx.console.info("no releases")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Release")
    table.add_column("Succeeded")
    table.add_column("Deployed")
    table.add_column("PipelineRun")
    table.add_column("Binding")

    for release in releases:
        table.add_row(
            str(release.key),
            _condition_cell(release, SUCCEEDED_CONDITION),
            _condition_cell(release, DEPLOYED_CONDITION),
            release.status.release_pipeline_run or "-",
            release.status.snapshot_environment_binding or "-",
        )

    _console.print(table)


def _condition_cell(release: Release, condition_type: str) -> str:
    condition = find_status_condition(release.status.conditions, condition_type)
    if condition is None:
        return "-"
    color = _STATUS_COLORS.get(condition.status, "white")
    reason = f" ({condition.reason})" if condition.reason else ""
    return f"[{color}]{condition.status}[/{color}]{reason}"
