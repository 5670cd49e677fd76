"""Simulate external completion of PipelineRuns and deployments."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer

from rs.api import PipelineRun, SnapshotEnvironmentBinding
from rs.api.application import ALL_COMPONENTS_DEPLOYED_CONDITION
from rs.api.meta import (
    CONDITION_FALSE,
    CONDITION_TRUE,
    CONDITION_UNKNOWN,
    Condition,
    ConditionStatus,
    now,
    set_status_condition,
)
from rs.api.pipeline import SUCCEEDED_CONDITION
from rs.cli.commands._helpers import load_store_or_exit, parse_key_or_exit, save_store_or_exit
from rs.cli.context import CLIContext, build_context
from rs.core.errors import ErrorCode
from rs.core.result import Err
from rs.store.errors import StoreError

simulate_app = typer.Typer(
    no_args_is_help=True,
    help="Act as the pipeline engine or the deployment system.",
    add_completion=False,
)

_STATUSES: tuple[ConditionStatus, ...] = (CONDITION_TRUE, CONDITION_FALSE, CONDITION_UNKNOWN)


@simulate_app.command("pipelinerun")
def pipelinerun(
    key: str = typer.Argument(..., help="PipelineRun as namespace/name."),
    state: Path = typer.Option(..., "--state", help="JSON cluster state file."),
    succeeded: bool = typer.Option(True, "--succeeded/--failed", help="Outcome of the run."),
    message: str = typer.Option("", "--message", help="Condition message."),
) -> None:
    """Mark a PipelineRun as finished."""
    ctx = build_context()
    store = load_store_or_exit(ctx, state)

    fetched = store.get(PipelineRun, parse_key_or_exit(ctx, key))
    if isinstance(fetched, Err):
        _fail(ctx, fetched.error)
    run = fetched.value

    resource_version = run.metadata.resource_version
    set_status_condition(
        run.status.conditions,
        Condition(
            type=SUCCEEDED_CONDITION,
            status=CONDITION_TRUE if succeeded else CONDITION_FALSE,
            reason="Succeeded" if succeeded else "Failed",
            message=message,
        ),
    )
    run.status.completion_time = now()

    patched = store.patch(run, resource_version=resource_version)
    if isinstance(patched, Err):
        _fail(ctx, patched.error)

    save_store_or_exit(ctx, store, state)
    ctx.console.success(f"PipelineRun {run.key} {'succeeded' if succeeded else 'failed'}")


@simulate_app.command("binding")
def binding(
    key: str = typer.Argument(..., help="SnapshotEnvironmentBinding as namespace/name."),
    state: Path = typer.Option(..., "--state", help="JSON cluster state file."),
    status: str = typer.Option(..., "--status", help="True, False or Unknown."),
    reason: str = typer.Option("", "--reason", help="Condition reason."),
    message: str = typer.Option("", "--message", help="Condition message."),
) -> None:
    """Set the AllComponentsDeployed condition of a binding."""
    ctx = build_context()
    if status not in _STATUSES:
        ctx.console.error(f"invalid --status '{status}'", expected="True|False|Unknown")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    condition_status: ConditionStatus = status  # type: ignore[assignment]

    store = load_store_or_exit(ctx, state)
    fetched = store.get(SnapshotEnvironmentBinding, parse_key_or_exit(ctx, key))
    if isinstance(fetched, Err):
        _fail(ctx, fetched.error)
    seb = fetched.value

    resource_version = seb.metadata.resource_version
    set_status_condition(
        seb.status.component_deployment_conditions,
        Condition(
            type=ALL_COMPONENTS_DEPLOYED_CONDITION,
            status=condition_status,
            reason=reason,
            message=message,
        ),
    )

    patched = store.patch(seb, resource_version=resource_version)
    if isinstance(patched, Err):
        _fail(ctx, patched.error)

    save_store_or_exit(ctx, store, state)
    ctx.console.success(f"SnapshotEnvironmentBinding {seb.key} {ALL_COMPONENTS_DEPLOYED_CONDITION}={status}")


def _fail(ctx: CLIContext, error: StoreError) -> NoReturn:
    ctx.console.error(error.message)
    code = ErrorCode.USER_ERROR if error.is_not_found else ErrorCode.IO_ERROR
    raise typer.Exit(code=int(code))
