from __future__ import annotations

import typer

from rs import __version__
from rs.cli.commands.reconcile import reconcile
from rs.cli.commands.simulate import simulate_app
from rs.cli.commands.status import status


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(reconcile)
app.command()(status)

# Sub-apps
app.add_typer(simulate_app, name="simulate")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Release reconciliation controller."""


def main() -> None:
    app()
