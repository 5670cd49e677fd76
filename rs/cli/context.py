from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from rs.core.config import Config, default_config_path, load_config_or_default
from rs.core.errors import ErrorCode
from rs.core.result import Err
from rs.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol


def build_context(config_path: Path | None = None) -> CLIContext:
    path = config_path if config_path is not None else default_config_path()
    config_result = load_config_or_default(path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(config=config_result.value, console=RichConsole())
