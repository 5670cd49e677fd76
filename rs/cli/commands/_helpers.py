from __future__ import annotations

from pathlib import Path

import typer

from rs.api.meta import NamespacedName, parse_namespaced_name
from rs.cli.context import CLIContext
from rs.core.errors import ErrorCode
from rs.core.result import Err
from rs.store.memory import MemoryStore
from rs.store.state_file import load_state, save_state


def load_store_or_exit(ctx: CLIContext, path: Path) -> MemoryStore:
    loaded = load_state(path)
    if isinstance(loaded, Err):
        ctx.console.error(loaded.error.message)
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))
    return loaded.value


def save_store_or_exit(ctx: CLIContext, store: MemoryStore, path: Path) -> None:
    saved = save_state(store, path)
    if isinstance(saved, Err):
        ctx.console.error(saved.error.message)
        raise typer.Exit(code=int(ErrorCode.IO_ERROR))


def parse_key_or_exit(ctx: CLIContext, value: str) -> NamespacedName:
    parsed = parse_namespaced_name(value)
    if isinstance(parsed, Err):
        ctx.console.error(parsed.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return parsed.value
