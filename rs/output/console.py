"""Console output abstraction.

The controller never uses ``logging``: adapters, the driver and the CLI all
report through a ``ConsoleProtocol``. Production uses Rich; tests use
``MockConsole`` and assert on the captured records.

Events carry optional ``key=value`` fields appended to the message, e.g.::

    console.info("Created release PipelineRun", name="release-pipelinerun-x7k2p")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
    "format_fields",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


def format_fields(message: str, fields: dict[str, object]) -> str:
    """Append ``key=value`` pairs to ``message`` in insertion order."""
    if not fields:
        return message
    pairs = " ".join(f"{k}={v}" for k, v in fields.items())
    return f"{message} {pairs}"


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT, **fields: object) -> None: ...

    def success(self, message: str, **fields: object) -> None: ...

    def error(self, message: str, **fields: object) -> None: ...

    def warning(self, message: str, **fields: object) -> None: ...

    def info(self, message: str, **fields: object) -> None: ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


class RichConsole:
    """Console implementation using Rich.

    Args:
        stderr: Write to stderr, keeping stdout free for machine-readable output.
    """

    def __init__(self, *, stderr: bool = False) -> None:
        from rich.console import Console

        # highlight=False: key=value fields would otherwise get random colors
        self._console = Console(stderr=stderr, highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "blue bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT, **fields: object) -> None:
        text = format_fields(message, fields)
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(text, style=rich_style, markup=False)
        else:
            self._console.print(text, markup=False)

    def success(self, message: str, **fields: object) -> None:
        self._prefixed("[green]OK[/green]", format_fields(message, fields))

    def error(self, message: str, **fields: object) -> None:
        self._prefixed("[red bold]error:[/red bold]", format_fields(message, fields))

    def warning(self, message: str, **fields: object) -> None:
        self._prefixed("[yellow]warning:[/yellow]", format_fields(message, fields))

    def info(self, message: str, **fields: object) -> None:
        self._prefixed("[cyan]info:[/cyan]", format_fields(message, fields))

    def header(self, message: str) -> None:
        from rich.text import Text

        self._console.print()
        self._console.print(Text(message, style="blue bold"))

    def newline(self) -> None:
        self._console.print()

    def _prefixed(self, prefix: str, text: str) -> None:
        from rich.markup import escape

        # resource names may contain '[' which rich would read as markup
        self._console.print(f"{prefix} {escape(text)}")


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style
    fields: dict[str, object] = field(default_factory=dict)


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT, **fields: object) -> None:
        self.outputs.append(OutputRecord(message, style, dict(fields)))

    def success(self, message: str, **fields: object) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS, dict(fields)))

    def error(self, message: str, **fields: object) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR, dict(fields)))

    def warning(self, message: str, **fields: object) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING, dict(fields)))

    def info(self, message: str, **fields: object) -> None:
        self.outputs.append(OutputRecord(f"info: {message}", Style.INFO, dict(fields)))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    # Test helper methods

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        """All output, fields rendered, newline-separated."""
        return "\n".join(format_fields(o.message, o.fields) for o in self.outputs)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs whose message contains a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
