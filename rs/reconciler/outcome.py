"""Three-way result of a reconcile operation.

``Stop`` and ``Requeue`` are ordinary control paths (a release was marked
invalid, a finalizer was removed), so they are values, not exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from rs.core.result import Err, Result


class ErrorLike(Protocol):
    @property
    def message(self) -> str: ...


@dataclass(frozen=True, slots=True)
class Continue:
    """Run the next operation in the chain."""


@dataclass(frozen=True, slots=True)
class Stop:
    """End this pass; nothing left to do until the next change."""


@dataclass(frozen=True, slots=True)
class Requeue:
    """End this pass and schedule another one.

    With an ``error`` the retry is backed off and reported; without one it is
    immediate.
    """

    error: ErrorLike | None = None


type Outcome = Continue | Stop | Requeue

CONTINUE = Continue()
STOP = Stop()


def continue_processing() -> Outcome:
    return CONTINUE


def stop_processing() -> Outcome:
    return STOP


def requeue() -> Outcome:
    return Requeue()


def requeue_with_error(error: ErrorLike) -> Outcome:
    return Requeue(error=error)


def requeue_on_error_or_continue(result: Result[object, ErrorLike]) -> Outcome:
    if isinstance(result, Err):
        return Requeue(error=result.error)
    return CONTINUE


def requeue_on_error_or_stop(result: Result[object, ErrorLike]) -> Outcome:
    if isinstance(result, Err):
        return Requeue(error=result.error)
    return STOP
