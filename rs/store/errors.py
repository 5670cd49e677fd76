"""Store error taxonomy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

StoreErrorKind = Literal[
    "not_found",
    "conflict",
    "already_exists",
    "invalid",
    "transport",
]


@dataclass(frozen=True, slots=True)
class StoreError:
    """A failed store call.

    ``not_found`` is kept distinct from every other kind: callers treat it as
    an expected state on lookups and as a validation failure on required
    references, while everything else is retried by requeue.
    """

    kind: StoreErrorKind
    message: str

    def __str__(self) -> str:
        return self.message

    @property
    def is_not_found(self) -> bool:
        return self.kind == "not_found"


def not_found(kind: str, key: object) -> StoreError:
    return StoreError(kind="not_found", message=f'{kind} "{key}" not found')
