from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from rs.store.errors import StoreError

ReleaseErrorKind = Literal[
    "multiple_admissions",
    "auto_release_disabled",
    "no_admission",
    "not_found",
    "store_failed",
    "ownership",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str

    @property
    def is_transient(self) -> bool:
        """Store trouble worth retrying, as opposed to a state only a user can fix."""
        return self.kind == "store_failed"


def from_store_error(error: StoreError) -> ReleaseError:
    if error.is_not_found:
        return ReleaseError(kind="not_found", message=error.message)
    return ReleaseError(kind="store_failed", message=error.message)
