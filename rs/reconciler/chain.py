from __future__ import annotations

from collections.abc import Callable, Sequence

from .outcome import CONTINUE, Continue, Outcome

Operation = Callable[[], Outcome]


def run_operations(operations: Sequence[Operation]) -> Outcome:
    """Run ``operations`` in order, stopping at the first non-continue outcome."""
    for operation in operations:
        outcome = operation()
        if not isinstance(outcome, Continue):
            return outcome
    return CONTINUE
