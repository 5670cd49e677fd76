from __future__ import annotations

from rs.core.result import Err, Ok
from rs.reconciler import (
    CONTINUE,
    STOP,
    Continue,
    Requeue,
    Stop,
    continue_processing,
    requeue,
    requeue_on_error_or_continue,
    requeue_on_error_or_stop,
    requeue_with_error,
    stop_processing,
)
from rs.store import StoreError

_ERROR = StoreError(kind="conflict", message="stale")


def test_plain_helpers() -> None:
    assert continue_processing() == Continue()
    assert stop_processing() == Stop()
    assert requeue() == Requeue(error=None)
    assert requeue_with_error(_ERROR) == Requeue(error=_ERROR)


def test_on_error_or_continue() -> None:
    assert requeue_on_error_or_continue(Ok(None)) is CONTINUE
    assert requeue_on_error_or_continue(Err(_ERROR)) == Requeue(error=_ERROR)


def test_on_error_or_stop() -> None:
    assert requeue_on_error_or_stop(Ok(None)) is STOP
    assert requeue_on_error_or_stop(Err(_ERROR)) == Requeue(error=_ERROR)
