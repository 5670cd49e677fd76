"""Reconciliation primitives: outcomes, chain dispatch, driver."""

from .chain import Operation, run_operations
from .driver import Driver, DriverReport, WorkQueue
from .outcome import (
    CONTINUE,
    STOP,
    Continue,
    ErrorLike,
    Outcome,
    Requeue,
    Stop,
    continue_processing,
    requeue,
    requeue_on_error_or_continue,
    requeue_on_error_or_stop,
    requeue_with_error,
    stop_processing,
)

__all__ = [
    "CONTINUE",
    "STOP",
    "Continue",
    "Driver",
    "DriverReport",
    "ErrorLike",
    "Operation",
    "Outcome",
    "Requeue",
    "Stop",
    "WorkQueue",
    "continue_processing",
    "requeue",
    "requeue_on_error_or_continue",
    "requeue_on_error_or_stop",
    "requeue_with_error",
    "run_operations",
    "stop_processing",
]
