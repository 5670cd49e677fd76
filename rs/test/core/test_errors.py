"""Tests for rs.core.errors module."""

from rs.core.errors import ErrorCode


def test_values_are_stable() -> None:
    assert int(ErrorCode.OK) == 0
    assert int(ErrorCode.USER_ERROR) == 1
    assert int(ErrorCode.ENV_ERROR) == 2
    assert int(ErrorCode.RECONCILE_ERROR) == 3
    assert int(ErrorCode.IO_ERROR) == 5


def test_str() -> None:
    assert str(ErrorCode.RECONCILE_ERROR) == "reconcile error"
