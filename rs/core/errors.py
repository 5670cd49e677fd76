"""Error codes for CLI exit status."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (bad arguments, unknown release)
    - 2: Environment error (unreadable config)
    - 3: Reconcile error (passes ended with errors or budget exhausted)
    - 5: I/O error (state file missing or malformed)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    RECONCILE_ERROR = 3
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
