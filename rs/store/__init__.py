"""Resource store: contract, in-memory implementation and state file."""

from .errors import StoreError, StoreErrorKind
from .indexes import (
    APPLICATION_FIELD,
    ENVIRONMENT_FIELD,
    ORIGIN_FIELD,
    new_indexed_store,
    register_default_indexes,
)
from .memory import MemoryStore
from .protocol import ResourceStore
from .state_file import StateFileError, load_state, save_state

__all__ = [
    "APPLICATION_FIELD",
    "ENVIRONMENT_FIELD",
    "ORIGIN_FIELD",
    "MemoryStore",
    "ResourceStore",
    "StateFileError",
    "StoreError",
    "StoreErrorKind",
    "load_state",
    "new_indexed_store",
    "register_default_indexes",
    "save_state",
]
