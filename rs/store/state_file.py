"""JSON cluster-state file: ``{"items": [<object>, ...]}``.

Loading preserves resource versions and uids so a saved file can be
reconciled again later without spurious conflicts.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from rs.api import decode_resource
from rs.core.result import Err, Ok, Result
from rs.core.structured import as_str_dict, get_list

from .indexes import new_indexed_store
from .memory import MemoryStore


@dataclass(frozen=True, slots=True)
class StateFileError:
    message: str
    path: Path


def load_state(path: Path) -> Result[MemoryStore, StateFileError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(StateFileError(message=f"state file not found: {path}", path=path))
    except OSError as e:
        return Err(StateFileError(message=f"cannot read state file: {e}", path=path))

    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(StateFileError(message=f"invalid JSON in state file: {e}", path=path))

    data = as_str_dict(obj)
    items = get_list(data, "items") if data is not None else None
    if items is None:
        return Err(StateFileError(message="state file must be an object with 'items'", path=path))

    store = new_indexed_store()
    for index, item in enumerate(items):
        item_dict = as_str_dict(item)
        if item_dict is None:
            return Err(StateFileError(message=f"items[{index}] is not an object", path=path))
        decoded = decode_resource(item_dict)
        if isinstance(decoded, Err):
            return Err(StateFileError(message=f"items[{index}]: {decoded.error.message}", path=path))

        loaded = store.load(decoded.value)
        if isinstance(loaded, Err):
            return Err(StateFileError(message=f"items[{index}]: {loaded.error.message}", path=path))

    return Ok(store)


def save_state(store: MemoryStore, path: Path) -> Result[None, StateFileError]:
    """Atomically write every object in ``store`` to ``path``."""
    payload = {"items": [obj.to_dict() for obj in store.all_objects()]}
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(prefix=".state-", suffix=".json", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
            f.write("\n")
        os.replace(temp_path, path)
    except OSError as e:
        return Err(StateFileError(message=f"cannot write state file: {e}", path=path))
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)
    return Ok(None)
