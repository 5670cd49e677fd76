"""Helpers for reading untyped structures (JSON state files, TOML config).

Every resource decoder goes through these so a malformed document degrades to
``None``/defaults instead of blowing up with a ``KeyError`` deep inside a
reconciliation pass.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped. Empty strings read as missing."""
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    value = table.get(key)
    # bool is an int subclass; a TOML `true` is not a count
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def get_float(table: Mapping[str, object], key: str) -> float | None:
    value = table.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    value = table.get(key)
    if not isinstance(value, bool):
        return None
    return value


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def get_list(table: Mapping[str, object], key: str) -> ObjList | None:
    return as_obj_list(table.get(key))


def get_str_map(table: Mapping[str, object], key: str) -> dict[str, str]:
    """Get a ``{str: str}`` mapping (labels, annotations).

    Non-string values are dropped rather than coerced.
    """
    raw = get_table(table, key)
    if raw is None:
        return {}
    return {k: v for k, v in raw.items() if isinstance(v, str)}


def get_str_list(table: Mapping[str, object], key: str) -> list[str]:
    raw = get_list(table, key)
    if raw is None:
        return []
    return [item for item in raw if isinstance(item, str)]


def get_table_list(table: Mapping[str, object], key: str) -> list[StrDict]:
    raw = get_list(table, key)
    if raw is None:
        return []
    out: list[StrDict] = []
    for item in raw:
        d = as_str_dict(item)
        if d is not None:
            out.append(d)
    return out
