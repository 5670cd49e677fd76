"""In-memory resource store.

Backs the CLI (loaded from a JSON state file) and every test. It mimics the
parts of an API server the controller depends on:

- resource versions, and conflicts on stale patches
- ``generate_name``
- field indexes and label selectors
- finalizer-gated deletion and cascade deletion through owner references
- change notifications for the driver's watches
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Literal
from uuid import uuid4

from rs.api.meta import NamespacedName, Resource, now
from rs.core.result import Err, Ok, Result

from .errors import StoreError, not_found

StoreOp = Literal["get", "list", "create", "patch", "delete"]
EventType = Literal["added", "modified", "deleted"]
FieldExtractor = Callable[[Resource], str]
Listener = Callable[[EventType, Resource], None]

_NAME_SUFFIX_LEN = 5


@dataclass(frozen=True, slots=True)
class _Fault:
    op: StoreOp
    kind: str | None
    error: StoreError


type _Key = tuple[str, str, str]


def _key(kind: str, namespace: str, name: str) -> _Key:
    return (kind, namespace, name)


class MemoryStore:
    def __init__(self) -> None:
        self._objects: dict[_Key, Resource] = {}
        self._indexes: dict[str, dict[str, FieldExtractor]] = {}
        self._listeners: list[Listener] = []
        self._faults: list[_Fault] = []
        self._version = 0

    # --- configuration -------------------------------------------------------

    def index_field(self, kind: type[Resource], field_name: str, extract: FieldExtractor) -> None:
        """Register ``field_name`` as selectable in ``list(fields=...)`` for ``kind``."""
        self._indexes.setdefault(kind.KIND, {})[field_name] = extract

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def fail_next(
        self,
        op: StoreOp,
        *,
        kind: type[Resource] | None = None,
        error: StoreError | None = None,
    ) -> None:
        """Make the next matching call fail once (test hook)."""
        self._faults.append(
            _Fault(
                op=op,
                kind=kind.KIND if kind is not None else None,
                error=error or StoreError(kind="transport", message=f"injected {op} failure"),
            )
        )

    # --- ResourceStore -------------------------------------------------------

    def get[T: Resource](self, kind: type[T], key: NamespacedName) -> Result[T, StoreError]:
        fault = self._take_fault("get", kind.KIND)
        if fault is not None:
            return Err(fault)

        obj = self._objects.get(_key(kind.KIND, key.namespace, key.name))
        if obj is None:
            return Err(not_found(kind.KIND, key))
        return Ok(copy.deepcopy(obj))  # type: ignore[arg-type]

    def list[T: Resource](
        self,
        kind: type[T],
        *,
        namespace: str | None = None,
        fields: Mapping[str, str] | None = None,
        labels: Mapping[str, str] | None = None,
        limit: int | None = None,
    ) -> Result[list[T], StoreError]:
        fault = self._take_fault("list", kind.KIND)
        if fault is not None:
            return Err(fault)

        extractors: list[tuple[FieldExtractor, str]] = []
        for field_name, expected in (fields or {}).items():
            extract = self._indexes.get(kind.KIND, {}).get(field_name)
            if extract is None:
                return Err(
                    StoreError(
                        kind="invalid",
                        message=f"field '{field_name}' is not indexed for {kind.KIND}",
                    )
                )
            extractors.append((extract, expected))

        out: list[T] = []
        for (obj_kind, obj_ns, _), obj in sorted(self._objects.items()):
            if obj_kind != kind.KIND:
                continue
            if namespace is not None and obj_ns != namespace:
                continue
            if any(extract(obj) != expected for extract, expected in extractors):
                continue
            if labels and any(obj.metadata.labels.get(k) != v for k, v in labels.items()):
                continue
            out.append(copy.deepcopy(obj))  # type: ignore[arg-type]
            if limit is not None and len(out) >= limit:
                break
        return Ok(out)

    def create(self, obj: Resource) -> Result[None, StoreError]:
        fault = self._take_fault("create", obj.KIND)
        if fault is not None:
            return Err(fault)

        meta = obj.metadata
        if not meta.namespace:
            return Err(StoreError(kind="invalid", message=f"{obj.KIND} has no namespace"))
        if not meta.name:
            if not meta.generate_name:
                return Err(StoreError(kind="invalid", message=f"{obj.KIND} has no name"))
            meta.name = self._generate_name(obj)

        key = _key(obj.KIND, meta.namespace, meta.name)
        if key in self._objects:
            return Err(
                StoreError(
                    kind="already_exists",
                    message=f'{obj.KIND} "{meta.namespace}/{meta.name}" already exists',
                )
            )

        meta.uid = meta.uid or str(uuid4())
        meta.resource_version = self._next_version()
        meta.creation_timestamp = meta.creation_timestamp or now()
        meta.deletion_timestamp = None
        self._objects[key] = copy.deepcopy(obj)
        self._notify("added", obj)
        return Ok(None)

    def patch(self, obj: Resource, *, resource_version: str) -> Result[None, StoreError]:
        fault = self._take_fault("patch", obj.KIND)
        if fault is not None:
            return Err(fault)

        key = _key(obj.KIND, obj.metadata.namespace, obj.metadata.name)
        stored = self._objects.get(key)
        if stored is None:
            return Err(not_found(obj.KIND, obj.key))
        if stored.metadata.resource_version != resource_version:
            return Err(
                StoreError(
                    kind="conflict",
                    message=(
                        f'{obj.KIND} "{obj.key}" was modified '
                        f"(have {resource_version}, stored {stored.metadata.resource_version})"
                    ),
                )
            )

        # identity and deletion state are owned by the store
        obj.metadata.uid = stored.metadata.uid
        obj.metadata.creation_timestamp = stored.metadata.creation_timestamp
        obj.metadata.deletion_timestamp = stored.metadata.deletion_timestamp
        obj.metadata.resource_version = self._next_version()

        if obj.metadata.deletion_timestamp is not None and not obj.metadata.finalizers:
            self._remove(key)
            return Ok(None)

        self._objects[key] = copy.deepcopy(obj)
        self._notify("modified", obj)
        return Ok(None)

    def delete_if_exists(self, obj: Resource) -> Result[bool, StoreError]:
        fault = self._take_fault("delete", obj.KIND)
        if fault is not None:
            return Err(fault)

        key = _key(obj.KIND, obj.metadata.namespace, obj.metadata.name)
        stored = self._objects.get(key)
        if stored is None:
            return Ok(False)

        if stored.metadata.finalizers:
            if stored.metadata.deletion_timestamp is None:
                stored.metadata.deletion_timestamp = now()
                stored.metadata.resource_version = self._next_version()
                self._notify("modified", stored)
            return Ok(True)

        self._remove(key)
        return Ok(True)

    # --- helpers -------------------------------------------------------------

    def load(self, obj: Resource) -> Result[None, StoreError]:
        """Insert a previously persisted object, keeping its uid and version.

        Unlike ``create`` this does not notify listeners and keeps any
        deletion timestamp. An object marked for deletion with no finalizers
        left is dropped, since nothing would ever remove it.
        """
        meta = obj.metadata
        if meta.deletion_timestamp is not None and not meta.finalizers:
            return Ok(None)
        if not meta.namespace:
            return Err(StoreError(kind="invalid", message=f"{obj.KIND} has no namespace"))
        if not meta.name:
            if not meta.generate_name:
                return Err(StoreError(kind="invalid", message=f"{obj.KIND} has no name"))
            meta.name = self._generate_name(obj)

        key = _key(obj.KIND, meta.namespace, meta.name)
        if key in self._objects:
            return Err(
                StoreError(
                    kind="already_exists",
                    message=f'{obj.KIND} "{meta.namespace}/{meta.name}" already exists',
                )
            )

        meta.uid = meta.uid or str(uuid4())
        if meta.resource_version.isdigit():
            self._version = max(self._version, int(meta.resource_version))
        else:
            meta.resource_version = self._next_version()
        meta.creation_timestamp = meta.creation_timestamp or now()
        self._objects[key] = copy.deepcopy(obj)
        return Ok(None)

    def objects[T: Resource](self, kind: type[T]) -> list[T]:
        """Every stored object of ``kind``, ordered by namespace/name."""
        result = self.list(kind)
        return result.unwrap_or([])

    def all_objects(self) -> list[Resource]:
        return [copy.deepcopy(obj) for _, obj in sorted(self._objects.items())]

    def _remove(self, key: _Key) -> None:
        removed = self._objects.pop(key)
        self._notify("deleted", removed)

        uid = removed.metadata.uid
        if not uid:
            return
        dependents = [
            dep
            for dep in self._objects.values()
            if any(ref.uid == uid for ref in dep.metadata.owner_references)
        ]
        for dep in dependents:
            # may already be gone through an earlier cascade in this loop
            if _key(dep.KIND, dep.metadata.namespace, dep.metadata.name) in self._objects:
                self.delete_if_exists(dep)

    def _generate_name(self, obj: Resource) -> str:
        prefix = obj.metadata.generate_name
        while True:
            candidate = f"{prefix}{uuid4().hex[:_NAME_SUFFIX_LEN]}"
            if _key(obj.KIND, obj.metadata.namespace, candidate) not in self._objects:
                return candidate

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _take_fault(self, op: StoreOp, kind: str) -> StoreError | None:
        for i, fault in enumerate(self._faults):
            if fault.op == op and fault.kind in (None, kind):
                del self._faults[i]
                return fault.error
        return None

    def _notify(self, event: EventType, obj: Resource) -> None:
        for listener in list(self._listeners):
            listener(event, copy.deepcopy(obj))
