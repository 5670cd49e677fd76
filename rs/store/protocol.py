"""The resource store contract consumed by the controller."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from rs.api.meta import NamespacedName, Resource
from rs.core.result import Result

from .errors import StoreError


class ResourceStore(Protocol):
    """Namespace-scoped CRUD with optimistic concurrency.

    Reads after writes are strongly consistent. Every call returns a result;
    nothing raises for an expected failure.
    """

    def get[T: Resource](self, kind: type[T], key: NamespacedName) -> Result[T, StoreError]: ...

    def list[T: Resource](
        self,
        kind: type[T],
        *,
        namespace: str | None = None,
        fields: Mapping[str, str] | None = None,
        labels: Mapping[str, str] | None = None,
        limit: int | None = None,
    ) -> Result[list[T], StoreError]:
        """List objects, optionally filtered by indexed fields and exact labels."""
        ...

    def create(self, obj: Resource) -> Result[None, StoreError]:
        """Persist a new object, filling name/uid/resource version in place."""
        ...

    def patch(self, obj: Resource, *, resource_version: str) -> Result[None, StoreError]:
        """Replace ``obj`` if the stored version still equals ``resource_version``."""
        ...

    def delete_if_exists(self, obj: Resource) -> Result[bool, StoreError]:
        """Delete ``obj``; ``Ok(False)`` when it was already gone."""
        ...
