"""Field indexes the release controller lists by."""

from __future__ import annotations

from typing import cast

from rs.api import Component, ReleasePlanAdmission, SnapshotEnvironmentBinding

from .memory import MemoryStore

ORIGIN_FIELD = "spec.origin"
ENVIRONMENT_FIELD = "spec.environment"
APPLICATION_FIELD = "spec.application"


def register_default_indexes(store: MemoryStore) -> None:
    store.index_field(
        ReleasePlanAdmission,
        ORIGIN_FIELD,
        lambda obj: cast(ReleasePlanAdmission, obj).spec.origin,
    )
    store.index_field(
        SnapshotEnvironmentBinding,
        ENVIRONMENT_FIELD,
        lambda obj: cast(SnapshotEnvironmentBinding, obj).spec.environment,
    )
    store.index_field(
        Component,
        APPLICATION_FIELD,
        lambda obj: cast(Component, obj).spec.application,
    )


def new_indexed_store() -> MemoryStore:
    store = MemoryStore()
    register_default_indexes(store)
    return store
