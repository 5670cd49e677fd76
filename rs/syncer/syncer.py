"""Mirrors objects into another namespace."""

from __future__ import annotations

from rs.api import Snapshot
from rs.api.meta import NamespacedName, ObjectMeta
from rs.api.application import SnapshotSpec
from rs.core.result import Err, Ok, Result
from rs.output.console import ConsoleProtocol, Style
from rs.store.errors import StoreError
from rs.store.protocol import ResourceStore


class Syncer:
    def __init__(self, store: ResourceStore, console: ConsoleProtocol) -> None:
        self._store = store
        self._console = console

    def sync_snapshot(self, snapshot: Snapshot, namespace: str) -> Result[None, StoreError]:
        """Make sure a copy of ``snapshot`` exists in ``namespace``.

        The copy keeps the name, labels and spec; ownership and identity are
        not carried over. An existing copy is left untouched.
        """
        if snapshot.metadata.namespace == namespace:
            return Ok(None)

        key = NamespacedName(namespace=namespace, name=snapshot.metadata.name)
        existing = self._store.get(Snapshot, key)
        if isinstance(existing, Ok):
            return Ok(None)
        if not existing.error.is_not_found:
            return existing

        copy_ = Snapshot(
            metadata=ObjectMeta(
                name=snapshot.metadata.name,
                namespace=namespace,
                labels=dict(snapshot.metadata.labels),
            ),
            spec=SnapshotSpec(
                application=snapshot.spec.application,
                display_name=snapshot.spec.display_name,
                components=list(snapshot.spec.components),
            ),
        )
        created = self._store.create(copy_)
        if isinstance(created, Err):
            # lost a race with another pass: the copy is there, which is all we need
            if created.error.kind == "already_exists":
                return Ok(None)
            return created

        self._console.print("Synced Snapshot", Style.DIM, snapshot=snapshot.key, namespace=namespace)
        return Ok(None)
