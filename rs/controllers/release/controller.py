"""Wires the Release adapter into the driver."""

from __future__ import annotations

import time

from rs.api import PipelineRun, Release, Resource, SnapshotEnvironmentBinding
from rs.api.meta import NamespacedName
from rs.core.config import Config
from rs.core.result import Err
from rs.handler import annotated_owner
from rs.output.console import ConsoleProtocol, Style
from rs.reconciler import Driver, Outcome, requeue_with_error, run_operations, stop_processing
from rs.reconciler.driver import Clock, Sleep
from rs.store.memory import EventType, MemoryStore
from rs.store.protocol import ResourceStore
from rs.syncer import Syncer

from .adapter import Adapter


class ReleaseReconciler:
    def __init__(self, store: ResourceStore, console: ConsoleProtocol) -> None:
        self._store = store
        self._console = console
        self._syncer = Syncer(store, console)

    def reconcile(self, key: NamespacedName) -> Outcome:
        fetched = self._store.get(Release, key)
        if isinstance(fetched, Err):
            if fetched.error.is_not_found:
                self._console.print("Release not found, ignoring", Style.DIM, release=key)
                return stop_processing()
            return requeue_with_error(fetched.error)

        adapter = Adapter(fetched.value, store=self._store, console=self._console, syncer=self._syncer)
        return run_operations(adapter.operations())


def map_to_release_requests(event: EventType, obj: Resource) -> list[NamespacedName]:
    """Release keys affected by a store change."""
    if isinstance(obj, Release):
        if event == "deleted":
            return []
        return [obj.key]

    if isinstance(obj, (PipelineRun, SnapshotEnvironmentBinding)):
        owner = annotated_owner(obj, Release)
        if owner is not None:
            return [owner]

    return []


def setup_controller(
    store: MemoryStore,
    config: Config,
    console: ConsoleProtocol,
    *,
    clock: Clock = time.monotonic,
    sleep: Sleep = time.sleep,
) -> Driver:
    reconciler = ReleaseReconciler(store, console)
    driver = Driver(
        reconcile=reconciler.reconcile,
        config=config,
        console=console,
        clock=clock,
        sleep=sleep,
    )
    driver.watch(store, map_to_release_requests)
    return driver
