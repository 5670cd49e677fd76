"""Work-queue driver: calls the reconciler once per queued key.

Passes run one at a time, so there is never more than one in-flight pass for
a given key. A key re-added while its own pass runs (e.g. by the watch on the
object the pass just patched) is simply processed again afterwards.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

from rs.api.meta import NamespacedName, Resource
from rs.core.config import Config, RequeueConfig
from rs.output.console import ConsoleProtocol, Style
from rs.store.memory import EventType, MemoryStore

from .outcome import Outcome, Requeue

Reconcile = Callable[[NamespacedName], Outcome]
Mapper = Callable[[EventType, Resource], list[NamespacedName]]
Clock = Callable[[], float]
Sleep = Callable[[float], None]


@dataclass(slots=True)
class WorkQueue:
    """De-duplicating delay queue with per-key exponential backoff."""

    backoff: RequeueConfig = field(default_factory=RequeueConfig)
    clock: Clock = time.monotonic
    _ready_at: dict[NamespacedName, float] = field(default_factory=dict)
    _failures: dict[NamespacedName, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self._ready_at)

    def __contains__(self, key: NamespacedName) -> bool:
        return key in self._ready_at

    def add(self, key: NamespacedName, *, delay: float = 0.0) -> None:
        """Queue ``key``; an earlier pending deadline wins."""
        ready_at = self.clock() + delay
        current = self._ready_at.get(key)
        if current is None or ready_at < current:
            self._ready_at[key] = ready_at

    def add_rate_limited(self, key: NamespacedName) -> float:
        failures = self._failures.get(key, 0) + 1
        self._failures[key] = failures
        delay = self.backoff.delay_for(failures)
        self.add(key, delay=delay)
        return delay

    def forget(self, key: NamespacedName) -> None:
        self._failures.pop(key, None)

    def next_ready_at(self) -> float | None:
        if not self._ready_at:
            return None
        return min(self._ready_at.values())

    def pop_ready(self) -> NamespacedName | None:
        now = self.clock()
        ready = [(at, key) for key, at in self._ready_at.items() if at <= now]
        if not ready:
            return None
        _, key = min(ready)
        del self._ready_at[key]
        return key


@dataclass(frozen=True, slots=True)
class DriverReport:
    passes: int
    errors: int
    idle: bool


class Driver:
    def __init__(
        self,
        *,
        reconcile: Reconcile,
        config: Config,
        console: ConsoleProtocol,
        clock: Clock = time.monotonic,
        sleep: Sleep = time.sleep,
    ) -> None:
        self._reconcile = reconcile
        self._config = config
        self._console = console
        self._sleep = sleep
        self.queue = WorkQueue(backoff=config.requeue, clock=clock)

    def enqueue(self, key: NamespacedName) -> None:
        self.queue.add(key)

    def watch(self, store: MemoryStore, mapper: Mapper) -> None:
        """Enqueue whatever ``mapper`` derives from each store change."""

        def on_change(event: EventType, obj: Resource) -> None:
            for key in mapper(event, obj):
                self.queue.add(key)

        store.subscribe(on_change)

    def process(self, key: NamespacedName) -> Outcome:
        outcome = self._reconcile(key)
        match outcome:
            case Requeue(error=None):
                self.queue.add(key)
            case Requeue(error=error):
                delay = self.queue.add_rate_limited(key)
                self._console.error(
                    "Reconciler error",
                    release=key,
                    error=error.message,
                    retry_in=f"{delay:.3f}s",
                )
            case _:
                self.queue.forget(key)
        return outcome

    def run_until_idle(
        self, *, max_passes: int | None = None, timeout: float | None = None
    ) -> DriverReport:
        """Process queued keys until the queue drains or the pass budget is spent.

        With a ``timeout`` (seconds), keys backed off past it are left queued
        and the report is not idle.
        """
        budget = max_passes if max_passes is not None else self._config.controller.max_passes
        started = self.queue.clock()
        passes = 0
        errors = 0

        while passes < budget:
            key = self.queue.pop_ready()
            if key is None:
                ready_at = self.queue.next_ready_at()
                if ready_at is None:
                    return DriverReport(passes=passes, errors=errors, idle=True)
                if timeout is not None and ready_at - started > timeout:
                    return DriverReport(passes=passes, errors=errors, idle=False)
                self._sleep(max(0.0, ready_at - self.queue.clock()))
                continue

            passes += 1
            self._console.print(f"reconcile {key}", Style.DIM, queued=len(self.queue))
            outcome = self.process(key)
            if isinstance(outcome, Requeue) and outcome.error is not None:
                errors += 1

        return DriverReport(passes=passes, errors=errors, idle=len(self.queue) == 0)
