"""Object factories for a dev -> managed release setup.

``dev`` holds the Release, its ReleasePlan and the Snapshot; ``managed`` is
the target namespace with the admission, strategy, policy, application,
components and environment.
"""

from __future__ import annotations

from rs.api import (
    Application,
    Component,
    EnterpriseContractPolicy,
    Environment,
    ObjectMeta,
    Release,
    ReleasePlan,
    ReleasePlanAdmission,
    ReleaseStrategy,
    Snapshot,
    SnapshotComponent,
)
from rs.api.application import ComponentSpec, SnapshotSpec
from rs.api.meta import Resource
from rs.api.plan import (
    AUTO_RELEASE_LABEL,
    ReleasePlanAdmissionSpec,
    ReleasePlanSpec,
    ReleaseStrategySpec,
    StrategyParam,
)
from rs.api.release import ReleaseSpec
from rs.core.result import Ok
from rs.store import MemoryStore, new_indexed_store

DEV = "dev"
MANAGED = "managed"
APP = "app"
ENVIRONMENT = "prod"


def release(name: str = "release") -> Release:
    return Release(
        metadata=ObjectMeta(name=name, namespace=DEV),
        spec=ReleaseSpec(snapshot="snapshot", release_plan="plan"),
    )


def release_plan() -> ReleasePlan:
    return ReleasePlan(
        metadata=ObjectMeta(name="plan", namespace=DEV),
        spec=ReleasePlanSpec(application=APP, target=MANAGED),
    )


def admission(
    name: str = "admission",
    *,
    auto_release: str | None = None,
    environment: str = ENVIRONMENT,
    strategy: str = "strategy",
    application: str = APP,
) -> ReleasePlanAdmission:
    labels = {AUTO_RELEASE_LABEL: auto_release} if auto_release is not None else {}
    return ReleasePlanAdmission(
        metadata=ObjectMeta(name=name, namespace=MANAGED, labels=labels),
        spec=ReleasePlanAdmissionSpec(
            application=application,
            origin=DEV,
            environment=environment,
            release_strategy=strategy,
        ),
    )


def strategy() -> ReleaseStrategy:
    return ReleaseStrategy(
        metadata=ObjectMeta(name="strategy", namespace=MANAGED),
        spec=ReleaseStrategySpec(
            pipeline="release-pipeline",
            bundle="quay.io/org/bundle:1",
            policy="policy",
            params=[
                StrategyParam(name="verify", value="true"),
                StrategyParam(name="targets", values=("a", "b")),
            ],
            persistent_volume_claim="release-pvc",
            service_account="release-sa",
        ),
    )


def policy() -> EnterpriseContractPolicy:
    return EnterpriseContractPolicy(
        metadata=ObjectMeta(name="policy", namespace=MANAGED),
        spec={"sources": [{"name": "default"}]},
    )


def snapshot() -> Snapshot:
    return Snapshot(
        metadata=ObjectMeta(name="snapshot", namespace=DEV),
        spec=SnapshotSpec(
            application=APP,
            components=[SnapshotComponent(name="api", container_image="quay.io/org/api@sha256:1")],
        ),
    )


def application() -> Application:
    return Application(metadata=ObjectMeta(name=APP, namespace=MANAGED))


def component(name: str = "api", *, replicas: int = 0) -> Component:
    return Component(
        metadata=ObjectMeta(name=name, namespace=MANAGED),
        spec=ComponentSpec(component_name=name, application=APP, replicas=replicas),
    )


def environment() -> Environment:
    return Environment(metadata=ObjectMeta(name=ENVIRONMENT, namespace=MANAGED))


def create(store: MemoryStore, *objects: Resource) -> None:
    for obj in objects:
        assert store.create(obj) == Ok(None), f"cannot create {obj.KIND} {obj.key}"


def world(*admissions: ReleasePlanAdmission) -> MemoryStore:
    """A store holding everything a release needs except the Release itself."""
    store = new_indexed_store()
    create(
        store,
        release_plan(),
        *(admissions or (admission(),)),
        strategy(),
        policy(),
        snapshot(),
        application(),
        component("api", replicas=2),
        component("worker"),
        environment(),
    )
    return store
