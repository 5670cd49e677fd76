from __future__ import annotations

from collections.abc import Sequence

from rs.api import BindingComponent, Component, Environment, Snapshot, SnapshotEnvironmentBinding
from rs.api.application import SnapshotEnvironmentBindingSpec
from rs.api.meta import ObjectMeta


def new_snapshot_environment_binding(
    components: Sequence[Component],
    snapshot: Snapshot,
    environment: Environment,
) -> SnapshotEnvironmentBinding:
    """Binding that deploys ``snapshot`` into ``environment``.

    Every component gets at least one replica.
    """
    return SnapshotEnvironmentBinding(
        metadata=ObjectMeta(
            generate_name=f"{snapshot.metadata.name}-",
            namespace=environment.metadata.namespace,
        ),
        spec=SnapshotEnvironmentBindingSpec(
            application=snapshot.spec.application,
            environment=environment.metadata.name,
            snapshot=snapshot.metadata.name,
            components=[
                BindingComponent(
                    name=c.spec.component_name or c.metadata.name,
                    replicas=max(1, c.spec.replicas),
                )
                for c in components
            ],
        ),
    )
