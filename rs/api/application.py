"""Application-side kinds: snapshots, components, environments, bindings."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Self

from rs.core.structured import StrDict, get_int, get_str, get_table, get_table_list

from .meta import Condition, Resource, conditions_from, conditions_to_list

APPLICATION_API_VERSION = "appstudio.redhat.com/v1alpha1"

ALL_COMPONENTS_DEPLOYED_CONDITION = "AllComponentsDeployed"


@dataclass(frozen=True, slots=True)
class SnapshotComponent:
    name: str
    container_image: str

    def to_dict(self) -> StrDict:
        return {"name": self.name, "containerImage": self.container_image}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        return cls(
            name=get_str(data, "name") or "",
            container_image=get_str(data, "containerImage") or "",
        )


@dataclass(slots=True)
class SnapshotSpec:
    application: str = ""
    display_name: str = ""
    components: list[SnapshotComponent] = field(default_factory=list)

    def to_dict(self) -> StrDict:
        out: StrDict = {
            "application": self.application,
            "components": [c.to_dict() for c in self.components],
        }
        if self.display_name:
            out["displayName"] = self.display_name
        return out


@dataclass(slots=True)
class Snapshot(Resource):
    """Immutable set of component images for one application."""

    API_VERSION: ClassVar[str] = APPLICATION_API_VERSION
    KIND: ClassVar[str] = "Snapshot"

    spec: SnapshotSpec = field(default_factory=SnapshotSpec)

    def _body(self) -> StrDict:
        return {"spec": self.spec.to_dict()}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        return cls(
            metadata=cls._metadata_from(data),
            spec=SnapshotSpec(
                application=get_str(spec, "application") or "",
                display_name=get_str(spec, "displayName") or "",
                components=[
                    SnapshotComponent.from_dict(d) for d in get_table_list(spec, "components")
                ],
            ),
        )


@dataclass(slots=True)
class Application(Resource):
    API_VERSION: ClassVar[str] = APPLICATION_API_VERSION
    KIND: ClassVar[str] = "Application"

    display_name: str = ""

    def _body(self) -> StrDict:
        return {"spec": {"displayName": self.display_name}}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        return cls(
            metadata=cls._metadata_from(data),
            display_name=get_str(spec, "displayName") or "",
        )


@dataclass(slots=True)
class ComponentSpec:
    component_name: str = ""
    application: str = ""
    container_image: str = ""
    replicas: int = 0


@dataclass(slots=True)
class Component(Resource):
    API_VERSION: ClassVar[str] = APPLICATION_API_VERSION
    KIND: ClassVar[str] = "Component"

    spec: ComponentSpec = field(default_factory=ComponentSpec)

    def _body(self) -> StrDict:
        spec: StrDict = {
            "componentName": self.spec.component_name,
            "application": self.spec.application,
        }
        if self.spec.container_image:
            spec["containerImage"] = self.spec.container_image
        if self.spec.replicas:
            spec["replicas"] = self.spec.replicas
        return {"spec": spec}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        return cls(
            metadata=cls._metadata_from(data),
            spec=ComponentSpec(
                component_name=get_str(spec, "componentName") or "",
                application=get_str(spec, "application") or "",
                container_image=get_str(spec, "containerImage") or "",
                replicas=get_int(spec, "replicas") or 0,
            ),
        )


@dataclass(slots=True)
class EnvironmentSpec:
    display_name: str = ""
    deployment_strategy: str = ""
    parent_environment: str = ""


@dataclass(slots=True)
class Environment(Resource):
    API_VERSION: ClassVar[str] = APPLICATION_API_VERSION
    KIND: ClassVar[str] = "Environment"

    spec: EnvironmentSpec = field(default_factory=EnvironmentSpec)

    def _body(self) -> StrDict:
        spec: StrDict = {"displayName": self.spec.display_name}
        if self.spec.deployment_strategy:
            spec["deploymentStrategy"] = self.spec.deployment_strategy
        if self.spec.parent_environment:
            spec["parentEnvironment"] = self.spec.parent_environment
        return {"spec": spec}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        return cls(
            metadata=cls._metadata_from(data),
            spec=EnvironmentSpec(
                display_name=get_str(spec, "displayName") or "",
                deployment_strategy=get_str(spec, "deploymentStrategy") or "",
                parent_environment=get_str(spec, "parentEnvironment") or "",
            ),
        )


@dataclass(frozen=True, slots=True)
class BindingComponent:
    name: str
    replicas: int = 1

    def to_dict(self) -> StrDict:
        return {"name": self.name, "configuration": {"replicas": self.replicas}}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        configuration = get_table(data, "configuration") or {}
        return cls(
            name=get_str(data, "name") or "",
            replicas=get_int(configuration, "replicas") or 1,
        )


@dataclass(slots=True)
class SnapshotEnvironmentBindingSpec:
    application: str = ""
    environment: str = ""
    snapshot: str = ""
    components: list[BindingComponent] = field(default_factory=list)


@dataclass(slots=True)
class SnapshotEnvironmentBindingStatus:
    component_deployment_conditions: list[Condition] = field(default_factory=list)


@dataclass(slots=True)
class SnapshotEnvironmentBinding(Resource):
    """Deploys a snapshot of an application into an environment."""

    API_VERSION: ClassVar[str] = APPLICATION_API_VERSION
    KIND: ClassVar[str] = "SnapshotEnvironmentBinding"

    spec: SnapshotEnvironmentBindingSpec = field(default_factory=SnapshotEnvironmentBindingSpec)
    status: SnapshotEnvironmentBindingStatus = field(
        default_factory=SnapshotEnvironmentBindingStatus
    )

    def _body(self) -> StrDict:
        status: StrDict = {}
        if self.status.component_deployment_conditions:
            status["componentDeploymentConditions"] = conditions_to_list(
                self.status.component_deployment_conditions
            )
        return {
            "spec": {
                "application": self.spec.application,
                "environment": self.spec.environment,
                "snapshot": self.spec.snapshot,
                "components": [c.to_dict() for c in self.spec.components],
            },
            "status": status,
        }

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        status = get_table(data, "status") or {}
        return cls(
            metadata=cls._metadata_from(data),
            spec=SnapshotEnvironmentBindingSpec(
                application=get_str(spec, "application") or "",
                environment=get_str(spec, "environment") or "",
                snapshot=get_str(spec, "snapshot") or "",
                components=[
                    BindingComponent.from_dict(d) for d in get_table_list(spec, "components")
                ],
            ),
            status=SnapshotEnvironmentBindingStatus(
                component_deployment_conditions=conditions_from(
                    status, "componentDeploymentConditions"
                ),
            ),
        )
