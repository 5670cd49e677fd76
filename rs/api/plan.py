"""Routing and policy kinds: plans, admissions, strategies, contract policies."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import ClassVar, Self

from rs.core.structured import StrDict, get_str, get_str_list, get_table, get_table_list

from .meta import Resource
from .release import RELEASE_API_VERSION

AUTO_RELEASE_LABEL = "release.appstudio.openshift.io/auto-release"


@dataclass(slots=True)
class ReleasePlanSpec:
    application: str = ""
    target: str = ""
    display_name: str = ""


@dataclass(slots=True)
class ReleasePlan(Resource):
    """Routes an application from its (source) namespace to a target namespace."""

    API_VERSION: ClassVar[str] = RELEASE_API_VERSION
    KIND: ClassVar[str] = "ReleasePlan"

    spec: ReleasePlanSpec = field(default_factory=ReleasePlanSpec)

    def _body(self) -> StrDict:
        spec: StrDict = {"application": self.spec.application, "target": self.spec.target}
        if self.spec.display_name:
            spec["displayName"] = self.spec.display_name
        return {"spec": spec}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        return cls(
            metadata=cls._metadata_from(data),
            spec=ReleasePlanSpec(
                application=get_str(spec, "application") or "",
                target=get_str(spec, "target") or "",
                display_name=get_str(spec, "displayName") or "",
            ),
        )


@dataclass(slots=True)
class ReleasePlanAdmissionSpec:
    application: str = ""
    origin: str = ""
    environment: str = ""
    release_strategy: str = ""
    display_name: str = ""


@dataclass(slots=True)
class ReleasePlanAdmission(Resource):
    """Target-side acceptance of releases coming from ``spec.origin``."""

    API_VERSION: ClassVar[str] = RELEASE_API_VERSION
    KIND: ClassVar[str] = "ReleasePlanAdmission"

    spec: ReleasePlanAdmissionSpec = field(default_factory=ReleasePlanAdmissionSpec)

    def auto_release_disabled(self) -> bool:
        """Only an explicit ``false`` opts out; absent or any other value opts in."""
        return self.metadata.labels.get(AUTO_RELEASE_LABEL) == "false"

    def _body(self) -> StrDict:
        spec: StrDict = {
            "application": self.spec.application,
            "origin": self.spec.origin,
            "releaseStrategy": self.spec.release_strategy,
        }
        if self.spec.environment:
            spec["environment"] = self.spec.environment
        if self.spec.display_name:
            spec["displayName"] = self.spec.display_name
        return {"spec": spec}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        return cls(
            metadata=cls._metadata_from(data),
            spec=ReleasePlanAdmissionSpec(
                application=get_str(spec, "application") or "",
                origin=get_str(spec, "origin") or "",
                environment=get_str(spec, "environment") or "",
                release_strategy=get_str(spec, "releaseStrategy") or "",
                display_name=get_str(spec, "displayName") or "",
            ),
        )


@dataclass(frozen=True, slots=True)
class StrategyParam:
    """A pipeline parameter: either a single ``value`` or a list of ``values``."""

    name: str
    value: str = ""
    values: tuple[str, ...] = ()

    def to_dict(self) -> StrDict:
        if self.values:
            return {"name": self.name, "values": list(self.values)}
        return {"name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        return cls(
            name=get_str(data, "name") or "",
            value=get_str(data, "value") or "",
            values=tuple(get_str_list(data, "values")),
        )


@dataclass(slots=True)
class ReleaseStrategySpec:
    pipeline: str = ""
    bundle: str = ""
    policy: str = ""
    params: list[StrategyParam] = field(default_factory=list)
    persistent_volume_claim: str = ""
    service_account: str = ""


@dataclass(slots=True)
class ReleaseStrategy(Resource):
    API_VERSION: ClassVar[str] = RELEASE_API_VERSION
    KIND: ClassVar[str] = "ReleaseStrategy"

    spec: ReleaseStrategySpec = field(default_factory=ReleaseStrategySpec)

    def _body(self) -> StrDict:
        spec: StrDict = {
            "pipeline": self.spec.pipeline,
            "bundle": self.spec.bundle,
            "policy": self.spec.policy,
        }
        if self.spec.params:
            spec["params"] = [p.to_dict() for p in self.spec.params]
        if self.spec.persistent_volume_claim:
            spec["persistentVolumeClaim"] = self.spec.persistent_volume_claim
        if self.spec.service_account:
            spec["serviceAccount"] = self.spec.service_account
        return {"spec": spec}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        return cls(
            metadata=cls._metadata_from(data),
            spec=ReleaseStrategySpec(
                pipeline=get_str(spec, "pipeline") or "",
                bundle=get_str(spec, "bundle") or "",
                policy=get_str(spec, "policy") or "",
                params=[StrategyParam.from_dict(d) for d in get_table_list(spec, "params")],
                persistent_volume_claim=get_str(spec, "persistentVolumeClaim") or "",
                service_account=get_str(spec, "serviceAccount") or "",
            ),
        )


@dataclass(slots=True)
class EnterpriseContractPolicy(Resource):
    """Opaque to the controller: its spec is forwarded verbatim to the pipeline."""

    API_VERSION: ClassVar[str] = "appstudio.redhat.com/v1alpha1"
    KIND: ClassVar[str] = "EnterpriseContractPolicy"

    spec: StrDict = field(default_factory=dict)

    def _body(self) -> StrDict:
        return {"spec": copy.deepcopy(self.spec)}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        return cls(
            metadata=cls._metadata_from(data),
            spec=copy.deepcopy(get_table(data, "spec") or {}),
        )
