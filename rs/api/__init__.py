"""Resource data model."""

from __future__ import annotations

from rs.core.result import Err, Ok, Result
from rs.core.structured import StrDict, get_str

from .application import (
    ALL_COMPONENTS_DEPLOYED_CONDITION,
    Application,
    BindingComponent,
    Component,
    Environment,
    Snapshot,
    SnapshotComponent,
    SnapshotEnvironmentBinding,
)
from .meta import (
    Condition,
    NamespacedName,
    ObjectMeta,
    OwnerReference,
    ParseError,
    Resource,
    parse_namespaced_name,
)
from .pipeline import PipelineRun
from .plan import (
    AUTO_RELEASE_LABEL,
    EnterpriseContractPolicy,
    ReleasePlan,
    ReleasePlanAdmission,
    ReleaseStrategy,
)
from .release import Release

__all__ = [
    "ALL_COMPONENTS_DEPLOYED_CONDITION",
    "AUTO_RELEASE_LABEL",
    "KINDS",
    "Application",
    "BindingComponent",
    "Component",
    "Condition",
    "EnterpriseContractPolicy",
    "Environment",
    "NamespacedName",
    "ObjectMeta",
    "OwnerReference",
    "ParseError",
    "PipelineRun",
    "Release",
    "ReleasePlan",
    "ReleasePlanAdmission",
    "ReleaseStrategy",
    "Resource",
    "Snapshot",
    "SnapshotComponent",
    "SnapshotEnvironmentBinding",
    "decode_resource",
    "parse_namespaced_name",
]

KINDS: dict[str, type[Resource]] = {
    cls.KIND: cls
    for cls in (
        Release,
        ReleasePlan,
        ReleasePlanAdmission,
        ReleaseStrategy,
        EnterpriseContractPolicy,
        Snapshot,
        Application,
        Component,
        Environment,
        PipelineRun,
        SnapshotEnvironmentBinding,
    )
}


def decode_resource(data: StrDict) -> Result[Resource, ParseError]:
    """Decode one serialized object using its ``kind`` field."""
    kind = get_str(data, "kind")
    if kind is None:
        return Err(ParseError(message="object has no kind", value=str(data.get("metadata"))))
    cls = KINDS.get(kind)
    if cls is None:
        return Err(ParseError(message=f"unknown kind '{kind}'", value=kind))
    resource = cls.from_dict(data)
    if not resource.metadata.name and not resource.metadata.generate_name:
        return Err(ParseError(message=f"{kind} has no metadata.name", value=kind))
    return Ok(resource)
