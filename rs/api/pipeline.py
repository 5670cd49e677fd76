"""The release execution (a Tekton-style PipelineRun)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Self

from rs.core.structured import (
    StrDict,
    get_str,
    get_str_list,
    get_table,
    get_table_list,
)

from .meta import (
    CONDITION_UNKNOWN,
    Condition,
    Resource,
    conditions_from,
    conditions_to_list,
    find_status_condition,
    format_time,
    parse_time,
)

SUCCEEDED_CONDITION = "Succeeded"


@dataclass(frozen=True, slots=True)
class PipelineRef:
    name: str
    bundle: str = ""

    def to_dict(self) -> StrDict:
        out: StrDict = {"name": self.name}
        if self.bundle:
            out["bundle"] = self.bundle
        return out


@dataclass(frozen=True, slots=True)
class PipelineParam:
    """A run parameter; ``value`` is a string or an array of strings."""

    name: str
    value: str | tuple[str, ...]

    def to_dict(self) -> StrDict:
        if isinstance(self.value, tuple):
            return {"name": self.name, "value": list(self.value)}
        return {"name": self.name, "value": self.value}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        raw = data.get("value")
        if isinstance(raw, list):
            return cls(name=get_str(data, "name") or "", value=tuple(get_str_list(data, "value")))
        return cls(name=get_str(data, "name") or "", value=raw if isinstance(raw, str) else "")


@dataclass(frozen=True, slots=True)
class WorkspaceBinding:
    name: str
    claim_name: str

    def to_dict(self) -> StrDict:
        return {"name": self.name, "persistentVolumeClaim": {"claimName": self.claim_name}}


@dataclass(slots=True)
class PipelineRunSpec:
    pipeline_ref: PipelineRef | None = None
    params: list[PipelineParam] = field(default_factory=list)
    service_account_name: str = ""
    workspaces: list[WorkspaceBinding] = field(default_factory=list)


@dataclass(slots=True)
class PipelineRunStatus:
    conditions: list[Condition] = field(default_factory=list)
    start_time: datetime | None = None
    completion_time: datetime | None = None


@dataclass(slots=True)
class PipelineRun(Resource):
    API_VERSION: ClassVar[str] = "tekton.dev/v1beta1"
    KIND: ClassVar[str] = "PipelineRun"

    spec: PipelineRunSpec = field(default_factory=PipelineRunSpec)
    status: PipelineRunStatus = field(default_factory=PipelineRunStatus)

    def succeeded_condition(self) -> Condition | None:
        return find_status_condition(self.status.conditions, SUCCEEDED_CONDITION)

    def is_done(self) -> bool:
        condition = self.succeeded_condition()
        return condition is not None and condition.status != CONDITION_UNKNOWN

    def param(self, name: str) -> str | tuple[str, ...] | None:
        for p in self.spec.params:
            if p.name == name:
                return p.value
        return None

    def _body(self) -> StrDict:
        spec: StrDict = {"params": [p.to_dict() for p in self.spec.params]}
        if self.spec.pipeline_ref is not None:
            spec["pipelineRef"] = self.spec.pipeline_ref.to_dict()
        if self.spec.service_account_name:
            spec["serviceAccountName"] = self.spec.service_account_name
        if self.spec.workspaces:
            spec["workspaces"] = [w.to_dict() for w in self.spec.workspaces]

        status: StrDict = {}
        if self.status.conditions:
            status["conditions"] = conditions_to_list(self.status.conditions)
        if self.status.start_time is not None:
            status["startTime"] = format_time(self.status.start_time)
        if self.status.completion_time is not None:
            status["completionTime"] = format_time(self.status.completion_time)
        return {"spec": spec, "status": status}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        status = get_table(data, "status") or {}

        ref_tbl = get_table(spec, "pipelineRef")
        pipeline_ref: PipelineRef | None = None
        if ref_tbl is not None:
            pipeline_ref = PipelineRef(
                name=get_str(ref_tbl, "name") or "",
                bundle=get_str(ref_tbl, "bundle") or "",
            )

        workspaces: list[WorkspaceBinding] = []
        for ws in get_table_list(spec, "workspaces"):
            claim = get_table(ws, "persistentVolumeClaim") or {}
            workspaces.append(
                WorkspaceBinding(
                    name=get_str(ws, "name") or "",
                    claim_name=get_str(claim, "claimName") or "",
                )
            )

        return cls(
            metadata=cls._metadata_from(data),
            spec=PipelineRunSpec(
                pipeline_ref=pipeline_ref,
                params=[PipelineParam.from_dict(d) for d in get_table_list(spec, "params")],
                service_account_name=get_str(spec, "serviceAccountName") or "",
                workspaces=workspaces,
            ),
            status=PipelineRunStatus(
                conditions=conditions_from(status),
                start_time=parse_time(get_str(status, "startTime")),
                completion_time=parse_time(get_str(status, "completionTime")),
            ),
        )
