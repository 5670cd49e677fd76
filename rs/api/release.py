"""The Release kind and its status state machine.

``Succeeded`` tracks the release pipeline (Unknown while running, True/False
once done) and ``Deployed`` tracks the downstream deployment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import ClassVar, Self

from rs.core.structured import StrDict, get_str, get_table

from .meta import (
    CONDITION_FALSE,
    CONDITION_TRUE,
    CONDITION_UNKNOWN,
    Condition,
    ConditionStatus,
    Resource,
    conditions_from,
    conditions_to_list,
    find_status_condition,
    format_time,
    is_status_condition_true,
    now,
    parse_time,
    set_status_condition,
)

RELEASE_API_VERSION = "appstudio.redhat.com/v1alpha1"

SUCCEEDED_CONDITION = "Succeeded"
DEPLOYED_CONDITION = "Deployed"

REASON_RUNNING = "Running"
REASON_SUCCEEDED = "Succeeded"
REASON_DEPLOYING = "Deploying"
REASON_PIPELINE_FAILED = "ReleasePipelineFailed"
REASON_VALIDATION_ERROR = "ReleaseValidationError"
REASON_RELEASE_PLAN_VALIDATION_ERROR = "ReleasePlanValidationError"
REASON_TARGET_DISABLED_ERROR = "ReleaseTargetDisabledError"


@dataclass(slots=True)
class ReleaseSpec:
    snapshot: str = ""
    release_plan: str = ""


@dataclass(slots=True)
class ReleaseStatus:
    conditions: list[Condition] = field(default_factory=list)
    release_pipeline_run: str = ""
    release_strategy: str = ""
    target: str = ""
    snapshot_environment_binding: str = ""
    start_time: datetime | None = None
    completion_time: datetime | None = None

    def to_dict(self) -> StrDict:
        out: StrDict = {}
        if self.conditions:
            out["conditions"] = conditions_to_list(self.conditions)
        if self.release_pipeline_run:
            out["releasePipelineRun"] = self.release_pipeline_run
        if self.release_strategy:
            out["releaseStrategy"] = self.release_strategy
        if self.target:
            out["target"] = self.target
        if self.snapshot_environment_binding:
            out["snapshotEnvironmentBinding"] = self.snapshot_environment_binding
        if self.start_time is not None:
            out["startTime"] = format_time(self.start_time)
        if self.completion_time is not None:
            out["completionTime"] = format_time(self.completion_time)
        return out

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        return cls(
            conditions=conditions_from(data),
            release_pipeline_run=get_str(data, "releasePipelineRun") or "",
            release_strategy=get_str(data, "releaseStrategy") or "",
            target=get_str(data, "target") or "",
            snapshot_environment_binding=get_str(data, "snapshotEnvironmentBinding") or "",
            start_time=parse_time(get_str(data, "startTime")),
            completion_time=parse_time(get_str(data, "completionTime")),
        )


@dataclass(slots=True)
class Release(Resource):
    API_VERSION: ClassVar[str] = RELEASE_API_VERSION
    KIND: ClassVar[str] = "Release"

    spec: ReleaseSpec = field(default_factory=ReleaseSpec)
    status: ReleaseStatus = field(default_factory=ReleaseStatus)

    # --- queries -----------------------------------------------------------

    def has_started(self) -> bool:
        return find_status_condition(self.status.conditions, SUCCEEDED_CONDITION) is not None

    def is_done(self) -> bool:
        condition = find_status_condition(self.status.conditions, SUCCEEDED_CONDITION)
        return condition is not None and condition.status != CONDITION_UNKNOWN

    def has_succeeded(self) -> bool:
        return is_status_condition_true(self.status.conditions, SUCCEEDED_CONDITION)

    def has_been_deployed(self) -> bool:
        return is_status_condition_true(self.status.conditions, DEPLOYED_CONDITION)

    def is_being_deleted(self) -> bool:
        return self.metadata.deletion_timestamp is not None

    # --- transitions -------------------------------------------------------

    def mark_running(self) -> None:
        if not self.has_started():
            self.status.start_time = now()
        self._set(SUCCEEDED_CONDITION, CONDITION_UNKNOWN, REASON_RUNNING)

    def mark_succeeded(self) -> None:
        if not self.has_started() or self.is_done():
            return
        self._set(SUCCEEDED_CONDITION, CONDITION_TRUE, REASON_SUCCEEDED)

    def mark_failed(self, reason: str, message: str) -> None:
        if not self.has_started() or self.is_done():
            return
        self._set(SUCCEEDED_CONDITION, CONDITION_FALSE, reason, message)

    def mark_invalid(self, reason: str, message: str) -> None:
        """Terminal validation failure. No-op once the release is done."""
        if self.is_done():
            return
        self.status.completion_time = now()
        self._set(SUCCEEDED_CONDITION, CONDITION_FALSE, reason, message)

    def mark_deploying(self, reason: str, message: str) -> None:
        self._set(DEPLOYED_CONDITION, CONDITION_UNKNOWN, reason or REASON_DEPLOYING, message)

    def mark_deployed(self, status: ConditionStatus, reason: str, message: str) -> None:
        self._set(DEPLOYED_CONDITION, status, reason, message)

    def _set(self, condition_type: str, status: ConditionStatus, reason: str, message: str = "") -> None:
        set_status_condition(
            self.status.conditions,
            Condition(type=condition_type, status=status, reason=reason, message=message),
        )

    # --- codec ---------------------------------------------------------------

    def _body(self) -> StrDict:
        return {
            "spec": {"snapshot": self.spec.snapshot, "releasePlan": self.spec.release_plan},
            "status": self.status.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        spec = get_table(data, "spec") or {}
        return cls(
            metadata=cls._metadata_from(data),
            spec=ReleaseSpec(
                snapshot=get_str(spec, "snapshot") or "",
                release_plan=get_str(spec, "releasePlan") or "",
            ),
            status=ReleaseStatus.from_dict(get_table(data, "status") or {}),
        )
