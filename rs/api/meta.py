"""Object metadata, conditions and namespaced names shared by every kind."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import ClassVar, Literal, Self

from rs.core.result import Err, Ok, Result
from rs.core.structured import (
    StrDict,
    get_bool,
    get_str,
    get_str_list,
    get_str_map,
    get_table,
    get_table_list,
)

SEPARATOR = "/"

ConditionStatus = Literal["True", "False", "Unknown"]
CONDITION_TRUE: ConditionStatus = "True"
CONDITION_FALSE: ConditionStatus = "False"
CONDITION_UNKNOWN: ConditionStatus = "Unknown"


def now() -> datetime:
    return datetime.now(UTC).replace(microsecond=0)


def format_time(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_time(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


@dataclass(frozen=True, slots=True)
class ParseError:
    """A persisted reference that does not have the expected shape."""

    message: str
    value: str

    @property
    def kind(self) -> str:
        return "invalid_reference"


@dataclass(frozen=True, slots=True, order=True)
class NamespacedName:
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}{SEPARATOR}{self.name}"


def parse_namespaced_name(value: str) -> Result[NamespacedName, ParseError]:
    """Parse ``namespace/name`` as written into Release status."""
    parts = value.split(SEPARATOR)
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return Err(
            ParseError(
                message=(
                    f"invalid namespaced name '{value}': "
                    f"expected '<namespace>{SEPARATOR}<name>'"
                ),
                value=value,
            )
        )
    return Ok(NamespacedName(namespace=parts[0], name=parts[1]))


@dataclass(slots=True)
class OwnerReference:
    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = False
    block_owner_deletion: bool = False

    def to_dict(self) -> StrDict:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        return cls(
            api_version=get_str(data, "apiVersion") or "",
            kind=get_str(data, "kind") or "",
            name=get_str(data, "name") or "",
            uid=get_str(data, "uid") or "",
            controller=get_bool(data, "controller") or False,
            block_owner_deletion=get_bool(data, "blockOwnerDeletion") or False,
        )


@dataclass(slots=True)
class ObjectMeta:
    name: str = ""
    namespace: str = ""
    generate_name: str = ""
    uid: str = ""
    resource_version: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    finalizers: list[str] = field(default_factory=list)
    owner_references: list[OwnerReference] = field(default_factory=list)
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None

    def to_dict(self) -> StrDict:
        out: StrDict = {"name": self.name, "namespace": self.namespace}
        if self.generate_name:
            out["generateName"] = self.generate_name
        if self.uid:
            out["uid"] = self.uid
        if self.resource_version:
            out["resourceVersion"] = self.resource_version
        if self.labels:
            out["labels"] = dict(self.labels)
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.finalizers:
            out["finalizers"] = list(self.finalizers)
        if self.owner_references:
            out["ownerReferences"] = [ref.to_dict() for ref in self.owner_references]
        if self.creation_timestamp is not None:
            out["creationTimestamp"] = format_time(self.creation_timestamp)
        if self.deletion_timestamp is not None:
            out["deletionTimestamp"] = format_time(self.deletion_timestamp)
        return out

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        return cls(
            name=get_str(data, "name") or "",
            namespace=get_str(data, "namespace") or "",
            generate_name=get_str(data, "generateName") or "",
            uid=get_str(data, "uid") or "",
            resource_version=get_str(data, "resourceVersion") or "",
            labels=get_str_map(data, "labels"),
            annotations=get_str_map(data, "annotations"),
            finalizers=get_str_list(data, "finalizers"),
            owner_references=[
                OwnerReference.from_dict(d) for d in get_table_list(data, "ownerReferences")
            ],
            creation_timestamp=parse_time(get_str(data, "creationTimestamp")),
            deletion_timestamp=parse_time(get_str(data, "deletionTimestamp")),
        )


@dataclass(slots=True)
class Condition:
    type: str
    status: ConditionStatus
    reason: str = ""
    message: str = ""
    last_transition_time: datetime | None = None

    def to_dict(self) -> StrDict:
        out: StrDict = {
            "type": self.type,
            "status": self.status,
            "reason": self.reason,
            "message": self.message,
        }
        if self.last_transition_time is not None:
            out["lastTransitionTime"] = format_time(self.last_transition_time)
        return out

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        status = get_str(data, "status")
        if status not in (CONDITION_TRUE, CONDITION_FALSE):
            status = CONDITION_UNKNOWN
        return cls(
            type=get_str(data, "type") or "",
            status=status,
            reason=get_str(data, "reason") or "",
            message=get_str(data, "message") or "",
            last_transition_time=parse_time(get_str(data, "lastTransitionTime")),
        )


def find_status_condition(conditions: list[Condition], condition_type: str) -> Condition | None:
    for condition in conditions:
        if condition.type == condition_type:
            return condition
    return None


def set_status_condition(conditions: list[Condition], new: Condition) -> None:
    """Insert or update ``new`` in place.

    The transition time only moves when the status actually changes, so
    re-asserting the same condition leaves the list equal to what it was.
    """
    existing = find_status_condition(conditions, new.type)
    if existing is None:
        if new.last_transition_time is None:
            new.last_transition_time = now()
        conditions.append(new)
        return

    if existing.status != new.status:
        existing.status = new.status
        existing.last_transition_time = new.last_transition_time or now()
    existing.reason = new.reason
    existing.message = new.message


def is_status_condition_true(conditions: list[Condition], condition_type: str) -> bool:
    condition = find_status_condition(conditions, condition_type)
    return condition is not None and condition.status == CONDITION_TRUE


def conditions_to_list(conditions: list[Condition]) -> list[object]:
    return [c.to_dict() for c in conditions]


def conditions_from(data: StrDict, key: str = "conditions") -> list[Condition]:
    return [Condition.from_dict(d) for d in get_table_list(data, key)]


@dataclass(slots=True)
class Resource:
    """Base for every persisted kind.

    Subclasses set ``API_VERSION``/``KIND`` and add their ``spec``/``status``.
    """

    API_VERSION: ClassVar[str] = ""
    KIND: ClassVar[str] = ""

    metadata: ObjectMeta

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def key(self) -> NamespacedName:
        return NamespacedName(namespace=self.metadata.namespace, name=self.metadata.name)

    def to_dict(self) -> StrDict:
        out: StrDict = {
            "apiVersion": self.API_VERSION,
            "kind": self.KIND,
            "metadata": self.metadata.to_dict(),
        }
        out.update(self._body())
        return out

    def _body(self) -> StrDict:
        return {}

    @classmethod
    def from_dict(cls, data: StrDict) -> Self:
        return cls(metadata=cls._metadata_from(data))

    @staticmethod
    def _metadata_from(data: StrDict) -> ObjectMeta:
        return ObjectMeta.from_dict(get_table(data, "metadata") or {})
