from __future__ import annotations

from datetime import UTC, datetime

import pytest

from rs.api.meta import (
    CONDITION_FALSE,
    CONDITION_TRUE,
    Condition,
    NamespacedName,
    ObjectMeta,
    OwnerReference,
    format_time,
    is_status_condition_true,
    parse_namespaced_name,
    parse_time,
    set_status_condition,
)
from rs.core.result import Err, Ok


class TestNamespacedName:
    def test_str(self) -> None:
        assert str(NamespacedName(namespace="dev", name="release-1")) == "dev/release-1"

    def test_parse(self) -> None:
        assert parse_namespaced_name("dev/release-1") == Ok(
            NamespacedName(namespace="dev", name="release-1")
        )

    @pytest.mark.parametrize("value", ["", "dev", "dev/", "/name", "a/b/c"])
    def test_parse_rejects_malformed(self, value: str) -> None:
        result = parse_namespaced_name(value)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_reference"
        assert result.error.value == value
        assert "<namespace>/<name>" in result.error.message

    def test_ordering(self) -> None:
        keys = [NamespacedName("b", "a"), NamespacedName("a", "z"), NamespacedName("a", "b")]
        assert [str(k) for k in sorted(keys)] == ["a/b", "a/z", "b/a"]


class TestConditions:
    def test_insert_sets_transition_time(self) -> None:
        conditions: list[Condition] = []
        set_status_condition(conditions, Condition(type="Succeeded", status=CONDITION_TRUE))
        assert len(conditions) == 1
        assert conditions[0].last_transition_time is not None

    def test_same_status_keeps_transition_time(self) -> None:
        at = datetime(2024, 1, 1, tzinfo=UTC)
        conditions = [Condition(type="Succeeded", status=CONDITION_TRUE, last_transition_time=at)]

        set_status_condition(
            conditions, Condition(type="Succeeded", status=CONDITION_TRUE, reason="Again")
        )

        assert conditions[0].last_transition_time == at
        assert conditions[0].reason == "Again"

    def test_status_change_moves_transition_time(self) -> None:
        at = datetime(2024, 1, 1, tzinfo=UTC)
        conditions = [Condition(type="Succeeded", status=CONDITION_TRUE, last_transition_time=at)]

        set_status_condition(conditions, Condition(type="Succeeded", status=CONDITION_FALSE))

        assert conditions[0].status == CONDITION_FALSE
        assert conditions[0].last_transition_time != at
        assert not is_status_condition_true(conditions, "Succeeded")

    def test_unknown_status_string_decodes_as_unknown(self) -> None:
        assert Condition.from_dict({"type": "X", "status": "maybe"}).status == "Unknown"


def test_time_format_round_trip() -> None:
    at = datetime(2024, 5, 6, 7, 8, 9, tzinfo=UTC)
    assert format_time(at) == "2024-05-06T07:08:09Z"
    assert parse_time("2024-05-06T07:08:09Z") == at
    assert parse_time("garbage") is None


def test_object_meta_codec_uses_camel_case() -> None:
    meta = ObjectMeta(
        name="r",
        namespace="dev",
        resource_version="4",
        finalizers=["f"],
        owner_references=[OwnerReference(api_version="v1", kind="K", name="o", uid="u", controller=True)],
    )
    data = meta.to_dict()
    assert data["resourceVersion"] == "4"
    assert data["ownerReferences"] == [
        {
            "apiVersion": "v1",
            "kind": "K",
            "name": "o",
            "uid": "u",
            "controller": True,
            "blockOwnerDeletion": False,
        }
    ]
    assert ObjectMeta.from_dict(data) == meta
