from __future__ import annotations

from rs.api import Release
from rs.api.meta import CONDITION_FALSE, CONDITION_TRUE, ObjectMeta, find_status_condition
from rs.api.release import (
    DEPLOYED_CONDITION,
    REASON_DEPLOYING,
    REASON_PIPELINE_FAILED,
    REASON_RUNNING,
    REASON_VALIDATION_ERROR,
    SUCCEEDED_CONDITION,
    ReleaseSpec,
)


def _release() -> Release:
    return Release(
        metadata=ObjectMeta(name="release", namespace="dev"),
        spec=ReleaseSpec(snapshot="snap", release_plan="plan"),
    )


def test_new_release_has_not_started() -> None:
    release = _release()
    assert not release.has_started()
    assert not release.is_done()
    assert not release.has_succeeded()
    assert not release.has_been_deployed()
    assert not release.is_being_deleted()


def test_mark_running_sets_start_time_once() -> None:
    release = _release()
    release.mark_running()
    started = release.status.start_time
    assert started is not None
    assert release.has_started()
    assert not release.is_done()

    release.mark_running()
    assert release.status.start_time == started
    condition = find_status_condition(release.status.conditions, SUCCEEDED_CONDITION)
    assert condition is not None and condition.reason == REASON_RUNNING


def test_mark_succeeded_requires_running() -> None:
    release = _release()
    release.mark_succeeded()
    assert not release.has_started()

    release.mark_running()
    release.mark_succeeded()
    assert release.has_succeeded()
    assert release.is_done()


def test_mark_failed_keeps_message() -> None:
    release = _release()
    release.mark_running()
    release.mark_failed(REASON_PIPELINE_FAILED, "step failed")

    condition = find_status_condition(release.status.conditions, SUCCEEDED_CONDITION)
    assert condition is not None
    assert condition.status == CONDITION_FALSE
    assert condition.reason == REASON_PIPELINE_FAILED
    assert condition.message == "step failed"


def test_done_release_is_not_flipped() -> None:
    release = _release()
    release.mark_running()
    release.mark_succeeded()

    release.mark_failed(REASON_PIPELINE_FAILED, "late")
    release.mark_invalid(REASON_VALIDATION_ERROR, "late")

    assert release.has_succeeded()


def test_mark_invalid_sets_completion_time() -> None:
    release = _release()
    release.mark_invalid(REASON_VALIDATION_ERROR, "bad")

    assert release.is_done()
    assert not release.has_succeeded()
    assert release.status.completion_time is not None


def test_deployment_conditions() -> None:
    release = _release()
    release.mark_deploying("", "in progress")
    condition = find_status_condition(release.status.conditions, DEPLOYED_CONDITION)
    assert condition is not None and condition.reason == REASON_DEPLOYING
    assert not release.has_been_deployed()

    release.mark_deployed(CONDITION_TRUE, "CommitsSynced", "done")
    assert release.has_been_deployed()


def test_codec_round_trip_keeps_status() -> None:
    release = _release()
    release.mark_running()
    release.status.release_pipeline_run = "managed/run-1"
    release.status.snapshot_environment_binding = "managed/binding-1"

    data = release.to_dict()
    assert data["kind"] == "Release"
    assert data["spec"] == {"snapshot": "snap", "releasePlan": "plan"}

    decoded = Release.from_dict(data)
    assert decoded.status.release_pipeline_run == "managed/run-1"
    assert decoded.status.snapshot_environment_binding == "managed/binding-1"
    assert decoded.has_started()
