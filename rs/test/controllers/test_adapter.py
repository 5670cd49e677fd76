from __future__ import annotations

from rs.api import (
    Application,
    EnterpriseContractPolicy,
    PipelineRun,
    Release,
    ReleasePlanAdmission,
    ReleaseStrategy,
    Snapshot,
    SnapshotEnvironmentBinding,
)
from rs.api.application import ALL_COMPONENTS_DEPLOYED_CONDITION, BindingComponent
from rs.api.meta import (
    CONDITION_FALSE,
    CONDITION_TRUE,
    CONDITION_UNKNOWN,
    Condition,
    ConditionStatus,
    NamespacedName,
    ParseError,
    find_status_condition,
    set_status_condition,
)
from rs.api.pipeline import SUCCEEDED_CONDITION as RUN_SUCCEEDED
from rs.api.release import (
    DEPLOYED_CONDITION,
    REASON_DEPLOYING,
    REASON_PIPELINE_FAILED,
    REASON_RELEASE_PLAN_VALIDATION_ERROR,
    REASON_RUNNING,
    REASON_TARGET_DISABLED_ERROR,
    REASON_VALIDATION_ERROR,
    SUCCEEDED_CONDITION,
)
from rs.controllers.release import FINALIZER_NAME, Adapter
from rs.core.result import Ok
from rs.handler import annotated_owner
from rs.output.console import MockConsole
from rs.reconciler import CONTINUE, Continue, Requeue, Stop
from rs.store import MemoryStore, StoreError
from rs.tekton import ReleasePipelineRun, release_selector

from rs.test import _world


def _setup(*admissions: ReleasePlanAdmission) -> tuple[MemoryStore, Release]:
    store = _world.world(*admissions)
    release = _world.release()
    _world.create(store, release)
    return store, release


def _adapter(store: MemoryStore, release: Release, console: MockConsole | None = None) -> Adapter:
    fresh = store.get(Release, release.key).unwrap()
    return Adapter(fresh, store=store, console=console or MockConsole())


def _stored(store: MemoryStore, release: Release) -> Release:
    return store.get(Release, release.key).unwrap()


def _reason(release: Release, condition_type: str = SUCCEEDED_CONDITION) -> str | None:
    condition = find_status_condition(release.status.conditions, condition_type)
    return condition.reason if condition is not None else None


def _runs(store: MemoryStore) -> list[PipelineRun]:
    return store.objects(PipelineRun)


def _finish_run(store: MemoryStore, *, succeeded: bool, message: str = "") -> None:
    run = _runs(store)[0]
    version = run.metadata.resource_version
    set_status_condition(
        run.status.conditions,
        Condition(
            type=RUN_SUCCEEDED,
            status=CONDITION_TRUE if succeeded else CONDITION_FALSE,
            message=message,
        ),
    )
    assert store.patch(run, resource_version=version) == Ok(None)


def _started(*admissions: ReleasePlanAdmission) -> tuple[MemoryStore, Release]:
    store, release = _setup(*admissions)
    assert _adapter(store, release).ensure_release_pipeline_run_exists() == CONTINUE
    return store, release


def _succeeded(*admissions: ReleasePlanAdmission) -> tuple[MemoryStore, Release]:
    store, release = _started(*admissions)
    _finish_run(store, succeeded=True)
    assert _adapter(store, release).ensure_release_pipeline_status_is_tracked() == CONTINUE
    return store, release


def _deployed_binding(store: MemoryStore, release: Release) -> SnapshotEnvironmentBinding:
    assert _adapter(store, release).ensure_snapshot_environment_binding_exists() == CONTINUE
    return store.objects(SnapshotEnvironmentBinding)[0]


def _set_deployment(
    store: MemoryStore, binding: SnapshotEnvironmentBinding, status: ConditionStatus, reason: str = ""
) -> None:
    seb = store.get(SnapshotEnvironmentBinding, binding.key).unwrap()
    version = seb.metadata.resource_version
    set_status_condition(
        seb.status.component_deployment_conditions,
        Condition(type=ALL_COMPONENTS_DEPLOYED_CONDITION, status=status, reason=reason, message="m"),
    )
    assert store.patch(seb, resource_version=version) == Ok(None)


def _orphan_run(release: Release) -> PipelineRun:
    return (
        ReleasePipelineRun("release-pipelinerun", _world.MANAGED)
        .with_owner(release)
        .with_release_and_application_metadata(release, _world.APP)
        .as_pipeline_run()
    )


class TestOperations:
    def test_fixed_order(self) -> None:
        store, release = _setup()
        adapter = _adapter(store, release)
        assert [op.__name__ for op in adapter.operations()] == [
            "ensure_finalizers_are_called",
            "ensure_finalizer_is_added",
            "ensure_release_plan_admission_enabled",
            "ensure_release_pipeline_run_exists",
            "ensure_release_pipeline_status_is_tracked",
            "ensure_snapshot_environment_binding_exists",
            "ensure_snapshot_environment_binding_is_tracked",
        ]


class TestFinalizerIsAdded:
    def test_adds_finalizer(self) -> None:
        store, release = _setup()
        console = MockConsole()

        outcome = _adapter(store, release, console).ensure_finalizer_is_added()

        assert outcome == CONTINUE
        assert _stored(store, release).metadata.finalizers == [FINALIZER_NAME]
        assert console.find("Adding finalizer")

    def test_present_finalizer_is_not_patched_again(self) -> None:
        store, release = _setup()
        _adapter(store, release).ensure_finalizer_is_added()
        version = _stored(store, release).metadata.resource_version

        assert _adapter(store, release).ensure_finalizer_is_added() == CONTINUE
        assert _stored(store, release).metadata.resource_version == version

    def test_conflict_requeues(self) -> None:
        store, release = _setup()
        store.fail_next("patch", kind=Release, error=StoreError(kind="conflict", message="stale"))

        outcome = _adapter(store, release).ensure_finalizer_is_added()

        assert outcome == Requeue(error=StoreError(kind="conflict", message="stale"))
        assert _stored(store, release).metadata.finalizers == []


class TestFinalizersAreCalled:
    def _deleting(self) -> tuple[MemoryStore, Release]:
        store, release = _setup()
        _adapter(store, release).ensure_finalizer_is_added()
        _adapter(store, release).ensure_release_pipeline_run_exists()
        assert store.delete_if_exists(_stored(store, release)) == Ok(True)
        return store, release

    def test_not_deleting_continues(self) -> None:
        store, release = _setup()
        assert _adapter(store, release).ensure_finalizers_are_called() == CONTINUE

    def test_cleans_up_and_releases_object(self) -> None:
        store, release = self._deleting()
        assert len(_runs(store)) == 1
        console = MockConsole()

        outcome = _adapter(store, release, console).ensure_finalizers_are_called()

        assert outcome == Requeue(error=None)
        assert _runs(store) == []
        assert store.objects(Release) == []
        assert console.find("Successfully finalized Release")

    def test_missing_run_is_fine(self) -> None:
        store, release = self._deleting()
        store.delete_if_exists(_runs(store)[0])

        assert _adapter(store, release).ensure_finalizers_are_called() == Requeue(error=None)
        assert store.objects(Release) == []

    def test_delete_failure_keeps_finalizer(self) -> None:
        store, release = self._deleting()
        store.fail_next("delete", kind=PipelineRun)

        outcome = _adapter(store, release).ensure_finalizers_are_called()

        assert isinstance(outcome, Requeue) and outcome.error is not None
        assert _stored(store, release).metadata.finalizers == [FINALIZER_NAME]
        assert len(_runs(store)) == 1

    def test_patch_failure_keeps_finalizer(self) -> None:
        store, release = self._deleting()
        store.fail_next("patch", kind=Release)
        adapter = _adapter(store, release)

        outcome = adapter.ensure_finalizers_are_called()

        assert isinstance(outcome, Requeue) and outcome.error is not None
        assert adapter.release.metadata.finalizers == [FINALIZER_NAME]
        assert _stored(store, release).metadata.finalizers == [FINALIZER_NAME]

    def test_already_removed_finalizer_skips_cleanup(self) -> None:
        store, release = _started()
        assert len(_runs(store)) == 1
        adapter = _adapter(store, release)
        assert FINALIZER_NAME not in adapter.release.metadata.finalizers
        adapter.release.metadata.deletion_timestamp = adapter.release.metadata.creation_timestamp

        assert adapter.ensure_finalizers_are_called() == Requeue(error=None)
        assert len(_runs(store)) == 1


class TestAdmissionEnabled:
    def test_single_admission_continues(self) -> None:
        store, release = _setup()
        assert _adapter(store, release).ensure_release_plan_admission_enabled() == CONTINUE

    def test_multiple_admissions_invalidate(self) -> None:
        store, release = _setup(_world.admission("a"), _world.admission("b"))
        console = MockConsole()

        outcome = _adapter(store, release, console).ensure_release_plan_admission_enabled()

        assert isinstance(outcome, Stop)
        stored = _stored(store, release)
        assert stored.is_done()
        assert _reason(stored) == REASON_VALIDATION_ERROR
        assert console.has_warning()

    def test_disabled_admission_invalidates(self) -> None:
        store, release = _setup(_world.admission(auto_release="false"))

        outcome = _adapter(store, release).ensure_release_plan_admission_enabled()

        assert isinstance(outcome, Stop)
        assert _reason(_stored(store, release)) == REASON_TARGET_DISABLED_ERROR

    def test_missing_admission_is_left_to_later_operations(self) -> None:
        store, release = _setup(_world.admission(application="other-app"))
        assert _adapter(store, release).ensure_release_plan_admission_enabled() == CONTINUE
        assert not _stored(store, release).has_started()

    def test_invalid_release_is_not_patched_again(self) -> None:
        store, release = _setup(_world.admission("a"), _world.admission("b"))
        _adapter(store, release).ensure_release_plan_admission_enabled()
        version = _stored(store, release).metadata.resource_version
        console = MockConsole()

        outcome = _adapter(store, release, console).ensure_release_plan_admission_enabled()

        assert isinstance(outcome, Stop)
        assert _stored(store, release).metadata.resource_version == version
        assert not console.has_warning()


class TestPipelineRunExists:
    def test_creates_run_and_registers_status(self) -> None:
        store, release = _setup()
        console = MockConsole()

        outcome = _adapter(store, release, console).ensure_release_pipeline_run_exists()

        assert outcome == CONTINUE
        runs = _runs(store)
        assert len(runs) == 1
        run = runs[0]
        assert run.metadata.namespace == _world.MANAGED
        assert run.metadata.name.startswith("release-pipelinerun-")
        assert all(run.metadata.labels[k] == v for k, v in release_selector(release).items())
        assert annotated_owner(run, Release) == release.key

        stored = _stored(store, release)
        assert stored.status.release_pipeline_run == f"managed/{run.metadata.name}"
        assert stored.status.release_strategy == "managed/strategy"
        assert stored.status.target == _world.MANAGED
        assert stored.status.start_time is not None
        assert _reason(stored) == REASON_RUNNING
        assert console.find("Created release PipelineRun")

    def test_is_idempotent(self) -> None:
        store, release = _started()
        version = _stored(store, release).metadata.resource_version

        assert _adapter(store, release).ensure_release_pipeline_run_exists() == CONTINUE

        assert len(_runs(store)) == 1
        assert _stored(store, release).metadata.resource_version == version

    def test_found_run_without_status_reference_is_registered(self) -> None:
        store, release = _setup()
        orphan = _orphan_run(release)
        _world.create(store, orphan)

        assert _adapter(store, release).ensure_release_pipeline_run_exists() == CONTINUE

        assert len(_runs(store)) == 1
        stored = _stored(store, release)
        assert stored.status.release_pipeline_run == str(orphan.key)
        assert stored.status.release_strategy == "managed/strategy"
        assert stored.has_started()

    def test_found_run_without_admission_is_left_unrecorded(self) -> None:
        store, release = _setup(_world.admission(application="other-app"))
        _world.create(store, _orphan_run(release))

        assert _adapter(store, release).ensure_release_pipeline_run_exists() == CONTINUE

        stored = _stored(store, release)
        assert stored.status.release_pipeline_run == ""
        assert not stored.is_done()

    def test_found_run_with_missing_strategy_is_left_unrecorded(self) -> None:
        store, release = _setup(_world.admission(strategy="missing"))
        _world.create(store, _orphan_run(release))

        assert _adapter(store, release).ensure_release_pipeline_run_exists() == CONTINUE

        stored = _stored(store, release)
        assert stored.status.release_pipeline_run == ""
        assert not stored.is_done()

    def test_finished_release_does_not_start_another_run(self) -> None:
        store, release = _succeeded()
        assert store.delete_if_exists(_runs(store)[0]) == Ok(True)
        version = _stored(store, release).metadata.resource_version

        assert _adapter(store, release).ensure_release_pipeline_run_exists() == CONTINUE

        assert _runs(store) == []
        stored = _stored(store, release)
        assert stored.has_succeeded()
        assert stored.metadata.resource_version == version

    def test_status_patch_failure_then_recovery(self) -> None:
        store, release = _setup()
        _adapter(store, release).ensure_finalizer_is_added()
        store.fail_next("patch", kind=Release)

        first = _adapter(store, release).ensure_release_pipeline_run_exists()
        assert isinstance(first, Requeue) and first.error is not None
        assert len(_runs(store)) == 1
        assert not _stored(store, release).has_started()

        assert _adapter(store, release).ensure_release_pipeline_run_exists() == CONTINUE
        assert len(_runs(store)) == 1
        assert _stored(store, release).status.release_pipeline_run == str(_runs(store)[0].key)

    def test_no_admission_invalidates(self) -> None:
        store, release = _setup(_world.admission(application="other-app"))

        outcome = _adapter(store, release).ensure_release_pipeline_run_exists()

        assert isinstance(outcome, Stop)
        stored = _stored(store, release)
        assert _reason(stored) == REASON_RELEASE_PLAN_VALIDATION_ERROR
        assert stored.status.completion_time is not None
        assert _runs(store) == []

    def test_missing_strategy_invalidates(self) -> None:
        store, release = _setup(_world.admission(strategy="missing"))

        outcome = _adapter(store, release).ensure_release_pipeline_run_exists()

        assert isinstance(outcome, Stop)
        assert _reason(_stored(store, release)) == REASON_VALIDATION_ERROR
        assert _runs(store) == []

    def test_empty_strategy_reference_invalidates(self) -> None:
        store, release = _setup(_world.admission(strategy=""))

        outcome = _adapter(store, release).ensure_release_pipeline_run_exists()

        assert isinstance(outcome, Stop)
        condition = find_status_condition(_stored(store, release).status.conditions, SUCCEEDED_CONDITION)
        assert condition is not None
        assert "does not reference a ReleaseStrategy" in condition.message

    def test_missing_policy_invalidates(self) -> None:
        store, release = _setup()
        store.delete_if_exists(_world.policy())

        assert isinstance(_adapter(store, release).ensure_release_pipeline_run_exists(), Stop)
        assert _reason(_stored(store, release)) == REASON_VALIDATION_ERROR

    def test_missing_snapshot_invalidates(self) -> None:
        store, release = _setup()
        store.delete_if_exists(_world.snapshot())

        assert isinstance(_adapter(store, release).ensure_release_pipeline_run_exists(), Stop)
        assert _reason(_stored(store, release)) == REASON_VALIDATION_ERROR

    def test_transient_lookup_failure_requeues_without_status_change(self) -> None:
        store, release = _setup()
        version = _stored(store, release).metadata.resource_version
        store.fail_next("get", kind=ReleaseStrategy)

        outcome = _adapter(store, release).ensure_release_pipeline_run_exists()

        assert isinstance(outcome, Requeue) and outcome.error is not None
        assert _stored(store, release).metadata.resource_version == version
        assert _runs(store) == []

    def test_transient_policy_failure_requeues(self) -> None:
        store, release = _setup()
        store.fail_next("get", kind=EnterpriseContractPolicy)

        outcome = _adapter(store, release).ensure_release_pipeline_run_exists()

        assert isinstance(outcome, Requeue) and outcome.error is not None
        assert not _stored(store, release).is_done()

    def test_run_lookup_failure_requeues(self) -> None:
        store, release = _setup()
        store.fail_next("list", kind=PipelineRun)

        outcome = _adapter(store, release).ensure_release_pipeline_run_exists()

        assert isinstance(outcome, Requeue) and outcome.error is not None
        assert _runs(store) == []

    def test_create_failure_requeues(self) -> None:
        store, release = _setup()
        store.fail_next("create", kind=PipelineRun)

        outcome = _adapter(store, release).ensure_release_pipeline_run_exists()

        assert isinstance(outcome, Requeue) and outcome.error is not None
        assert not _stored(store, release).has_started()


class TestPipelineStatusIsTracked:
    def test_not_started_continues(self) -> None:
        store, release = _setup()
        store.fail_next("list", kind=PipelineRun)
        assert _adapter(store, release).ensure_release_pipeline_status_is_tracked() == CONTINUE

    def test_running_run_changes_nothing(self) -> None:
        store, release = _started()
        version = _stored(store, release).metadata.resource_version

        assert _adapter(store, release).ensure_release_pipeline_status_is_tracked() == CONTINUE
        assert _stored(store, release).metadata.resource_version == version

    def test_succeeded_run(self) -> None:
        store, release = _started()
        _finish_run(store, succeeded=True)

        assert _adapter(store, release).ensure_release_pipeline_status_is_tracked() == CONTINUE

        stored = _stored(store, release)
        assert stored.has_succeeded()
        assert stored.status.completion_time is not None

    def test_failed_run(self) -> None:
        store, release = _started()
        _finish_run(store, succeeded=False, message="task verify failed")

        assert _adapter(store, release).ensure_release_pipeline_status_is_tracked() == CONTINUE

        stored = _stored(store, release)
        condition = find_status_condition(stored.status.conditions, SUCCEEDED_CONDITION)
        assert condition is not None
        assert condition.status == CONDITION_FALSE
        assert condition.reason == REASON_PIPELINE_FAILED
        assert condition.message == "task verify failed"

    def test_done_release_is_not_tracked(self) -> None:
        store, release = _succeeded()
        store.fail_next("list", kind=PipelineRun)
        assert _adapter(store, release).ensure_release_pipeline_status_is_tracked() == CONTINUE

    def test_lookup_failure_requeues(self) -> None:
        store, release = _started()
        store.fail_next("list", kind=PipelineRun)
        outcome = _adapter(store, release).ensure_release_pipeline_status_is_tracked()
        assert isinstance(outcome, Requeue) and outcome.error is not None


class TestBindingExists:
    def test_not_succeeded_continues(self) -> None:
        store, release = _started()
        assert _adapter(store, release).ensure_snapshot_environment_binding_exists() == CONTINUE
        assert store.objects(SnapshotEnvironmentBinding) == []

    def test_creates_binding(self) -> None:
        store, release = _succeeded()
        console = MockConsole()

        outcome = _adapter(store, release, console).ensure_snapshot_environment_binding_exists()

        assert outcome == CONTINUE
        bindings = store.objects(SnapshotEnvironmentBinding)
        assert len(bindings) == 1
        binding = bindings[0]
        assert binding.metadata.namespace == _world.MANAGED
        assert binding.metadata.name.startswith("snapshot-")
        assert binding.spec.environment == _world.ENVIRONMENT
        assert binding.spec.application == _world.APP
        assert binding.spec.components == [
            BindingComponent(name="api", replicas=2),
            BindingComponent(name="worker", replicas=1),
        ]
        app = store.get(Application, NamespacedName(_world.MANAGED, _world.APP)).unwrap()
        assert [(r.kind, r.uid, r.controller) for r in binding.metadata.owner_references] == [
            ("Application", app.metadata.uid, True)
        ]
        assert annotated_owner(binding, Release) == release.key
        assert _stored(store, release).status.snapshot_environment_binding == str(binding.key)
        assert store.get(Snapshot, NamespacedName(_world.MANAGED, "snapshot")).is_ok()
        assert console.find("Created SnapshotEnvironmentBinding")

    def test_is_idempotent(self) -> None:
        store, release = _succeeded()
        _deployed_binding(store, release)
        version = _stored(store, release).metadata.resource_version

        assert _adapter(store, release).ensure_snapshot_environment_binding_exists() == CONTINUE

        assert len(store.objects(SnapshotEnvironmentBinding)) == 1
        assert _stored(store, release).metadata.resource_version == version

    def test_unrecorded_binding_is_recorded(self) -> None:
        store, release = _succeeded()
        binding = _deployed_binding(store, release)
        stored = _stored(store, release)
        version = stored.metadata.resource_version
        stored.status.snapshot_environment_binding = ""
        store.patch(stored, resource_version=version)

        assert _adapter(store, release).ensure_snapshot_environment_binding_exists() == CONTINUE

        assert len(store.objects(SnapshotEnvironmentBinding)) == 1
        assert _stored(store, release).status.snapshot_environment_binding == str(binding.key)

    def test_no_environment_continues(self) -> None:
        store, release = _succeeded(_world.admission(environment=""))

        assert _adapter(store, release).ensure_snapshot_environment_binding_exists() == CONTINUE
        assert store.objects(SnapshotEnvironmentBinding) == []

    def test_missing_environment_requeues(self) -> None:
        store, release = _succeeded(_world.admission(environment="staging"))

        outcome = _adapter(store, release).ensure_snapshot_environment_binding_exists()

        assert isinstance(outcome, Requeue)
        assert outcome.error is not None
        assert "staging" in outcome.error.message

    def test_admission_failure_requeues(self) -> None:
        store, release = _succeeded()
        _world.create(store, _world.admission("second"))

        outcome = _adapter(store, release).ensure_snapshot_environment_binding_exists()

        assert isinstance(outcome, Requeue) and outcome.error is not None
        assert store.objects(SnapshotEnvironmentBinding) == []

    def test_create_failure_requeues(self) -> None:
        store, release = _succeeded()
        store.fail_next("create", kind=SnapshotEnvironmentBinding)

        outcome = _adapter(store, release).ensure_snapshot_environment_binding_exists()

        assert isinstance(outcome, Requeue) and outcome.error is not None
        assert _stored(store, release).status.snapshot_environment_binding == ""


class TestBindingIsTracked:
    def test_without_reference_continues(self) -> None:
        store, release = _succeeded()
        assert _adapter(store, release).ensure_snapshot_environment_binding_is_tracked() == CONTINUE

    def test_missing_condition_changes_nothing(self) -> None:
        store, release = _succeeded()
        _deployed_binding(store, release)
        version = _stored(store, release).metadata.resource_version

        assert _adapter(store, release).ensure_snapshot_environment_binding_is_tracked() == CONTINUE
        assert _stored(store, release).metadata.resource_version == version

    def test_unknown_marks_deploying(self) -> None:
        store, release = _succeeded()
        _set_deployment(store, _deployed_binding(store, release), CONDITION_UNKNOWN)

        assert _adapter(store, release).ensure_snapshot_environment_binding_is_tracked() == CONTINUE

        stored = _stored(store, release)
        assert _reason(stored, DEPLOYED_CONDITION) == REASON_DEPLOYING
        assert not stored.has_been_deployed()

    def test_repeated_progress_is_not_patched_again(self) -> None:
        store, release = _succeeded()
        _set_deployment(store, _deployed_binding(store, release), CONDITION_UNKNOWN, "Progressing")
        _adapter(store, release).ensure_snapshot_environment_binding_is_tracked()
        version = _stored(store, release).metadata.resource_version

        _adapter(store, release).ensure_snapshot_environment_binding_is_tracked()

        assert _stored(store, release).metadata.resource_version == version
        assert _reason(_stored(store, release), DEPLOYED_CONDITION) == "Progressing"

    def test_true_marks_deployed(self) -> None:
        store, release = _succeeded()
        _set_deployment(store, _deployed_binding(store, release), CONDITION_TRUE, "CommitsSynced")

        _adapter(store, release).ensure_snapshot_environment_binding_is_tracked()

        stored = _stored(store, release)
        assert stored.has_been_deployed()
        assert _reason(stored, DEPLOYED_CONDITION) == "CommitsSynced"

    def test_false_marks_not_deployed(self) -> None:
        store, release = _succeeded()
        _set_deployment(store, _deployed_binding(store, release), CONDITION_FALSE, "ErrorOccurred")

        _adapter(store, release).ensure_snapshot_environment_binding_is_tracked()

        stored = _stored(store, release)
        condition = find_status_condition(stored.status.conditions, DEPLOYED_CONDITION)
        assert condition is not None
        assert condition.status == CONDITION_FALSE
        assert condition.reason == "ErrorOccurred"

    def test_malformed_reference_requeues_with_parse_error(self) -> None:
        store, release = _succeeded()
        stored = _stored(store, release)
        stored.status.snapshot_environment_binding = "no-separator"
        store.patch(stored, resource_version=stored.metadata.resource_version)

        outcome = _adapter(store, release).ensure_snapshot_environment_binding_is_tracked()

        assert isinstance(outcome, Requeue)
        assert isinstance(outcome.error, ParseError)

    def test_deleted_binding_requeues(self) -> None:
        store, release = _succeeded()
        binding = _deployed_binding(store, release)
        store.delete_if_exists(binding)

        outcome = _adapter(store, release).ensure_snapshot_environment_binding_is_tracked()

        assert isinstance(outcome, Requeue) and outcome.error is not None


def test_operations_continue_on_a_fresh_release() -> None:
    store, release = _setup()
    adapter = _adapter(store, release)
    outcomes = [op() for op in adapter.operations()]
    assert all(isinstance(o, Continue) for o in outcomes)
    assert _stored(store, release).has_started()

