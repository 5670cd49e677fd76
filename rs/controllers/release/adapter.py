"""Release adapter: the ensure-* operations run against one Release.

Every operation returns an ``Outcome``. Status changes always follow the
same shape: take a snapshot of the Release, mutate it, then send a patch
conditioned on the snapshot's resource version.
"""

from __future__ import annotations

import copy

from rs.api import (
    Application,
    Component,
    EnterpriseContractPolicy,
    Environment,
    PipelineRun,
    Release,
    ReleasePlanAdmission,
    ReleaseStrategy,
    Snapshot,
    SnapshotEnvironmentBinding,
)
from rs.api.application import ALL_COMPONENTS_DEPLOYED_CONDITION
from rs.api.meta import (
    CONDITION_TRUE,
    CONDITION_UNKNOWN,
    NamespacedName,
    ParseError,
    find_status_condition,
    now,
    parse_namespaced_name,
)
from rs.api.release import (
    REASON_PIPELINE_FAILED,
    REASON_RELEASE_PLAN_VALIDATION_ERROR,
    REASON_TARGET_DISABLED_ERROR,
    REASON_VALIDATION_ERROR,
)
from rs.core.result import Err, Ok, Result
from rs.gitops import new_snapshot_environment_binding
from rs.handler import set_controller_reference, set_owner_annotations
from rs.output.console import ConsoleProtocol, Style
from rs.reconciler import (
    Operation,
    Outcome,
    continue_processing,
    requeue,
    requeue_on_error_or_continue,
    requeue_on_error_or_stop,
    requeue_with_error,
)
from rs.store.errors import StoreError
from rs.store.indexes import APPLICATION_FIELD, ENVIRONMENT_FIELD
from rs.store.protocol import ResourceStore
from rs.syncer import Syncer
from rs.tekton import ReleasePipelineRun, release_selector

from .admission import get_active_release_plan_admission
from .errors import ReleaseError, from_store_error

FINALIZER_NAME = "appstudio.redhat.com/release-finalizer"
PIPELINE_RUN_PREFIX = "release-pipelinerun"


class Adapter:
    def __init__(
        self,
        release: Release,
        *,
        store: ResourceStore,
        console: ConsoleProtocol,
        syncer: Syncer | None = None,
    ) -> None:
        self.release = release
        self._store = store
        self._console = console
        self._syncer = syncer or Syncer(store, console)

    def operations(self) -> list[Operation]:
        """The ensure-* operations in the order a pass runs them."""
        return [
            self.ensure_finalizers_are_called,
            self.ensure_finalizer_is_added,
            self.ensure_release_plan_admission_enabled,
            self.ensure_release_pipeline_run_exists,
            self.ensure_release_pipeline_status_is_tracked,
            self.ensure_snapshot_environment_binding_exists,
            self.ensure_snapshot_environment_binding_is_tracked,
        ]

    # --- finalizer lifecycle -------------------------------------------------

    def ensure_finalizers_are_called(self) -> Outcome:
        """Clean up and drop the finalizer once the Release is being deleted.

        Ends the pass with a plain requeue so the next one sees the Release
        gone.
        """
        if not self.release.is_being_deleted():
            return continue_processing()

        if FINALIZER_NAME in self.release.metadata.finalizers:
            finalized = self._finalize_release()
            if isinstance(finalized, Err):
                return requeue_with_error(finalized.error)

            snapshot = self._snapshot()
            self.release.metadata.finalizers.remove(FINALIZER_NAME)
            patched = self._patch(snapshot)
            if isinstance(patched, Err):
                self.release.metadata.finalizers = snapshot.metadata.finalizers
                return requeue_with_error(patched.error)

            self._console.info("Successfully finalized Release", release=self.release.key)

        return requeue()

    def ensure_finalizer_is_added(self) -> Outcome:
        if self.release.is_being_deleted() or FINALIZER_NAME in self.release.metadata.finalizers:
            return continue_processing()

        self._console.info("Adding finalizer to the Release", release=self.release.key)
        snapshot = self._snapshot()
        self.release.metadata.finalizers.append(FINALIZER_NAME)
        return requeue_on_error_or_continue(self._patch(snapshot))

    # --- admission gate ------------------------------------------------------

    def ensure_release_plan_admission_enabled(self) -> Outcome:
        """Stop releases whose target is ambiguous or has opted out.

        Other resolution failures are left to the pipeline-run operation.
        """
        resolved = get_active_release_plan_admission(self._store, self.release)
        if isinstance(resolved, Ok):
            return continue_processing()

        match resolved.error.kind:
            case "multiple_admissions":
                return self._invalidate(REASON_VALIDATION_ERROR, resolved.error.message)
            case "auto_release_disabled":
                return self._invalidate(REASON_TARGET_DISABLED_ERROR, resolved.error.message)
            case _:
                return continue_processing()

    # --- release pipeline run ------------------------------------------------

    def ensure_release_pipeline_run_exists(self) -> Outcome:
        if self.release.is_done():
            return continue_processing()

        lookup = self._get_release_pipeline_run()
        if isinstance(lookup, Err):
            return requeue_with_error(lookup.error)

        pipeline_run = lookup.value
        strategy: ReleaseStrategy | None = None

        if pipeline_run is None:
            admission = get_active_release_plan_admission(self._store, self.release)
            if isinstance(admission, Err):
                if admission.error.is_transient:
                    return requeue_with_error(admission.error)
                return self._invalidate(REASON_RELEASE_PLAN_VALIDATION_ERROR, admission.error.message)

            resolved = self._get_release_strategy(admission.value)
            if isinstance(resolved, Err):
                return self._on_reference_error(resolved.error)
            strategy = resolved.value

            policy = self._get_enterprise_contract_policy(strategy)
            if isinstance(policy, Err):
                return self._on_reference_error(policy.error)

            snapshot = self._get_snapshot()
            if isinstance(snapshot, Err):
                return self._on_reference_error(snapshot.error)

            created = self._create_release_pipeline_run(strategy, policy.value, snapshot.value)
            if isinstance(created, Err):
                return requeue_with_error(created.error)
            pipeline_run = created.value

            self._console.info(
                "Created release PipelineRun",
                release=self.release.key,
                pipeline_run=pipeline_run.key,
            )
        elif not self.release.status.release_pipeline_run:
            # created by an earlier pass that never got to record it
            admission = get_active_release_plan_admission(self._store, self.release)
            if isinstance(admission, Err):
                if admission.error.is_transient:
                    return requeue_with_error(admission.error)
                return continue_processing()
            resolved = self._get_release_strategy(admission.value)
            if isinstance(resolved, Err):
                if resolved.error.is_not_found:
                    return continue_processing()
                return requeue_with_error(resolved.error)
            strategy = resolved.value

        return requeue_on_error_or_continue(
            self._register_release_status_data(pipeline_run, strategy)
        )

    def ensure_release_pipeline_status_is_tracked(self) -> Outcome:
        if not self.release.has_started() or self.release.is_done():
            return continue_processing()

        lookup = self._get_release_pipeline_run()
        if isinstance(lookup, Err):
            return requeue_with_error(lookup.error)
        if lookup.value is None:
            return continue_processing()

        return requeue_on_error_or_continue(self._register_release_pipeline_run_status(lookup.value))

    # --- snapshot environment binding ----------------------------------------

    def ensure_snapshot_environment_binding_exists(self) -> Outcome:
        if not self.release.has_succeeded() or self.release.has_been_deployed():
            return continue_processing()

        admission = get_active_release_plan_admission(self._store, self.release)
        if isinstance(admission, Err):
            return requeue_with_error(admission.error)
        if not admission.value.spec.environment:
            return continue_processing()

        environment = self._get_environment(admission.value)
        if isinstance(environment, Err):
            return requeue_with_error(environment.error)

        lookup = self._get_snapshot_environment_binding(
            environment.value, admission.value.spec.application
        )
        if isinstance(lookup, Err):
            return requeue_with_error(lookup.error)

        binding = lookup.value
        if binding is None:
            synced = self._sync_resources(admission.value)
            if isinstance(synced, Err):
                return requeue_with_error(synced.error)

            created = self._create_snapshot_environment_binding(environment.value, admission.value)
            if isinstance(created, Err):
                return requeue_with_error(created.error)
            binding = created.value

            self._console.info(
                "Created SnapshotEnvironmentBinding",
                release=self.release.key,
                binding=binding.key,
            )
        elif self.release.status.snapshot_environment_binding == str(binding.key):
            return continue_processing()

        snapshot = self._snapshot()
        self.release.status.snapshot_environment_binding = str(binding.key)
        return requeue_on_error_or_continue(self._patch(snapshot))

    def ensure_snapshot_environment_binding_is_tracked(self) -> Outcome:
        if (
            not self.release.has_succeeded()
            or not self.release.status.snapshot_environment_binding
            or self.release.has_been_deployed()
        ):
            return continue_processing()

        binding = self._get_snapshot_environment_binding_from_release_status()
        if isinstance(binding, Err):
            return requeue_with_error(binding.error)

        return requeue_on_error_or_continue(self._register_deployment_status(binding.value))

    # --- lookups ---------------------------------------------------------------

    def _get_release_pipeline_run(self) -> Result[PipelineRun | None, StoreError]:
        listed = self._store.list(PipelineRun, labels=release_selector(self.release), limit=1)
        if isinstance(listed, Err):
            return listed
        return Ok(listed.value[0] if listed.value else None)

    def _get_release_strategy(
        self, admission: ReleasePlanAdmission
    ) -> Result[ReleaseStrategy, StoreError]:
        if not admission.spec.release_strategy:
            return Err(
                StoreError(
                    kind="not_found",
                    message=(
                        f"ReleasePlanAdmission '{admission.key}' does not reference a ReleaseStrategy"
                    ),
                )
            )
        key = NamespacedName(namespace=admission.metadata.namespace, name=admission.spec.release_strategy)
        return self._store.get(ReleaseStrategy, key)

    def _get_enterprise_contract_policy(
        self, strategy: ReleaseStrategy
    ) -> Result[EnterpriseContractPolicy, StoreError]:
        key = NamespacedName(namespace=strategy.metadata.namespace, name=strategy.spec.policy)
        return self._store.get(EnterpriseContractPolicy, key)

    def _get_snapshot(self) -> Result[Snapshot, StoreError]:
        key = NamespacedName(namespace=self.release.metadata.namespace, name=self.release.spec.snapshot)
        return self._store.get(Snapshot, key)

    def _get_environment(self, admission: ReleasePlanAdmission) -> Result[Environment, StoreError]:
        key = NamespacedName(namespace=admission.metadata.namespace, name=admission.spec.environment)
        return self._store.get(Environment, key)

    def _get_snapshot_environment_binding(
        self, environment: Environment, application: str
    ) -> Result[SnapshotEnvironmentBinding | None, StoreError]:
        listed = self._store.list(
            SnapshotEnvironmentBinding,
            namespace=environment.metadata.namespace,
            fields={ENVIRONMENT_FIELD: environment.metadata.name},
        )
        if isinstance(listed, Err):
            return listed

        for binding in listed.value:
            if binding.spec.application == application:
                return Ok(binding)
        return Ok(None)

    def _get_snapshot_environment_binding_from_release_status(
        self,
    ) -> Result[SnapshotEnvironmentBinding, ParseError | StoreError]:
        key = parse_namespaced_name(self.release.status.snapshot_environment_binding)
        if isinstance(key, Err):
            return key
        return self._store.get(SnapshotEnvironmentBinding, key.value)

    # --- creation --------------------------------------------------------------

    def _create_release_pipeline_run(
        self,
        strategy: ReleaseStrategy,
        policy: EnterpriseContractPolicy,
        snapshot: Snapshot,
    ) -> Result[PipelineRun, StoreError]:
        pipeline_run = (
            ReleasePipelineRun(PIPELINE_RUN_PREFIX, strategy.metadata.namespace)
            .with_owner(self.release)
            .with_release_and_application_metadata(self.release, snapshot.spec.application)
            .with_release_strategy(strategy)
            .with_enterprise_contract_policy(policy)
            .with_snapshot(snapshot)
            .as_pipeline_run()
        )
        created = self._store.create(pipeline_run)
        if isinstance(created, Err):
            return created
        return Ok(pipeline_run)

    def _create_snapshot_environment_binding(
        self, environment: Environment, admission: ReleasePlanAdmission
    ) -> Result[SnapshotEnvironmentBinding, ReleaseError | StoreError]:
        application = self._store.get(
            Application,
            NamespacedName(namespace=admission.metadata.namespace, name=admission.spec.application),
        )
        if isinstance(application, Err):
            return application

        components = self._store.list(
            Component,
            namespace=application.value.metadata.namespace,
            fields={APPLICATION_FIELD: application.value.metadata.name},
        )
        if isinstance(components, Err):
            return components

        snapshot = self._get_snapshot()
        if isinstance(snapshot, Err):
            return snapshot

        binding = new_snapshot_environment_binding(components.value, snapshot.value, environment)

        owned = set_controller_reference(application.value, binding)
        if isinstance(owned, Err):
            return Err(ReleaseError(kind="ownership", message=owned.error.message))
        set_owner_annotations(self.release, binding)

        created = self._store.create(binding)
        if isinstance(created, Err):
            return created
        return Ok(binding)

    def _sync_resources(self, admission: ReleasePlanAdmission) -> Result[None, StoreError]:
        snapshot = self._get_snapshot()
        if isinstance(snapshot, Err):
            return snapshot
        return self._syncer.sync_snapshot(snapshot.value, admission.metadata.namespace)

    def _finalize_release(self) -> Result[None, StoreError]:
        lookup = self._get_release_pipeline_run()
        if isinstance(lookup, Err):
            return lookup
        if lookup.value is not None:
            deleted = self._store.delete_if_exists(lookup.value)
            if isinstance(deleted, Err):
                return deleted
            self._console.print(
                "Deleted release PipelineRun",
                Style.DIM,
                release=self.release.key,
                pipeline_run=lookup.value.key,
            )
        return Ok(None)

    # --- status ----------------------------------------------------------------

    def _register_release_status_data(
        self, pipeline_run: PipelineRun | None, strategy: ReleaseStrategy | None
    ) -> Result[None, StoreError]:
        if pipeline_run is None or strategy is None:
            return Ok(None)

        snapshot = self._snapshot()
        status = self.release.status
        status.release_pipeline_run = str(pipeline_run.key)
        status.release_strategy = str(strategy.key)
        status.target = pipeline_run.metadata.namespace
        self.release.mark_running()
        return self._patch(snapshot)

    def _register_release_pipeline_run_status(self, pipeline_run: PipelineRun) -> Result[None, StoreError]:
        if not pipeline_run.is_done():
            return Ok(None)

        snapshot = self._snapshot()
        condition = pipeline_run.succeeded_condition()
        self.release.status.completion_time = now()
        if condition is not None and condition.status == CONDITION_TRUE:
            self.release.mark_succeeded()
        else:
            message = condition.message if condition is not None else ""
            self.release.mark_failed(REASON_PIPELINE_FAILED, message)
        return self._patch(snapshot)

    def _register_deployment_status(self, binding: SnapshotEnvironmentBinding) -> Result[None, StoreError]:
        condition = find_status_condition(
            binding.status.component_deployment_conditions, ALL_COMPONENTS_DEPLOYED_CONDITION
        )
        if condition is None:
            return Ok(None)

        snapshot = self._snapshot()
        if condition.status == CONDITION_UNKNOWN:
            self.release.mark_deploying(condition.reason, condition.message)
        else:
            self.release.mark_deployed(condition.status, condition.reason, condition.message)
        return self._patch(snapshot)

    def _invalidate(self, reason: str, message: str) -> Outcome:
        snapshot = self._snapshot()
        self.release.mark_invalid(reason, message)
        if self.release != snapshot:
            self._console.warning("Release is invalid", release=self.release.key, reason=reason)
        return requeue_on_error_or_stop(self._patch(snapshot))

    def _on_reference_error(self, error: StoreError) -> Outcome:
        if error.is_not_found:
            return self._invalidate(REASON_VALIDATION_ERROR, error.message)
        return requeue_with_error(from_store_error(error))

    def _snapshot(self) -> Release:
        return copy.deepcopy(self.release)

    def _patch(self, snapshot: Release) -> Result[None, StoreError]:
        """Send the changes made since ``snapshot``, if there are any."""
        if self.release == snapshot:
            return Ok(None)
        return self._store.patch(self.release, resource_version=snapshot.metadata.resource_version)
