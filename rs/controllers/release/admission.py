"""Resolves the single ReleasePlanAdmission that accepts a Release."""

from __future__ import annotations

from rs.api import Release, ReleasePlan, ReleasePlanAdmission
from rs.api.meta import NamespacedName
from rs.core.result import Err, Ok, Result
from rs.store.indexes import ORIGIN_FIELD
from rs.store.protocol import ResourceStore

from .errors import ReleaseError, from_store_error


def get_release_plan(store: ResourceStore, release: Release) -> Result[ReleasePlan, ReleaseError]:
    key = NamespacedName(namespace=release.metadata.namespace, name=release.spec.release_plan)
    return store.get(ReleasePlan, key).map_err(from_store_error)


def get_active_release_plan_admission(
    store: ResourceStore, release: Release
) -> Result[ReleasePlanAdmission, ReleaseError]:
    """Return the ReleasePlanAdmission targeted by the Release's ReleasePlan.

    Candidates live in the plan's target namespace, come from the plan's
    namespace and accept the plan's application. Exactly one must exist, and
    it must not carry ``auto-release: "false"``. Nothing is cached: every call
    reads the store again.
    """
    plan_result = get_release_plan(store, release)
    if isinstance(plan_result, Err):
        return plan_result
    plan = plan_result.value

    listed = store.list(
        ReleasePlanAdmission,
        namespace=plan.spec.target,
        fields={ORIGIN_FIELD: plan.metadata.namespace},
    )
    if isinstance(listed, Err):
        return Err(from_store_error(listed.error))

    active: ReleasePlanAdmission | None = None
    for admission in listed.value:
        if admission.spec.application != plan.spec.application:
            continue

        if active is not None:
            return Err(
                ReleaseError(
                    kind="multiple_admissions",
                    message=(
                        f"multiple ReleasePlanAdmissions found with the target ({plan.spec.target}) "
                        f"for application '{plan.spec.application}'"
                    ),
                )
            )

        if admission.auto_release_disabled():
            return Err(
                ReleaseError(
                    kind="auto_release_disabled",
                    message=(
                        f"found ReleasePlanAdmission '{admission.metadata.name}' "
                        "with auto-release label set to false"
                    ),
                )
            )

        active = admission

    if active is None:
        return Err(
            ReleaseError(
                kind="no_admission",
                message=(
                    f"no ReleasePlanAdmission found in the target ({plan.spec.target}) "
                    f"for application '{plan.spec.application}'"
                ),
            )
        )

    return Ok(active)
