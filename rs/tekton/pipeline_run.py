"""Fluent builder for release PipelineRuns.

    run = (
        ReleasePipelineRun("release-pipelinerun", strategy.namespace)
        .with_owner(release)
        .with_release_and_application_metadata(release, snapshot.spec.application)
        .with_release_strategy(strategy)
        .with_enterprise_contract_policy(policy)
        .with_snapshot(snapshot)
        .as_pipeline_run()
    )
"""

from __future__ import annotations

import copy
import json
from typing import Self

from rs.api import EnterpriseContractPolicy, PipelineRun, Release, ReleaseStrategy, Snapshot
from rs.api.meta import ObjectMeta
from rs.api.pipeline import PipelineParam, PipelineRef, WorkspaceBinding
from rs.handler.owner import set_owner_annotations

PIPELINES_TYPE_LABEL = "pipelines.appstudio.openshift.io/type"
RELEASE_NAME_LABEL = "release.appstudio.openshift.io/release-name"
RELEASE_NAMESPACE_LABEL = "release.appstudio.openshift.io/release-namespace"
APPLICATION_NAME_LABEL = "appstudio.openshift.io/application"

PIPELINE_TYPE_RELEASE = "release"
RELEASE_WORKSPACE = "release-workspace"

POLICY_PARAM = "policy"
SNAPSHOT_PARAM = "snapshot"


def release_selector(release: Release) -> dict[str, str]:
    """Labels identifying the one PipelineRun that belongs to ``release``."""
    return {
        RELEASE_NAME_LABEL: release.metadata.name,
        RELEASE_NAMESPACE_LABEL: release.metadata.namespace,
    }


class ReleasePipelineRun:
    def __init__(self, prefix: str, namespace: str) -> None:
        self._run = PipelineRun(
            metadata=ObjectMeta(generate_name=f"{prefix}-", namespace=namespace),
        )

    def with_owner(self, release: Release) -> Self:
        set_owner_annotations(release, self._run)
        return self

    def with_release_and_application_metadata(self, release: Release, application: str) -> Self:
        labels = self._run.metadata.labels
        labels[PIPELINES_TYPE_LABEL] = PIPELINE_TYPE_RELEASE
        labels.update(release_selector(release))
        labels[APPLICATION_NAME_LABEL] = application
        return self

    def with_release_strategy(self, strategy: ReleaseStrategy) -> Self:
        spec = self._run.spec
        spec.pipeline_ref = PipelineRef(name=strategy.spec.pipeline, bundle=strategy.spec.bundle)
        for param in strategy.spec.params:
            value: str | tuple[str, ...] = param.values if param.values else param.value
            self._set_param(param.name, value)
        if strategy.spec.persistent_volume_claim:
            spec.workspaces = [
                WorkspaceBinding(
                    name=RELEASE_WORKSPACE,
                    claim_name=strategy.spec.persistent_volume_claim,
                )
            ]
        spec.service_account_name = strategy.spec.service_account
        return self

    def with_enterprise_contract_policy(self, policy: EnterpriseContractPolicy) -> Self:
        self._set_param(POLICY_PARAM, json.dumps(policy.spec, sort_keys=True))
        return self

    def with_snapshot(self, snapshot: Snapshot) -> Self:
        self._set_param(SNAPSHOT_PARAM, json.dumps(snapshot.spec.to_dict(), sort_keys=True))
        return self

    def as_pipeline_run(self) -> PipelineRun:
        return copy.deepcopy(self._run)

    def _set_param(self, name: str, value: str | tuple[str, ...]) -> None:
        params = self._run.spec.params
        new = PipelineParam(name=name, value=value)
        for i, existing in enumerate(params):
            if existing.name == name:
                params[i] = new
                return
        params.append(new)
