from .pipeline_run import (
    APPLICATION_NAME_LABEL,
    PIPELINES_TYPE_LABEL,
    POLICY_PARAM,
    RELEASE_NAME_LABEL,
    RELEASE_NAMESPACE_LABEL,
    RELEASE_WORKSPACE,
    SNAPSHOT_PARAM,
    ReleasePipelineRun,
    release_selector,
)

__all__ = [
    "APPLICATION_NAME_LABEL",
    "PIPELINES_TYPE_LABEL",
    "POLICY_PARAM",
    "RELEASE_NAME_LABEL",
    "RELEASE_NAMESPACE_LABEL",
    "RELEASE_WORKSPACE",
    "SNAPSHOT_PARAM",
    "ReleasePipelineRun",
    "release_selector",
]
