from .owner import (
    PRIMARY_RESOURCE_ANNOTATION,
    PRIMARY_RESOURCE_TYPE_ANNOTATION,
    OwnershipError,
    annotated_owner,
    owner_type,
    set_controller_reference,
    set_owner_annotations,
)

__all__ = [
    "PRIMARY_RESOURCE_ANNOTATION",
    "PRIMARY_RESOURCE_TYPE_ANNOTATION",
    "OwnershipError",
    "annotated_owner",
    "owner_type",
    "set_controller_reference",
    "set_owner_annotations",
]
