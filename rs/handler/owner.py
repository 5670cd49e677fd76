"""Ownership links between objects.

Two mechanisms, for two purposes:

- owner *annotations* point a created object back at the Release that
  requested it, so a change to the object enqueues that Release again (they
  also work across namespaces, which owner references do not);
- a controller *reference* makes the object a dependent of its owner, so
  deleting the owner cascades.
"""

from __future__ import annotations

from dataclasses import dataclass

from rs.api.meta import NamespacedName, OwnerReference, Resource, parse_namespaced_name
from rs.core.result import Err, Ok, Result

PRIMARY_RESOURCE_ANNOTATION = "operator-sdk/primary-resource"
PRIMARY_RESOURCE_TYPE_ANNOTATION = "operator-sdk/primary-resource-type"


@dataclass(frozen=True, slots=True)
class OwnershipError:
    message: str


def owner_type(kind: type[Resource]) -> str:
    """``Kind.group`` as written into the type annotation."""
    group = kind.API_VERSION.split("/", 1)[0]
    return f"{kind.KIND}.{group}"


def set_owner_annotations(owner: Resource, obj: Resource) -> None:
    obj.metadata.annotations[PRIMARY_RESOURCE_ANNOTATION] = str(owner.key)
    obj.metadata.annotations[PRIMARY_RESOURCE_TYPE_ANNOTATION] = owner_type(type(owner))


def annotated_owner(obj: Resource, kind: type[Resource]) -> NamespacedName | None:
    """The owner of type ``kind`` recorded in ``obj``'s annotations, if any."""
    annotations = obj.metadata.annotations
    if annotations.get(PRIMARY_RESOURCE_TYPE_ANNOTATION) != owner_type(kind):
        return None
    raw = annotations.get(PRIMARY_RESOURCE_ANNOTATION)
    if raw is None:
        return None
    parsed = parse_namespaced_name(raw)
    if isinstance(parsed, Err):
        return None
    return parsed.value


def set_controller_reference(owner: Resource, obj: Resource) -> Result[None, OwnershipError]:
    if not owner.metadata.uid:
        return Err(OwnershipError(message=f"{owner.KIND} '{owner.key}' has no uid yet"))
    if owner.metadata.namespace != obj.metadata.namespace:
        return Err(
            OwnershipError(
                message=(
                    f"cross-namespace owner references are disallowed: owner {owner.KIND} "
                    f"'{owner.key}', object namespace '{obj.metadata.namespace}'"
                )
            )
        )

    ref = OwnerReference(
        api_version=owner.API_VERSION,
        kind=owner.KIND,
        name=owner.metadata.name,
        uid=owner.metadata.uid,
        controller=True,
        block_owner_deletion=True,
    )

    refs = obj.metadata.owner_references
    for i, existing in enumerate(refs):
        if existing.controller and existing.uid != ref.uid:
            return Err(
                OwnershipError(
                    message=(
                        f"object is already owned by another {existing.kind} "
                        f"controller {existing.name}"
                    )
                )
            )
        if existing.uid == ref.uid:
            refs[i] = ref
            return Ok(None)

    refs.append(ref)
    return Ok(None)
