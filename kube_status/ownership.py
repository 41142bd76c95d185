"""Resolve whether an object declares itself owned by a controller."""

from dataclasses import dataclass, field
import logging
from typing import Any

from mashumaro import DataClassDictMixin, field_options

from .snapshot import pluck

__all__ = [
    "OwnerKind",
    "DEFAULT_DEPLOYMENT_OWNER_KINDS",
    "owned_by",
    "owned_by_any",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnerKind(DataClassDictMixin):
    """An apiVersion and kind that a controller may be exposed as."""

    api_version: str = field(metadata=field_options(alias="apiVersion"))
    """The apiVersion of the owner e.g. `apps/v1`."""

    kind: str
    """The kind of the owner e.g. `Deployment`."""

    def __str__(self) -> str:
        return f"{self.api_version}/{self.kind}"


# Deployments have been served from several API groups over time and owner
# references keep the group the object was created with.
DEFAULT_DEPLOYMENT_OWNER_KINDS: tuple[OwnerKind, ...] = (
    OwnerKind(api_version="extensions/v1beta1", kind="Deployment"),
    OwnerKind(api_version="apps/v1beta1", kind="Deployment"),
    OwnerKind(api_version="apps/v1beta2", kind="Deployment"),
    OwnerKind(api_version="apps/v1", kind="Deployment"),
)


def owned_by(obj: Any, api_version: str, kind: str, owner_name: str) -> bool:
    """Return True if any owner reference of the object matches the owner."""
    refs, _ = pluck(obj, "metadata", "ownerReferences")
    if not isinstance(refs, list):
        return False
    for ref in refs:
        if not isinstance(ref, dict):
            _LOGGER.debug("Skipping malformed owner reference %r", ref)
            continue
        if (
            ref.get("apiVersion") == api_version
            and ref.get("kind") == kind
            and ref.get("name") == owner_name
        ):
            return True
    return False


def owned_by_any(obj: Any, owner_kinds: Any, owner_name: str) -> bool:
    """Return True if the object is owned by the named owner under any of the kinds."""
    return any(
        owned_by(obj, owner_kind.api_version, owner_kind.kind, owner_name)
        for owner_kind in owner_kinds
    )
