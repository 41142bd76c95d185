"""Identity of kubernetes objects and the events that carry them."""

from dataclasses import dataclass
from enum import StrEnum
import logging
from typing import Any

from .exceptions import InputException
from .snapshot import Snapshot, get_str

__all__ = [
    "EventType",
    "ResourceId",
    "WatchEvent",
    "parse_object_id",
]

_LOGGER = logging.getLogger(__name__)


class EventType(StrEnum):
    """Type of a watch event as sent by the API server."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass(frozen=True, order=True)
class ResourceId:
    """Identifier for a kubernetes object."""

    api_version: str
    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    @property
    def api_type(self) -> str:
        """Return the apiVersion and kind e.g. `apps/v1/Deployment`."""
        return f"{self.api_version}/{self.kind}"

    @classmethod
    def from_object(cls, obj: Snapshot) -> "ResourceId":
        """Build the identifier from the snapshot metadata, tolerating gaps."""
        return cls(
            api_version=get_str(obj, "apiVersion", default=""),
            kind=get_str(obj, "kind", default=""),
            namespace=get_str(obj, "metadata", "namespace"),
            name=get_str(obj, "metadata", "name", default=""),
        )

    def __str__(self) -> str:
        return f"{self.api_type} {self.namespaced_name}"


@dataclass(frozen=True)
class WatchEvent:
    """A change notification for a single object."""

    type: EventType
    object: Snapshot

    @property
    def resource_id(self) -> ResourceId:
        return ResourceId.from_object(self.object)

    @property
    def name(self) -> str:
        return get_str(self.object, "metadata", "name", default="")

    @property
    def deleted(self) -> bool:
        return self.type == EventType.DELETED

    @classmethod
    def parse(cls, raw: dict[str, Any]) -> "WatchEvent | None":
        """Parse a raw `{"type": ..., "object": ...}` watch event.

        Returns None for event types that do not describe an object change
        such as ERROR or BOOKMARK.
        """
        try:
            event_type = EventType(raw.get("type"))
        except ValueError:
            _LOGGER.debug("Ignoring watch event of type %s", raw.get("type"))
            return None
        obj = raw.get("object")
        if not isinstance(obj, dict):
            _LOGGER.warning("Ignoring %s watch event without an object", event_type)
            return None
        return cls(type=event_type, object=obj)


def parse_object_id(object_id: str) -> tuple[str | None, str]:
    """Parse an object id of the form `[<namespace>/]<name>`.

    The namespace is None when omitted so the caller can apply the default
    namespace from the cluster configuration.
    """
    parts = object_id.split("/")
    if len(parts) == 1:
        return None, parts[0]
    if len(parts) == 2:
        return parts[0] or None, parts[1]
    raise InputException(
        f"Object ID must be of the form <name> or <namespace>/<name>: '{object_id}'"
    )
