"""Module for the table of latest known events per tracked object."""

from collections.abc import Iterable
import logging

from .resource import WatchEvent

__all__ = [
    "ResourceStateTable",
]

_LOGGER = logging.getLogger(__name__)

# Fields dropped from a deleted object so that rules judge it as empty
DELETED_FIELDS = ("spec", "status", "subsets")


class ResourceStateTable:
    """Latest watch event for every tracked object, grouped by tag.

    Singleton tags hold one event. Collection tags hold one event per object
    name and forget an object when it is deleted.
    """

    def __init__(self, collections: Iterable[str] = ()) -> None:
        """Initialize the ResourceStateTable with the tags that are collections."""
        self._collections = set(collections)
        self._singletons: dict[str, WatchEvent] = {}
        self._entries: dict[str, dict[str, WatchEvent]] = {
            tag: {} for tag in self._collections
        }

    def is_collection(self, tag: str) -> bool:
        return tag in self._collections

    def update(self, tag: str, event: WatchEvent) -> None:
        """Record the event as the latest state for its object."""
        if not self.is_collection(tag):
            if event.deleted:
                event = WatchEvent(
                    type=event.type,
                    object={
                        k: v for k, v in event.object.items() if k not in DELETED_FIELDS
                    },
                )
            _LOGGER.debug("Updating %s to %s event for %s", tag, event.type, event.name)
            self._singletons[tag] = event
            return

        entries = self._entries[tag]
        if event.deleted:
            _LOGGER.debug("Removing %s %s", tag, event.name)
            entries.pop(event.name, None)
        else:
            _LOGGER.debug("Updating %s %s to %s event", tag, event.name, event.type)
            entries[event.name] = event

    def get(self, tag: str) -> WatchEvent | None:
        """Return the latest event of a singleton tag."""
        if self.is_collection(tag):
            raise ValueError(f"Tag {tag} is a collection")
        return self._singletons.get(tag)

    def list_events(self, tag: str) -> list[WatchEvent]:
        """Return the latest event of every object of a collection tag, by name."""
        if not self.is_collection(tag):
            raise ValueError(f"Tag {tag} is not a collection")
        entries = self._entries[tag]
        return [entries[name] for name in sorted(entries)]
