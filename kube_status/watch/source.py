"""Interface for a source of watch events for a kind of object."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from kube_status.resource import WatchEvent

__all__ = [
    "WatchSource",
]


class WatchSource(ABC):
    """A store of objects that can stream changes to one kind of object."""

    @abstractmethod
    async def open(
        self, api_version: str, kind: str, namespace: str | None
    ) -> AsyncIterator[WatchEvent]:
        """
        Open a watch on all objects of the kind in the namespace.

        The returned stream yields events in the order the store produced
        them and is not expected to end under normal operation.

        Args:
            api_version: The apiVersion of the kind e.g. `apps/v1`.
            kind: The kind of object to watch e.g. `Deployment`.
            namespace: The namespace to watch, or None for the default.

        Raises:
            WatchException: If the kind cannot be resolved or the store
                cannot be reached.
        """

    @abstractmethod
    def default_namespace(self) -> str:
        """Return the namespace used when an object id does not name one."""
