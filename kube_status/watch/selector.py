"""Selectors describing which objects of a kind a watch stream delivers."""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

from kube_status.ownership import OwnerKind, owned_by_any
from kube_status.snapshot import Snapshot, get_str

__all__ = [
    "SelectorType",
    "Selector",
]


class SelectorType(StrEnum):
    """The kind of predicate applied to a stream."""

    BY_NAME = "by_name"
    BY_OWNER = "by_owner"
    ALL = "all"


@dataclass(frozen=True)
class Selector:
    """Predicate over objects of one kind within a namespace."""

    selector_type: SelectorType
    namespace: str | None = None
    name: str | None = None
    owner_name: str | None = None

    @classmethod
    def by_name(cls, namespace: str | None, name: str) -> "Selector":
        """Select the single object with the name."""
        return cls(SelectorType.BY_NAME, namespace=namespace, name=name)

    @classmethod
    def by_owner(cls, namespace: str | None, owner_name: str) -> "Selector":
        """Select objects owned by the named controller."""
        return cls(SelectorType.BY_OWNER, namespace=namespace, owner_name=owner_name)

    @classmethod
    def all(cls, namespace: str | None) -> "Selector":
        """Select every object in the namespace."""
        return cls(SelectorType.ALL, namespace=namespace)

    def matches(self, obj: Snapshot, owner_kinds: Sequence[OwnerKind] = ()) -> bool:
        """Return True if the object should be delivered to the consumer."""
        if self.selector_type == SelectorType.BY_NAME:
            if get_str(obj, "metadata", "name") != self.name:
                return False
            namespace = get_str(obj, "metadata", "namespace")
            return not self.namespace or not namespace or namespace == self.namespace
        if self.selector_type == SelectorType.BY_OWNER:
            return owned_by_any(obj, owner_kinds, self.owner_name or "")
        if self.selector_type == SelectorType.ALL:
            return True
        raise ValueError(f"Unknown selector type {self.selector_type}")

    def __str__(self) -> str:
        if self.selector_type == SelectorType.BY_NAME:
            return f"name={self.namespace}/{self.name}"
        if self.selector_type == SelectorType.BY_OWNER:
            return f"owner={self.namespace}/{self.owner_name}"
        return f"namespace={self.namespace}"
