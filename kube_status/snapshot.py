"""Accessors for loosely typed object snapshots.

A snapshot is the JSON representation of a kubernetes object at one point in
time: a `dict` whose values are `None`, booleans, numbers, strings, lists or
nested dicts. Watch events may carry partial or malformed objects so every
accessor here degrades to a default instead of raising.
"""

from typing import Any

__all__ = [
    "Snapshot",
    "pluck",
    "get_str",
    "get_int",
    "get_list",
    "get_map",
    "parse_revision",
    "REVISION_ANNOTATION",
]

Snapshot = dict[str, Any]

REVISION_ANNOTATION = "deployment.kubernetes.io/revision"


def pluck(tree: Any, *path: str) -> tuple[Any, bool]:
    """Return the value at the path in the tree and whether it was found.

    Traversal stops at the first missing key or non-mapping node.
    """
    node = tree
    for key in path:
        if not isinstance(node, dict) or not isinstance(key, str):
            return None, False
        if key not in node:
            return None, False
        node = node[key]
    return node, True


def get_str(tree: Any, *path: str, default: Any = None) -> Any:
    """Return the string at the path, or the default."""
    value, found = pluck(tree, *path)
    if found and isinstance(value, str):
        return value
    return default


def get_int(tree: Any, *path: str, default: Any = None) -> Any:
    """Return the integer at the path, or the default.

    Booleans are not integers here even though python treats them as such.
    """
    value, found = pluck(tree, *path)
    if found and isinstance(value, int) and not isinstance(value, bool):
        return value
    return default


def get_list(tree: Any, *path: str) -> list[Any]:
    """Return the list at the path, or an empty list."""
    value, found = pluck(tree, *path)
    if found and isinstance(value, list):
        return value
    return []


def get_map(tree: Any, *path: str) -> dict[str, Any]:
    """Return the mapping at the path, or an empty mapping."""
    value, found = pluck(tree, *path)
    if found and isinstance(value, dict):
        return value
    return {}


def parse_revision(obj: Snapshot) -> int | None:
    """Return the rollout revision annotation of a Deployment or ReplicaSet."""
    value = get_str(obj, "metadata", "annotations", REVISION_ANNOTATION)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
