"""Module for computing diffs between successive object snapshots.

This is used by the `changes` and `status` commands to print what changed
between two watch events for the same object.
"""

from collections.abc import Generator, Iterable
from dataclasses import dataclass, field
import difflib
from enum import StrEnum
import json
import logging
import re
from typing import Any, TypeVar

import yaml

from .snapshot import Snapshot
from .status.lines import Formatter, Style, plain

__all__ = [
    "DiffType",
    "DiffEntry",
    "SnapshotDiff",
    "diff_snapshots",
    "format_path",
    "unified_diff",
]

_LOGGER = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

T = TypeVar("T")

Path = tuple[str | int, ...]


class DiffType(StrEnum):
    """Classification of a single changed leaf."""

    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"


@dataclass(frozen=True)
class DiffEntry:
    """A single leaf that differs between two snapshots."""

    path: Path
    type: DiffType
    old: Any = None
    new: Any = None


@dataclass
class SnapshotDiff:
    """The leaves that differ between two snapshots, in traversal order."""

    entries: list[DiffEntry] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.entries)

    def format(self, fmt: Formatter = plain) -> Generator[str, None, None]:
        """Yield one line per changed leaf annotated with old and new values."""
        for entry in self.entries:
            path = format_path(entry.path)
            if entry.type == DiffType.ADDED:
                yield fmt(Style.SUCCESS, f"+ {path}: {_format_value(entry.new)}")
            elif entry.type == DiffType.REMOVED:
                yield fmt(Style.FAILURE, f"- {path}: {_format_value(entry.old)}")
            else:
                yield fmt(
                    Style.PENDING,
                    f"~ {path}: {_format_value(entry.old)} => {_format_value(entry.new)}",
                )


def _unique_keys(k1: dict[T, Any], k2: dict[T, Any]) -> Iterable[T]:
    """Return an ordered set."""
    return {
        **{k: True for k in k1.keys()},
        **{k: True for k in k2.keys()},
    }.keys()


def _format_value(value: Any) -> str:
    return json.dumps(value, sort_keys=False, default=str)


def format_path(path: Path) -> str:
    """Format a path as `spec.containers[0].image`."""
    result = ""
    for key in path:
        if isinstance(key, int):
            result += f"[{key}]"
        elif _IDENTIFIER.match(key):
            result += f".{key}" if result else key
        else:
            result += f"[{json.dumps(key)}]"
    return result


def _is_container(value: Any) -> bool:
    return isinstance(value, (dict, list)) and bool(value)


def _leaves(path: Path, value: Any) -> Generator[tuple[Path, Any], None, None]:
    """Yield every leaf under the value. Empty containers are leaves."""
    if isinstance(value, dict) and value:
        for key, child in value.items():
            yield from _leaves(path + (key,), child)
    elif isinstance(value, list) and value:
        for index, child in enumerate(value):
            yield from _leaves(path + (index,), child)
    else:
        yield path, value


def _scalar_equal(a: Any, b: Any) -> bool:
    return type(a) is type(b) and a == b


def _compare(path: Path, old: Any, new: Any, entries: list[DiffEntry]) -> None:
    if isinstance(old, dict) and isinstance(new, dict) and (old or new):
        for key in _unique_keys(old, new):
            _compare_child(
                path + (key,),
                key in old,
                old.get(key),
                key in new,
                new.get(key),
                entries,
                unset_when_null=True,
            )
        return
    if isinstance(old, list) and isinstance(new, list) and (old or new):
        for index in range(max(len(old), len(new))):
            _compare_child(
                path + (index,),
                index < len(old),
                old[index] if index < len(old) else None,
                index < len(new),
                new[index] if index < len(new) else None,
                entries,
            )
        return
    if _is_container(old) or _is_container(new) or not _scalar_equal(old, new):
        entries.append(DiffEntry(path, DiffType.CHANGED, old=old, new=new))


def _compare_child(
    path: Path,
    in_old: bool,
    old: Any,
    in_new: bool,
    new: Any,
    entries: list[DiffEntry],
    unset_when_null: bool = False,
) -> None:
    if unset_when_null:
        # A null value and a missing key both mean the field is unset
        in_old = in_old and old is not None
        in_new = in_new and new is not None
    if in_old and in_new:
        _compare(path, old, new, entries)
    elif in_new:
        for leaf_path, value in _leaves(path, new):
            entries.append(DiffEntry(leaf_path, DiffType.ADDED, new=value))
    elif in_old:
        for leaf_path, value in _leaves(path, old):
            entries.append(DiffEntry(leaf_path, DiffType.REMOVED, old=value))


def diff_snapshots(previous: Snapshot | None, current: Snapshot) -> SnapshotDiff:
    """Compute the leaf level differences between two snapshots.

    The first observation of an object has nothing to diff against and must be
    rendered by the caller instead, so a missing previous snapshot is an error.
    """
    if previous is None:
        raise ValueError("Cannot diff against a missing previous snapshot")
    entries: list[DiffEntry] = []
    _compare((), previous, current, entries)
    _LOGGER.debug("Computed diff with %d entries", len(entries))
    return SnapshotDiff(entries)


def unified_diff(
    previous: Snapshot, current: Snapshot, n: int = 3, label: str = ""
) -> Generator[str, None, None]:
    """Generate a line oriented diff of the YAML rendering of both snapshots."""
    a = yaml.dump(previous, sort_keys=False).splitlines()
    b = yaml.dump(current, sort_keys=False).splitlines()
    yield from difflib.unified_diff(
        a=a, b=b, fromfile=label, tofile=label, n=n, lineterm=""
    )
