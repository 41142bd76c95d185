"""Stream the changes made to a single object.

The `changes` and `status` commands print a dump of the object when it is
first seen and then a diff against the previous version for every update.
The `record` command prints every distinct version as an element of a JSON
array instead.
"""

from contextlib import aclosing
from enum import StrEnum
import json
import logging
from typing import Any, TextIO

import yaml

from .diff import diff_snapshots, unified_diff
from .display import DisplaySink
from .resource import EventType, WatchEvent
from .snapshot import Snapshot, get_map
from .status.lines import Formatter, Style, plain
from .watch import Selector, WatchMultiplexer, WatchSource

__all__ = [
    "OutputFormat",
    "DiffFormat",
    "ChangeTracker",
    "RecordWriter",
    "run_changes",
    "run_record",
]

_LOGGER = logging.getLogger(__name__)

OBJECT_TAG = "object"
CREATED = "CREATED"


class OutputFormat(StrEnum):
    """Format used to dump a newly created object."""

    JSON = "json"
    YAML = "yaml"


class DiffFormat(StrEnum):
    """Format used to render the changes between two versions."""

    STRUCTURAL = "structural"
    UNIFIED = "unified"


def _dump(value: Any, output: OutputFormat) -> list[str]:
    if output == OutputFormat.YAML:
        return yaml.dump(value, sort_keys=False, explicit_start=True).splitlines()
    return json.dumps(value, indent=2).splitlines()


def _unified_style(line: str) -> Style | None:
    if line.startswith(("+++", "---")):
        return Style.BOLD
    if line.startswith("+"):
        return Style.SUCCESS
    if line.startswith("-"):
        return Style.FAILURE
    if line.startswith("@@"):
        return Style.HEADING
    return None


class ChangeTracker:
    """Renders each event of one object relative to the previous event."""

    def __init__(
        self,
        status_only: bool = False,
        diff_format: DiffFormat = DiffFormat.STRUCTURAL,
        output: OutputFormat = OutputFormat.JSON,
    ) -> None:
        """Initialize ChangeTracker.

        Args:
            status_only: Only track the `status` field of the object.
            diff_format: How to render the changes between versions.
            output: How to dump the object when it is created.
        """
        self._status_only = status_only
        self._diff_format = diff_format
        self._output = output
        self._previous: Snapshot | None = None

    def _tracked(self, event: WatchEvent) -> Snapshot:
        if self._status_only:
            return get_map(event.object, "status")
        return event.object

    def _diff(self, previous: Snapshot, current: Snapshot, fmt: Formatter) -> list[str]:
        if self._diff_format == DiffFormat.UNIFIED:
            lines = []
            for line in unified_diff(previous, current):
                style = _unified_style(line)
                lines.append(fmt(style, line) if style else line)
            return lines
        diff = diff_snapshots(previous, current)
        if not diff.has_changes:
            return []
        return list(diff.format(fmt))

    def process(self, event: WatchEvent, fmt: Formatter = plain) -> list[str]:
        """Return the lines describing the event."""
        current = self._tracked(event)
        previous = self._previous
        self._previous = current

        if event.deleted:
            return [fmt(Style.TITLE, str(EventType.DELETED))]
        if previous is None or event.type == EventType.ADDED:
            _LOGGER.debug("Dumping created object %s", event.name)
            return [fmt(Style.TITLE, CREATED)] + [
                fmt(Style.SUCCESS, line) for line in _dump(current, self._output)
            ]
        return [fmt(Style.TITLE, str(event.type))] + self._diff(previous, current, fmt)


class RecordWriter:
    """Writes every distinct version of an object as an element of a JSON array.

    The array is only valid JSON once `close` has been called.
    """

    def __init__(self, out: TextIO) -> None:
        self._out = out
        self._previous: Snapshot | None = None
        self._count = 0
        self._out.write("[")
        self._out.flush()

    @property
    def count(self) -> int:
        """Return the number of elements written."""
        return self._count

    def _write(self, obj: Snapshot) -> None:
        if self._count:
            self._out.write(",")
        self._out.write("\n  ")
        self._out.write(json.dumps(obj, indent=2).replace("\n", "\n  "))
        self._out.flush()
        self._count += 1

    def record(self, event: WatchEvent) -> None:
        """Append the object of the event if it is a new version."""
        previous = self._previous
        self._previous = event.object
        if event.type == EventType.ADDED:
            self._write(event.object)
        elif event.type == EventType.MODIFIED:
            if previous is None or diff_snapshots(previous, event.object).has_changes:
                self._write(event.object)
            else:
                _LOGGER.debug("Skipping unchanged version of %s", event.name)

    def close(self) -> None:
        self._out.write("\n]\n")
        self._out.flush()


def _object_multiplexer(
    source: WatchSource, api_version: str, kind: str, namespace: str, name: str
) -> WatchMultiplexer:
    multiplexer = WatchMultiplexer(source)
    multiplexer.add(OBJECT_TAG, api_version, kind, Selector.by_name(namespace, name))
    return multiplexer


async def run_changes(
    source: WatchSource,
    api_version: str,
    kind: str,
    namespace: str,
    name: str,
    tracker: ChangeTracker,
    sink: DisplaySink,
    fmt: Formatter = plain,
) -> None:
    """Write the changes of the named object to the sink until the watch ends."""
    multiplexer = _object_multiplexer(source, api_version, kind, namespace, name)
    async with aclosing(multiplexer.events()) as events:
        async for _, event in events:
            for line in tracker.process(event, fmt):
                sink.write(line)
            sink.flush()


async def run_record(
    source: WatchSource,
    api_version: str,
    kind: str,
    namespace: str,
    name: str,
    writer: RecordWriter,
) -> None:
    """Record versions of the named object until the watch ends.

    The writer is closed on exit, including on interrupt, so that the output
    is a complete JSON array.
    """
    multiplexer = _object_multiplexer(source, api_version, kind, namespace, name)
    try:
        async with aclosing(multiplexer.events()) as events:
            async for _, event in events:
                writer.record(event)
    finally:
        writer.close()
        _LOGGER.debug("Recorded %d versions of %s/%s", writer.count, namespace, name)
