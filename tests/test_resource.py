"""Tests for object identity and watch events."""

import pytest

from kube_status.exceptions import InputException
from kube_status.resource import (
    EventType,
    ResourceId,
    WatchEvent,
    parse_object_id,
)

from .fakes import deployment


@pytest.mark.parametrize(
    ("object_id", "expected"),
    [
        ("web", (None, "web")),
        ("prod/web", ("prod", "web")),
        ("/web", (None, "web")),
    ],
)
def test_parse_object_id(object_id: str, expected: tuple[str | None, str]) -> None:
    """Test parsing valid object ids."""
    assert parse_object_id(object_id) == expected


def test_parse_object_id_too_many_parts() -> None:
    """Test an object id with more than one slash is rejected."""
    with pytest.raises(InputException, match="<namespace>/<name>: 'a/b/c'"):
        parse_object_id("a/b/c")


def test_resource_id_from_object() -> None:
    """Test building an identifier from object metadata."""
    resource_id = ResourceId.from_object(deployment())
    assert resource_id == ResourceId("apps/v1", "Deployment", "default", "web")
    assert resource_id.namespaced_name == "default/web"
    assert resource_id.api_type == "apps/v1/Deployment"
    assert str(resource_id) == "apps/v1/Deployment default/web"


def test_resource_id_missing_metadata() -> None:
    """Test an object without metadata still has an identifier."""
    resource_id = ResourceId.from_object({})
    assert resource_id == ResourceId("", "", None, "")
    assert resource_id.namespaced_name == ""


def test_resource_id_ordering() -> None:
    """Test identifiers sort by their fields."""
    ids = [
        ResourceId("v1", "Pod", "default", "b"),
        ResourceId("v1", "Pod", "default", "a"),
    ]
    assert sorted(ids)[0].name == "a"


def test_parse_event() -> None:
    """Test parsing a raw watch event."""
    obj = deployment()
    event = WatchEvent.parse({"type": "MODIFIED", "object": obj})
    assert event == WatchEvent(type=EventType.MODIFIED, object=obj)
    assert event.name == "web"
    assert not event.deleted


def test_parse_deleted_event() -> None:
    """Test the deleted flag."""
    event = WatchEvent.parse({"type": "DELETED", "object": deployment()})
    assert event is not None
    assert event.deleted


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "ERROR", "object": {"kind": "Status"}},
        {"type": "BOOKMARK", "object": {}},
        {"type": "ADDED", "object": "not an object"},
        {"type": "ADDED"},
        {},
    ],
)
def test_parse_ignored_events(raw: dict[str, object]) -> None:
    """Test events that do not describe an object change are skipped."""
    assert WatchEvent.parse(raw) is None
