"""Tests for the resource state table."""

import pytest

from kube_status.table import ResourceStateTable

from .fakes import endpoints, event, pod, ready_pod, service


def test_singleton_latest_event() -> None:
    """Test a singleton tag keeps the latest event."""
    table = ResourceStateTable()
    assert table.get("Service") is None
    table.update("Service", event("ADDED", service(type="ClusterIP")))
    table.update("Service", event("MODIFIED", service(clusterIP="10.0.0.1")))
    latest = table.get("Service")
    assert latest is not None
    assert latest.object["spec"] == {"clusterIP": "10.0.0.1"}


def test_singleton_deleted_is_scrubbed() -> None:
    """Test a deleted singleton is kept without its spec, status or subsets."""
    table = ResourceStateTable()
    obj = endpoints(ready=[("web-1", "10.1.0.1")])
    obj["status"] = {}
    table.update("Endpoints", event("DELETED", obj))
    latest = table.get("Endpoints")
    assert latest is not None
    assert latest.deleted
    assert set(latest.object) == {"apiVersion", "kind", "metadata"}
    # The event object is not modified
    assert "subsets" in obj


def test_collection_entries() -> None:
    """Test collection entries are keyed and sorted by name."""
    table = ResourceStateTable(collections=["Pod"])
    assert table.is_collection("Pod")
    assert not table.is_collection("Service")
    table.update("Pod", event("ADDED", pod("web-b", "rs")))
    table.update("Pod", event("ADDED", pod("web-a", "rs")))
    table.update("Pod", event("MODIFIED", ready_pod("web-b", "rs")))
    events = table.list_events("Pod")
    assert [e.name for e in events] == ["web-a", "web-b"]
    assert events[1].object == ready_pod("web-b", "rs")


def test_collection_deleted_entry_removed() -> None:
    """Test a deleted collection entry leaves the table."""
    table = ResourceStateTable(collections=["Pod"])
    table.update("Pod", event("ADDED", pod("web-a", "rs")))
    table.update("Pod", event("DELETED", pod("web-a", "rs")))
    table.update("Pod", event("DELETED", pod("web-c", "rs")))
    assert table.list_events("Pod") == []


def test_wrong_tag_kind() -> None:
    """Test accessing a tag the wrong way is an error."""
    table = ResourceStateTable(collections=["Pod"])
    with pytest.raises(ValueError, match="is a collection"):
        table.get("Pod")
    with pytest.raises(ValueError, match="is not a collection"):
        table.list_events("Service")
