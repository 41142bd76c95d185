"""Tests for the kubernetes API server watch source."""

from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, call, patch

import kubernetes
from kubernetes.client.rest import ApiException
from kubernetes.dynamic.exceptions import ResourceNotFoundError
import pytest

from kube_status.changes import ChangeTracker
from kube_status.exceptions import WatchException
from kube_status.resource import EventType, WatchEvent
from kube_status.watch.cluster import KubernetesWatchSource

from ..fakes import service


@pytest.fixture
def dynamic_client() -> Generator[MagicMock, None, None]:
    """Provides a mock dynamic client in place of a real cluster connection."""
    with (
        patch("kubernetes.config.new_client_from_config") as new_client,
        patch("kube_status.watch.cluster.DynamicClient") as client_cls,
    ):
        new_client.return_value = MagicMock()
        yield client_cls.return_value


def raw_event(event_type: str, obj: dict[str, Any]) -> dict[str, Any]:
    """Create an event as returned by the dynamic client watch."""
    return {"type": event_type, "object": MagicMock(), "raw_object": obj}


def versioned(obj: dict[str, Any], resource_version: str) -> dict[str, Any]:
    """Return a copy of the object at a resource version."""
    return {
        **obj,
        "metadata": {**obj["metadata"], "resourceVersion": resource_version},
    }


async def read_until_error(
    source: KubernetesWatchSource,
) -> tuple[list[WatchEvent], WatchException]:
    """Read the Service stream until it fails."""
    stream = await source.open("v1", "Service", "default")
    received = []
    with pytest.raises(WatchException) as exc_info:
        async for event in stream:
            received.append(event)
    return received, exc_info.value


async def test_open_stream(dynamic_client: MagicMock) -> None:
    """Test events are read from the watch until it fails."""
    resource = dynamic_client.resources.get.return_value
    resource.watch.side_effect = [
        iter([raw_event("ADDED", versioned(service("web"), "5"))]),
        # The server closed the first watch, the second one resumes from it
        iter(
            [
                raw_event(
                    "MODIFIED", versioned(service("web", clusterIP="10.0.0.1"), "7")
                )
            ]
        ),
        RuntimeError("connection lost"),
    ]

    source = KubernetesWatchSource(kubeconfig="/tmp/kubeconfig", context="test")
    received, err = await read_until_error(source)

    assert [event.type for event in received] == [
        EventType.ADDED,
        EventType.MODIFIED,
    ]
    assert received[1].object["spec"] == {"clusterIP": "10.0.0.1"}
    assert err.stream == "v1/Service"
    assert "connection lost" in str(err)
    dynamic_client.resources.get.assert_called_once_with(
        api_version="v1", kind="Service"
    )
    assert resource.watch.call_args_list == [
        call(namespace="default", resource_version=None),
        call(namespace="default", resource_version="5"),
        call(namespace="default", resource_version="7"),
    ]
    kubernetes.config.new_client_from_config.assert_called_once_with(  # type: ignore[attr-defined]
        config_file="/tmp/kubeconfig", context="test"
    )


async def test_reopen_does_not_replay_objects(dynamic_client: MagicMock) -> None:
    """Test a watch closed by the server resumes without a second creation."""
    resource = dynamic_client.resources.get.return_value
    resource.watch.side_effect = [
        iter([raw_event("ADDED", versioned(service("web"), "5"))]),
        iter(
            [
                raw_event(
                    "MODIFIED", versioned(service("web", clusterIP="10.0.0.1"), "8")
                )
            ]
        ),
        RuntimeError("connection lost"),
    ]

    received, _ = await read_until_error(KubernetesWatchSource())

    tracker = ChangeTracker()
    headings = [tracker.process(event)[0] for event in received]
    assert headings == ["CREATED", "MODIFIED"]
    assert resource.watch.call_args_list[1] == call(
        namespace="default", resource_version="5"
    )


async def test_expired_resource_version_event(dynamic_client: MagicMock) -> None:
    """Test an expired resource version starts a fresh watch."""
    resource = dynamic_client.resources.get.return_value
    resource.watch.side_effect = [
        iter(
            [
                raw_event("ADDED", versioned(service("web"), "5")),
                raw_event("ERROR", {"kind": "Status", "code": 410}),
                raw_event("MODIFIED", versioned(service("web"), "6")),
            ]
        ),
        iter([raw_event("ADDED", versioned(service("web"), "9"))]),
        RuntimeError("connection lost"),
    ]

    received, _ = await read_until_error(KubernetesWatchSource())

    assert [event.type for event in received] == [EventType.ADDED, EventType.ADDED]
    assert resource.watch.call_args_list == [
        call(namespace="default", resource_version=None),
        call(namespace="default", resource_version=None),
        call(namespace="default", resource_version="9"),
    ]


async def test_expired_resource_version_exception(dynamic_client: MagicMock) -> None:
    """Test the client raising for an expired resource version starts a fresh watch."""
    resource = dynamic_client.resources.get.return_value
    resource.watch.side_effect = [
        iter([raw_event("ADDED", versioned(service("web"), "5"))]),
        ApiException(status=410, reason="Gone"),
        RuntimeError("connection lost"),
    ]

    received, _ = await read_until_error(KubernetesWatchSource())

    assert len(received) == 1
    assert resource.watch.call_args_list == [
        call(namespace="default", resource_version=None),
        call(namespace="default", resource_version="5"),
        call(namespace="default", resource_version=None),
    ]


async def test_error_event_skipped(dynamic_client: MagicMock) -> None:
    """Test an error other than an expired version does not restart the watch."""
    resource = dynamic_client.resources.get.return_value
    resource.watch.side_effect = [
        iter(
            [
                raw_event("ERROR", {"kind": "Status", "code": 500, "message": "oops"}),
                raw_event("ADDED", versioned(service("web"), "5")),
            ]
        ),
        ApiException(status=403, reason="Forbidden"),
    ]

    received, err = await read_until_error(KubernetesWatchSource())

    assert [event.type for event in received] == [EventType.ADDED]
    assert "Forbidden" in str(err)
    assert resource.watch.call_count == 2


async def test_unknown_resource(dynamic_client: MagicMock) -> None:
    """Test a kind the server does not serve."""
    dynamic_client.resources.get.side_effect = ResourceNotFoundError("No matches")
    source = KubernetesWatchSource()
    with pytest.raises(WatchException, match="Unknown resource type"):
        await source.open("example.io/v1", "Widget", "default")


async def test_invalid_kubeconfig() -> None:
    """Test a kubeconfig that cannot be loaded."""
    with patch(
        "kubernetes.config.new_client_from_config",
        side_effect=kubernetes.config.ConfigException("Invalid kube-config file"),
    ):
        source = KubernetesWatchSource()
        with pytest.raises(WatchException, match="Invalid kube-config file"):
            await source.open("v1", "Service", "default")


@pytest.mark.parametrize(
    ("context", "expected"),
    [
        (None, "team-a"),
        ("other", "team-b"),
        ("no-namespace", "default"),
    ],
)
def test_default_namespace(context: str | None, expected: str) -> None:
    """Test the namespace comes from the selected kubeconfig context."""
    contexts = [
        {"name": "main", "context": {"cluster": "c", "namespace": "team-a"}},
        {"name": "other", "context": {"cluster": "c", "namespace": "team-b"}},
        {"name": "no-namespace", "context": {"cluster": "c"}},
    ]
    with patch(
        "kubernetes.config.list_kube_config_contexts",
        return_value=(contexts, contexts[0]),
    ):
        source = KubernetesWatchSource(context=context)
        assert source.default_namespace() == expected


def test_default_namespace_invalid_kubeconfig() -> None:
    """Test the default namespace requires a kubeconfig."""
    with patch(
        "kubernetes.config.list_kube_config_contexts",
        side_effect=kubernetes.config.ConfigException("Invalid kube-config file"),
    ):
        with pytest.raises(WatchException, match="Invalid kube-config file"):
            KubernetesWatchSource().default_namespace()
