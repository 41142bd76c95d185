"""Status lines for Pods targeted by an Endpoints object or owned by a ReplicaSet."""

from collections.abc import Iterable
from typing import Any

from kube_status.ownership import owned_by
from kube_status.resource import WatchEvent
from kube_status.snapshot import Snapshot, get_int, get_list, get_map, get_str

from .lines import Formatter, StatusLine, Style, failure, plain, success

__all__ = [
    "endpoint_addresses",
    "pod_status",
    "owned_pods",
]

TRUE_STATUS = "True"

# Pod conditions in the order they are reached during startup. Only the first
# failing one is reported.
CONDITION_PRIORITY = ("PodScheduled", "Initialized", "Ready")

# Image pull errors are prefixed with the container runtime's error wrapper.
IMAGE_PULL_PREFIX = "rpc error: code = Unknown desc = Error response from daemon: "

CONTAINER_CREATING = "ContainerCreating"

POD_LEVEL = 2


def _addresses(endpoints: Snapshot, field: str) -> list[str]:
    results = []
    for subset in get_list(endpoints, "subsets"):
        for address in get_list(subset, field):
            name = get_str(address, "targetRef", "name")
            ip = get_str(address, "ip")
            if name is None or ip is None:
                continue
            results.append(f"{name} @ {ip}")
    return results


def endpoint_addresses(endpoints: Snapshot) -> tuple[list[str], list[str]]:
    """Return the sorted ready and not ready `<pod> @ <ip>` addresses."""
    return (
        sorted(_addresses(endpoints, "addresses")),
        sorted(_addresses(endpoints, "notReadyAddresses")),
    )


def owned_pods(pods: Iterable[WatchEvent], owner: Snapshot) -> list[Snapshot]:
    """Return the Pods owned by the object, e.g. a ReplicaSet."""
    api_version = get_str(owner, "apiVersion", default="")
    kind = get_str(owner, "kind", default="")
    name = get_str(owner, "metadata", "name", default="")
    return [
        event.object
        for event in pods
        if owned_by(event.object, api_version, kind, name)
    ]


def _condition(conditions: list[Any], condition_type: str) -> dict[str, Any] | None:
    for condition in conditions:
        if isinstance(condition, dict) and condition.get("type") == condition_type:
            return condition
    return None


def _waiting_error(waiting: dict[str, Any]) -> tuple[str, str] | None:
    reason = get_str(waiting, "reason")
    if not reason or reason == CONTAINER_CREATING:
        return None
    message = get_str(waiting, "message", default="")
    return reason, message.removeprefix(IMAGE_PULL_PREFIX)


def _terminated_error(terminated: dict[str, Any]) -> tuple[str, str] | None:
    reason = get_str(terminated, "reason")
    if not reason:
        return None
    message = get_str(terminated, "message")
    if message is None:
        exit_code = get_int(terminated, "exitCode")
        message = "Container completed"
        if exit_code is not None:
            message += f" with exit code {exit_code}"
    return reason, message


def _error_line(
    pod_name: str, reason: str, message: str, fmt: Formatter, faint: bool
) -> StatusLine:
    text = f"[{fmt(Style.FAILURE, reason)}] {fmt(Style.NAME, pod_name)}"
    if message:
        text += f" {message}"
    return failure(text, level=POD_LEVEL, faint=faint)


def pod_status(
    pod: Snapshot, fmt: Formatter = plain, faint: bool = False
) -> list[StatusLine]:
    """Return the readiness or errors of a single Pod.

    At most one line comes from the Pod conditions, followed by one line for
    each container that is not ready and reports an error.
    """
    lines = []
    name = get_str(pod, "metadata", "name", default="")

    conditions = get_list(pod, "status", "conditions")
    for condition_type in CONDITION_PRIORITY:
        condition = _condition(conditions, condition_type)
        if condition is None:
            continue
        if condition.get("status") != TRUE_STATUS:
            reason = get_str(condition, "reason") or condition_type
            message = get_str(condition, "message", default="")
            lines.append(_error_line(name, reason, message, fmt, faint))
            break
        if condition_type == "Ready":
            lines.append(
                success(
                    f"[{fmt(Style.SUCCESS, 'Ready')}] {fmt(Style.NAME, name)}",
                    level=POD_LEVEL,
                    faint=faint,
                )
            )

    for container in get_list(pod, "status", "containerStatuses"):
        if not isinstance(container, dict) or container.get("ready") is True:
            continue
        for state, check in (
            ("waiting", _waiting_error),
            ("terminated", _terminated_error),
        ):
            details = get_map(container, "state", state)
            if not details:
                continue
            if (error := check(details)) is not None:
                lines.append(_error_line(name, *error, fmt, faint))

    return lines
