"""Judge the health of a Deployment rollout.

The judgement combines three kinds of objects:
  - The Deployment, whose revision annotation and conditions describe the
    rollout the controller is working on.
  - The ReplicaSets owned by the Deployment. The one with the same revision is
    the current rollout, and the newest other one still running Pods is the
    rollout being replaced.
  - The Pods owned by those ReplicaSets, which explain why a rollout is stuck.
"""

from collections.abc import Sequence
from dataclasses import dataclass
import logging
from typing import Any

from kube_status.resource import WatchEvent
from kube_status.snapshot import get_int, get_str, parse_revision, pluck

from .lines import (
    Formatter,
    StatusLine,
    Style,
    event_header,
    failure,
    info,
    pending,
    plain,
    success,
)
from .pods import TRUE_STATUS, owned_pods, pod_status

__all__ = [
    "deployment_status",
    "select_replica_sets",
]

_LOGGER = logging.getLogger(__name__)

WAITING_FOR_CONTROLLER = "Waiting for controller to create Deployment"
ROLLOUT_NOT_STARTED = "Deployment has not begun to roll out the change"
APP_UNAVAILABLE = "Deployment does not have minimum replicas ({} out of {})"

PROGRESSING = "Progressing"
AVAILABLE = "Available"
NEW_REPLICA_SET_AVAILABLE = "NewReplicaSetAvailable"


@dataclass
class ReplicaSets:
    """The ReplicaSets of interest for the current rollout."""

    current: WatchEvent | None = None
    previous: WatchEvent | None = None
    previous_revision: int | None = None
    previous_replicas: int = 0


def select_replica_sets(
    revision: int | None, replica_sets: Sequence[WatchEvent]
) -> ReplicaSets:
    """Find the current and previous ReplicaSets for the Deployment revision.

    The previous ReplicaSet is a live one that still has replicas. When several
    qualify the highest revision wins, then the name.
    """
    result = ReplicaSets()
    candidates: list[tuple[int, str, int, WatchEvent]] = []
    for event in replica_sets:
        rs_revision = parse_revision(event.object)
        if rs_revision is None:
            _LOGGER.debug("Skipping ReplicaSet %s without revision", event.name)
            continue
        if revision is not None and rs_revision == revision:
            result.current = event
            continue
        if event.deleted:
            continue
        replicas = get_int(event.object, "status", "replicas", default=0)
        if replicas > 0:
            candidates.append((rs_revision, event.name, replicas, event))
    if candidates:
        rs_revision, _, replicas, event = max(candidates, key=lambda c: c[:2])
        result.previous = event
        result.previous_revision = rs_revision
        result.previous_replicas = replicas
    return result


def _condition_reason(condition: dict[str, Any]) -> str:
    reason = get_str(condition, "reason", default="")
    message = get_str(condition, "message", default="")
    if reason and message:
        return f"[{reason}] {message}"
    return reason or message


def _deployment_lines(
    deployment: WatchEvent, revision: int, fmt: Formatter
) -> list[StatusLine]:
    obj = deployment.object
    spec_replicas = get_int(obj, "spec", "replicas", default=1)
    available_replicas = get_int(obj, "status", "availableReplicas", default=0)

    conditions, found = pluck(obj, "status", "conditions")
    if not found or not isinstance(conditions, list):
        return [
            failure(APP_UNAVAILABLE.format(0, spec_replicas)),
            failure(ROLLOUT_NOT_STARTED),
        ]

    lines = [
        info(fmt(Style.BOLD, f"Rolling out Deployment revision {revision}"), level=1)
    ]

    progressing: dict[str, Any] = {}
    available: dict[str, Any] = {}
    for condition in conditions:
        if not isinstance(condition, dict):
            continue
        if condition.get("type") == PROGRESSING:
            progressing = condition
        elif condition.get("type") == AVAILABLE:
            available = condition

    is_progressing = progressing.get("status") == TRUE_STATUS
    rollout_successful = (
        is_progressing and progressing.get("reason") == NEW_REPLICA_SET_AVAILABLE
    )

    if available.get("status") == TRUE_STATUS:
        lines.append(
            success(
                f"Deployment is currently available ({available_replicas} out of "
                f"{spec_replicas} Pods are available)"
            )
        )
    else:
        lines.append(
            failure(
                f"Deployment is failing; {available_replicas} out of {spec_replicas} "
                f"Pods are available: {_condition_reason(available)}"
            )
        )

    if not is_progressing:
        lines.append(
            failure(
                "Rollout has failed; controller is no longer rolling forward: "
                f"{_condition_reason(progressing)}"
            )
        )
    elif rollout_successful:
        lines.append(success("Rollout successful: new ReplicaSet marked 'available'"))
    else:
        lines.append(pending(f"Rollout proceeding: {_condition_reason(progressing)}"))
    return lines


def _pod_lines(
    replica_set: WatchEvent, pods: Sequence[WatchEvent], fmt: Formatter, faint: bool
) -> list[StatusLine]:
    lines = []
    for pod in owned_pods(pods, replica_set.object):
        lines.extend(pod_status(pod, fmt, faint=faint))
    return lines


def _current_replica_set_lines(
    replica_set: WatchEvent,
    revision: int,
    pods: Sequence[WatchEvent],
    fmt: Formatter,
) -> list[StatusLine]:
    rs_id = replica_set.resource_id
    event_style = Style.FAILURE if replica_set.deleted else Style.SUCCESS
    lines = [
        info(fmt(Style.HEADING, "ROLLOUT STATUS:")),
        info(
            f"- [{fmt(Style.EMPHASIS, 'Current rollout')} | Revision {revision}] "
            f"[{fmt(event_style, str(replica_set.type))}]  {rs_id.namespaced_name}"
        ),
    ]
    spec_replicas = get_int(replica_set.object, "spec", "replicas", default=1)
    available_replicas = get_int(
        replica_set.object, "status", "availableReplicas", default=0
    )
    if available_replicas < spec_replicas:
        lines.append(
            pending(
                "Waiting for ReplicaSet to attain minimum available Pods "
                f"({available_replicas} available of a {spec_replicas} minimum)"
            )
        )
    else:
        lines.append(
            success(
                f"ReplicaSet is available [{available_replicas} Pods available "
                f"of a {spec_replicas} minimum]"
            )
        )
    lines.extend(_pod_lines(replica_set, pods, fmt, faint=False))
    return lines


def _previous_replica_set_lines(
    replica_set: WatchEvent,
    selected: ReplicaSets,
    pods: Sequence[WatchEvent],
    fmt: Formatter,
) -> list[StatusLine]:
    rs_id = replica_set.resource_id
    lines = [
        info("", faint=True),
        info(
            f"- [{fmt(Style.BOLD, 'Previous ReplicaSet')} | Revision "
            f"{selected.previous_revision}] [{fmt(Style.SUCCESS, str(replica_set.type))}]"
            f"  {rs_id.namespaced_name}",
            faint=True,
        ),
        pending(
            "Waiting for ReplicaSet to scale to 0 Pods "
            f"({selected.previous_replicas} currently exist)",
            faint=True,
        ),
    ]
    lines.extend(_pod_lines(replica_set, pods, fmt, faint=True))
    return lines


def deployment_status(
    deployment: WatchEvent | None,
    replica_sets: Sequence[WatchEvent],
    pods: Sequence[WatchEvent],
    fmt: Formatter = plain,
) -> list[StatusLine]:
    """Return the status lines for a Deployment rollout.

    The lines are recomputed from the complete set of latest events each time,
    so they do not depend on the order the events were observed in.
    """
    lines: list[StatusLine] = []
    revision: int | None = None
    if deployment is not None:
        lines.append(event_header(deployment, fmt))
        revision = parse_revision(deployment.object)
        if revision is None:
            lines.append(failure(WAITING_FOR_CONTROLLER))
        else:
            lines.extend(_deployment_lines(deployment, revision, fmt))

    lines.append(info(""))

    selected = select_replica_sets(revision, replica_sets)
    if selected.current is not None and revision is not None:
        lines.extend(
            _current_replica_set_lines(selected.current, revision, pods, fmt)
        )
    else:
        lines.append(
            pending("Waiting for Deployment controller to create ReplicaSet", level=0)
        )

    if selected.previous is not None:
        lines.extend(
            _previous_replica_set_lines(selected.previous, selected, pods, fmt)
        )

    return lines
