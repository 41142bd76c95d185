"""Trace the health of an object made up of several related kinds.

A tracer describes the watch streams that make up the object and the rule
that judges it. The trace loop keeps the latest event of every watched object
in a table and re-renders the whole status on every event, so the output
always reflects the current state regardless of the order events arrive in.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import aclosing
from dataclasses import dataclass
import logging

from .config import WatchConfig
from .display import DisplaySink
from .exceptions import InputException
from .ownership import OwnerKind
from .status.deployment import deployment_status
from .status.lines import Formatter, StatusLine, Style, plain
from .status.service import service_status
from .table import ResourceStateTable
from .watch import Selector, WatchMultiplexer, WatchSource

__all__ = [
    "TraceStream",
    "Tracer",
    "ServiceTracer",
    "DeploymentTracer",
    "tracer_for",
    "run_trace",
    "TRACE_TYPES",
]

_LOGGER = logging.getLogger(__name__)

SERVICE = "Service"
ENDPOINTS = "Endpoints"
DEPLOYMENT = "Deployment"
REPLICA_SET = "ReplicaSet"
POD = "Pod"


@dataclass(frozen=True)
class TraceStream:
    """A watch stream that makes up part of a traced object."""

    tag: str
    api_version: str
    kind: str
    selector: Selector


class Tracer(ABC):
    """Describes how to watch and judge one kind of composite object."""

    kind: str
    collections: tuple[str, ...] = ()

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name

    @property
    @abstractmethod
    def streams(self) -> list[TraceStream]:
        """Return the streams to watch."""

    @abstractmethod
    def render(self, table: ResourceStateTable, fmt: Formatter) -> list[StatusLine]:
        """Judge the object from the latest events in the table."""

    def waiting_message(self, fmt: Formatter = plain) -> str:
        return fmt(
            Style.HEADING, f"Waiting for {self.kind} '{self.namespace}/{self.name}'"
        )


class ServiceTracer(Tracer):
    """Traces a Service and the Endpoints directing its traffic."""

    kind = SERVICE

    @property
    def streams(self) -> list[TraceStream]:
        selector = Selector.by_name(self.namespace, self.name)
        return [
            TraceStream(SERVICE, "v1", SERVICE, selector),
            TraceStream(ENDPOINTS, "v1", ENDPOINTS, selector),
        ]

    def render(self, table: ResourceStateTable, fmt: Formatter) -> list[StatusLine]:
        return service_status(table.get(SERVICE), table.get(ENDPOINTS), fmt)


class DeploymentTracer(Tracer):
    """Traces a Deployment rollout through its ReplicaSets and Pods."""

    kind = DEPLOYMENT
    collections = (REPLICA_SET, POD)

    def __init__(
        self, namespace: str, name: str, config: WatchConfig | None = None
    ) -> None:
        super().__init__(namespace, name)
        self.config = config or WatchConfig()

    @property
    def streams(self) -> list[TraceStream]:
        return [
            TraceStream(
                DEPLOYMENT,
                self.config.deployment_api_version,
                DEPLOYMENT,
                Selector.by_name(self.namespace, self.name),
            ),
            TraceStream(
                REPLICA_SET,
                self.config.replica_set_api_version,
                REPLICA_SET,
                Selector.by_owner(self.namespace, self.name),
            ),
            TraceStream(POD, "v1", POD, Selector.all(self.namespace)),
        ]

    def render(self, table: ResourceStateTable, fmt: Formatter) -> list[StatusLine]:
        return deployment_status(
            table.get(DEPLOYMENT),
            table.list_events(REPLICA_SET),
            table.list_events(POD),
            fmt,
        )


TRACE_TYPES = {
    "service": "service",
    "svc": "service",
    "deployment": "deployment",
    "deploy": "deployment",
}


def tracer_for(
    resource_type: str, namespace: str, name: str, config: WatchConfig | None = None
) -> Tracer:
    """Return the tracer for a resource type name or alias."""
    match TRACE_TYPES.get(resource_type.lower()):
        case "service":
            return ServiceTracer(namespace, name)
        case "deployment":
            return DeploymentTracer(namespace, name, config)
    raise InputException(
        f"Unknown resource type '{resource_type}'. The following resources are available:\n"
        "  - service (aliases: {svc})\n"
        "  - deployment (aliases: {deploy})"
    )


async def run_trace(
    tracer: Tracer,
    source: WatchSource,
    sink: DisplaySink,
    owner_kinds: Sequence[OwnerKind] | None = None,
    fmt: Formatter = plain,
) -> None:
    """Render the status of the traced object to the sink on every event."""
    if owner_kinds is None:
        if isinstance(tracer, DeploymentTracer):
            owner_kinds = tracer.config.owner_kinds
        else:
            owner_kinds = WatchConfig().owner_kinds
    multiplexer = WatchMultiplexer(source, owner_kinds)
    for stream in tracer.streams:
        multiplexer.add(stream.tag, stream.api_version, stream.kind, stream.selector)
    table = ResourceStateTable(tracer.collections)

    sink.write(tracer.waiting_message(fmt))
    sink.flush()

    async with aclosing(multiplexer.events()) as events:
        async for tag, event in events:
            _LOGGER.debug("Received %s event for %s %s", event.type, tag, event.name)
            table.update(tag, event)
            for line in tracer.render(table, fmt):
                sink.write(line.render(fmt))
            sink.flush()
