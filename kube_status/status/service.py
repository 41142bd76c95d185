"""Judge whether a Service is reachable from its Service and Endpoints objects."""

from kube_status.resource import WatchEvent
from kube_status.snapshot import Snapshot, get_list, get_str

from .lines import (
    Formatter,
    StatusLine,
    Style,
    event_header,
    failure,
    info,
    plain,
    success,
)
from .pods import endpoint_addresses

__all__ = [
    "service_status",
]

CLUSTER_IP = "ClusterIP"
NODE_PORT = "NodePort"
LOAD_BALANCER = "LoadBalancer"
EXTERNAL_NAME = "ExternalName"

LIST_PREFIX = "\n       - "


def _bullets(items: list[str]) -> str:
    return LIST_PREFIX + LIST_PREFIX.join(items)


def _endpoints_created(
    service: Snapshot, endpoints: WatchEvent | None, fmt: Formatter
) -> StatusLine:
    if endpoints is not None and not endpoints.deleted:
        name = get_str(service, "metadata", "name", default="")
        return success(
            f"Successfully created Endpoints object '{fmt(Style.NAME, name)}' "
            "to direct traffic to Pods"
        )
    return failure("Waiting for Endpoints object to be created, to direct traffic to Pods")


def _ingress_addresses(service: Snapshot) -> list[str]:
    ingress = get_list(service, "status", "loadBalancer", "ingress")
    addresses = []
    for entry in ingress:
        parts = [
            value
            for key in ("ip", "hostname")
            if (value := get_str(entry, key))
        ]
        if parts:
            addresses.append("/".join(parts))
    return sorted(addresses)


def _service_type_lines(
    service: Snapshot, svc_type: str, endpoints: WatchEvent | None, fmt: Formatter
) -> list[StatusLine]:
    if svc_type in (CLUSTER_IP, NODE_PORT):
        lines = [_endpoints_created(service, endpoints, fmt)]
        if cluster_ip := get_str(service, "spec", "clusterIP"):
            lines.append(
                success(
                    "Successfully allocated a cluster-internal IP: "
                    f"{fmt(Style.NAME, cluster_ip)}"
                )
            )
        else:
            lines.append(failure("Waiting for cluster-internal IP to be allocated"))
        return lines
    if svc_type == LOAD_BALANCER:
        lines = [_endpoints_created(service, endpoints, fmt)]
        if addresses := _ingress_addresses(service):
            formatted = [fmt(Style.NAME, address) for address in addresses]
            lines.append(
                success(
                    "Service allocated the following IPs/hostnames:"
                    f"{_bullets(formatted)}"
                )
            )
        else:
            lines.append(failure("Waiting for public IP/host to be allocated"))
        return lines
    if svc_type == EXTERNAL_NAME:
        if external_name := get_str(service, "spec", "externalName"):
            return [success(f"Service proxying to '{fmt(Style.NAME, external_name)}'")]
        return [
            failure("Service not given a URI to proxy to in `.spec.externalName`")
        ]
    return []


def _endpoints_lines(endpoints: WatchEvent, fmt: Formatter) -> list[StatusLine]:
    lines = [event_header(endpoints, fmt)]
    ready, unready = endpoint_addresses(endpoints.object)
    targets = [
        f"[{fmt(Style.SUCCESS, 'Ready')}] {_target(address, fmt)}"
        for address in ready
    ] + [
        f"[{fmt(Style.FAILURE, 'Not live')}] {_target(address, fmt)}"
        for address in unready
    ]
    if unready:
        lines.append(
            failure(f"Directs traffic to the following live Pods:{_bullets(targets)}")
        )
    elif ready:
        lines.append(
            success(f"Directs traffic to the following live Pods:{_bullets(targets)}")
        )
    else:
        lines.append(failure("Does not direct traffic to any Pods"))
    return lines


def _target(address: str, fmt: Formatter) -> str:
    name, _, ip = address.partition(" @ ")
    return f"{fmt(Style.NAME, name)} @ {fmt(Style.VALUE, ip)}"


def service_status(
    service: WatchEvent | None,
    endpoints: WatchEvent | None,
    fmt: Formatter = plain,
) -> list[StatusLine]:
    """Return the status lines for a Service and its Endpoints.

    Every line is derived from the two latest events alone, so the output only
    depends on the current state and not on the order events arrived in.
    """
    lines: list[StatusLine] = []
    svc_type: str | None = None
    if service is not None:
        lines.append(event_header(service, fmt))
        svc_type = get_str(service.object, "spec", "type", default=CLUSTER_IP)
        lines.extend(_service_type_lines(service.object, svc_type, endpoints, fmt))

    lines.append(info(""))

    if endpoints is not None:
        lines.extend(_endpoints_lines(endpoints, fmt))
    elif svc_type != EXTERNAL_NAME:
        lines.append(failure("Waiting for live Pods to be targeted by service", level=0))

    return lines
