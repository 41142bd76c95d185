"""Flags and helpers shared by the kube-status commands."""

from argparse import ArgumentParser, BooleanOptionalAction
import logging
import pathlib
import sys
from typing import Any

from kube_status.config import WatchConfig, load_config
from kube_status.resource import parse_object_id
from kube_status.status.lines import Formatter, ansi, plain
from kube_status.watch.cluster import KubernetesWatchSource
from kube_status.watch.source import WatchSource

__all__ = [
    "add_cluster_flags",
    "add_object_args",
    "build_source",
    "build_config",
    "resolve_object",
    "formatter",
]

_LOGGER = logging.getLogger(__name__)


def add_cluster_flags(args: ArgumentParser) -> None:
    """Add flags for connecting to the cluster and styling output."""
    args.add_argument(
        "--kubeconfig",
        help="Path to the kubeconfig file, defaults to $KUBECONFIG or ~/.kube/config",
        type=str,
        default=None,
    )
    args.add_argument(
        "--context",
        help="The kubeconfig context to use",
        type=str,
        default=None,
    )
    args.add_argument(
        "--config",
        help="Path to a YAML file configuring the watched kinds",
        type=pathlib.Path,
        default=None,
    )
    args.add_argument(
        "--color",
        help="Style the output, defaults to styling when writing to a terminal",
        action=BooleanOptionalAction,
        default=None,
    )


def add_object_args(args: ArgumentParser) -> None:
    """Add positional arguments naming a single object of any kind."""
    args.add_argument("api_version", help="The apiVersion of the object e.g. apps/v1")
    args.add_argument("kind", help="The kind of the object e.g. Deployment")
    args.add_argument("object_id", help="The object as [<namespace>/]<name>")


def build_source(
    kubeconfig: str | None = None,
    context: str | None = None,
    **kwargs: Any,  # pylint: disable=unused-argument
) -> WatchSource:
    """Return the watch source for the flags."""
    return KubernetesWatchSource(kubeconfig=kubeconfig, context=context)


def build_config(
    config: pathlib.Path | None = None,
    **kwargs: Any,  # pylint: disable=unused-argument
) -> WatchConfig:
    """Return the configuration for the flags."""
    return load_config(config)


def resolve_object(source: WatchSource, object_id: str) -> tuple[str, str]:
    """Parse the object id, filling in the default namespace when omitted."""
    namespace, name = parse_object_id(object_id)
    if namespace is None:
        namespace = source.default_namespace()
        _LOGGER.debug("Using default namespace %s", namespace)
    return namespace, name


def formatter(
    color: bool | None = None,
    **kwargs: Any,  # pylint: disable=unused-argument
) -> Formatter:
    """Return the formatter for the flags."""
    if color is None:
        color = sys.stdout.isatty()
    return ansi if color else plain
