"""kube-status trace action."""

from argparse import (
    ArgumentParser,
    BooleanOptionalAction,
    _SubParsersAction as SubParsersAction,
)
import logging
import sys
from typing import cast

from kube_status.display import ConsoleSink, LiveSink
from kube_status.trace import run_trace, tracer_for

from .common import (
    add_cluster_flags,
    build_config,
    build_source,
    formatter,
    resolve_object,
)

__all__ = [
    "TraceAction",
]

_LOGGER = logging.getLogger(__name__)


class TraceAction:
    """Traces the health of a Service or Deployment."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "trace",
                help="Traces the status of a Service or Deployment in real time",
                description=(
                    "Traces status of complex objects. Accepted types are:\n"
                    "  - service (aliases: {svc})\n"
                    "  - deployment (aliases: {deploy})"
                ),
            ),
        )
        args.add_argument("resource_type", help="Either service or deployment")
        args.add_argument("object_id", help="The object as [<namespace>/]<name>")
        add_cluster_flags(args)
        args.add_argument(
            "--live",
            help=(
                "Redraw the status in place, defaults to redrawing when writing "
                "to a terminal. Otherwise every update is appended to the output"
            ),
            action=BooleanOptionalAction,
            default=None,
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        resource_type: str,
        object_id: str,
        live: bool | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        config = build_config(**kwargs)
        source = build_source(**kwargs)
        namespace, name = resolve_object(source, object_id)
        tracer = tracer_for(resource_type, namespace, name, config)
        fmt = formatter(**kwargs)
        if live is None:
            live = sys.stdout.isatty()
        if not live:
            await run_trace(tracer, source, ConsoleSink(), config.owner_kinds, fmt)
            return
        with LiveSink() as sink:
            await run_trace(tracer, source, sink, config.owner_kinds, fmt)
