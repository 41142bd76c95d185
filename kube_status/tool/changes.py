"""kube-status changes and status actions."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
from typing import Any, cast

from kube_status.changes import ChangeTracker, DiffFormat, OutputFormat, run_changes
from kube_status.display import ConsoleSink
from kube_status.status.lines import Style

from .common import (
    add_cluster_flags,
    add_object_args,
    build_source,
    formatter,
    resolve_object,
)

__all__ = [
    "ChangesAction",
    "StatusAction",
]

_LOGGER = logging.getLogger(__name__)


def add_change_flags(args: ArgumentParser) -> None:
    """Add flags controlling how changes are rendered."""
    args.add_argument(
        "--output",
        "-o",
        choices=[str(value) for value in OutputFormat],
        default=str(OutputFormat.JSON),
        help="Output format used to dump a newly created object",
    )
    args.add_argument(
        "--diff-format",
        choices=[str(value) for value in DiffFormat],
        default=str(DiffFormat.STRUCTURAL),
        help="Render changes per field or as a unified diff of the YAML",
    )


class ChangesAction:
    """Displays changes made to an object."""

    status_only = False
    banner = "Watching for changes on"

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "changes",
                help="Displays changes made to an object in real time",
                description=(
                    "Print the object when it is created, then the fields that "
                    "changed on every update"
                ),
            ),
        )
        add_object_args(args)
        add_cluster_flags(args)
        add_change_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        api_version: str,
        kind: str,
        object_id: str,
        output: str,
        diff_format: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        source = build_source(**kwargs)
        namespace, name = resolve_object(source, object_id)
        fmt = formatter(**kwargs)
        tracker = ChangeTracker(
            status_only=self.status_only,
            diff_format=DiffFormat(diff_format),
            output=OutputFormat(output),
        )
        sink = ConsoleSink()
        sink.write(
            fmt(Style.SUCCESS, f"{self.banner} {api_version} {kind} {object_id}")
        )
        sink.flush()
        await run_changes(source, api_version, kind, namespace, name, tracker, sink, fmt)


class StatusAction(ChangesAction):
    """Displays changes made to the status of an object."""

    status_only = True
    banner = "Watching status of"

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "status",
                help="Displays changes made to the status of an object in real time",
                description=(
                    "Print the status of the object when it is created, then the "
                    "status fields that changed on every update"
                ),
            ),
        )
        add_object_args(args)
        add_cluster_flags(args)
        add_change_flags(args)
        args.set_defaults(cls=cls)
        return args
