"""kube-status record action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
import logging
import sys
from typing import cast

from kube_status.changes import RecordWriter, run_record

from .common import add_cluster_flags, add_object_args, build_source, resolve_object

__all__ = [
    "RecordAction",
]

_LOGGER = logging.getLogger(__name__)


class RecordAction:
    """Records every version of an object as a JSON array."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "record",
                help="Records every version of an object in real time as a JSON array",
                description=(
                    "Print every distinct version of the object as an element of a "
                    "JSON array. The array is terminated when the command exits."
                ),
            ),
        )
        add_object_args(args)
        add_cluster_flags(args)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        api_version: str,
        kind: str,
        object_id: str,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        source = build_source(**kwargs)
        namespace, name = resolve_object(source, object_id)
        writer = RecordWriter(sys.stdout)
        await run_record(source, api_version, kind, namespace, name, writer)
