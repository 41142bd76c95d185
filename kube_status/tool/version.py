"""kube-status version action."""

from argparse import ArgumentParser, _SubParsersAction as SubParsersAction
from importlib import metadata
from typing import cast

__all__ = [
    "VersionAction",
]

PACKAGE = "kube-status"


class VersionAction:
    """Prints the version of kube-status."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "version",
                help="Displays version information for this tool",
            ),
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        try:
            version = metadata.version(PACKAGE)
        except metadata.PackageNotFoundError:
            version = "unknown"
        print(f"kube-status version {version}")
