"""Command line tool for watching kubernetes objects change in real time."""

import argparse
import asyncio
import logging
import sys
import traceback
from typing import Any

import yaml

from kube_status.exceptions import KubeStatusException
from . import changes, record, trace, version

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kube-status",
        description="Command line utility for watching kubernetes objects.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    changes.ChangesAction.register(subparsers)
    changes.StatusAction.register(subparsers)
    record.RecordAction.register(subparsers)
    trace.TraceAction.register(subparsers)
    version.VersionAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """kube-status command line tool main entry point."""

    def str_presenter(dumper: yaml.Dumper, data: Any) -> Any:
        """Represent multi-line yaml strings as block scalars."""
        return dumper.represent_scalar(
            "tag:yaml.org,2002:str", data, style="|" if data.count("\n") > 0 else None
        )

    yaml.add_representer(str, str_presenter)

    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except KubeStatusException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("kube-status error: ", err, file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        _LOGGER.debug("Interrupted")


if __name__ == "__main__":
    main()
