"""
itpl deps command.

SUMMARY: List every file a template pulls in through includes
"""

from __future__ import annotations

import argparse
import sys

from itpl.cli import OutputFormatter, add_loader_flags, get_loader, setup_logging
from itpl.core.exceptions import ItplError

SUMMARY = "List every file a template pulls in through includes"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        type=str,
        help="Template file to inspect",
    )
    add_loader_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    setup_logging(args)
    try:
        result = get_loader(args).load_result(args.path)
        deps = list(result.dependencies)
        formatter.success(
            {"path": args.path, "dependencies": deps, "functions": list(result.functions)},
            "\n".join(deps),
        )
        return 0
    except ItplError as e:
        formatter.error(e, error_code="deps_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
