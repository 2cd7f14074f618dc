"""
itpl load command.

SUMMARY: Resolve includes in a template and print the combined template
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from itpl.cli import OutputFormatter, add_loader_flags, get_loader, setup_logging
from itpl.core.exceptions import ItplError
from itpl.core.utils.io import atomic_write_text

SUMMARY = "Resolve includes in a template and print the combined template"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        type=str,
        help="Template file to load",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write the combined template to this file instead of stdout",
    )
    add_loader_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    setup_logging(args)
    try:
        loader = get_loader(args)
        result = loader.load_result(args.path)

        output = getattr(args, "output", None)
        if output:
            atomic_write_text(Path(output), result.content, encoding=loader.encoding)

        if formatter.json_mode:
            payload = {
                "path": args.path,
                "dependencies": list(result.dependencies),
                "functions": list(result.functions),
                "includesResolved": result.includes_resolved,
            }
            if output:
                payload["output"] = output
            else:
                payload["content"] = result.content
            formatter.success(payload, "")
        elif output:
            formatter.text(f"Wrote {output} ({len(result.dependencies)} file(s))")
        else:
            formatter.text(result.content, end="")
        return 0
    except (ItplError, OSError) as e:
        formatter.error(e, error_code="load_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    sys.exit(main(parser.parse_args()))
