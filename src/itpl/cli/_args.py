"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode.

    Args:
        parser: ArgumentParser to add the flag to
    """
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_verbose_flag(parser: argparse.ArgumentParser) -> None:
    """Add --verbose flag (debug logging on stderr)."""
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log resolution steps to stderr",
    )


def add_config_flag(parser: argparse.ArgumentParser) -> None:
    """Add --config flag pointing at an itpl.yaml file."""
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Config file (default: itpl.yaml or itpl.yml in the working directory)",
    )


def add_root_flag(parser: argparse.ArgumentParser) -> None:
    """Add --root flag for the directory relative template paths are read from."""
    parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Directory relative template paths are resolved against",
    )


def add_func_flag(parser: argparse.ArgumentParser) -> None:
    """Add repeatable --func flag for explicit function registration."""
    parser.add_argument(
        "--func",
        "-f",
        dest="functions",
        action="append",
        default=None,
        metavar="NAME",
        help="Register a template function (repeatable); disables function discovery",
    )


def add_loader_flags(parser: argparse.ArgumentParser) -> None:
    """Add the flags every loading command shares."""
    add_config_flag(parser)
    add_root_flag(parser)
    add_func_flag(parser)
    add_json_flag(parser)
    add_verbose_flag(parser)


__all__ = [
    "add_json_flag",
    "add_verbose_flag",
    "add_config_flag",
    "add_root_flag",
    "add_func_flag",
    "add_loader_flags",
]
