"""Shared helpers for CLI commands."""
from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

from itpl.core.composition import Loader
from itpl.core.config import LoaderConfig, load_config
from itpl.core.logging import configure_logging, suppress_lastresort_in_json_mode


def setup_logging(args: argparse.Namespace) -> None:
    """Configure logging from ``--verbose`` / ``--json``."""
    if getattr(args, "verbose", False):
        configure_logging("DEBUG")
    elif getattr(args, "json", False):
        suppress_lastresort_in_json_mode()
    else:
        configure_logging("WARNING")


def get_config(args: argparse.Namespace) -> LoaderConfig:
    """Load the config file and apply ``--root`` / ``--func`` overrides."""
    cfg = load_config(getattr(args, "config", None))
    root = getattr(args, "root", None)
    if root:
        cfg = replace(cfg, root=Path(root))
    functions = getattr(args, "functions", None)
    if functions:
        cfg = replace(cfg, functions=tuple(functions))
    return cfg


def get_loader(args: argparse.Namespace) -> Loader:
    return Loader.from_config(get_config(args))


__all__ = ["setup_logging", "get_config", "get_loader"]
