"""
itpl CLI package.

Commands are auto-discovered from ``itpl/cli/commands``.

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Config, loader and logging setup from parsed arguments
"""
from ._output import OutputFormatter, format_json
from ._args import (
    add_json_flag,
    add_verbose_flag,
    add_config_flag,
    add_root_flag,
    add_func_flag,
    add_loader_flags,
)
from ._utils import setup_logging, get_config, get_loader

__all__ = [
    # Output formatting
    "OutputFormatter",
    "format_json",
    # Argument helpers
    "add_json_flag",
    "add_verbose_flag",
    "add_config_flag",
    "add_root_flag",
    "add_func_flag",
    "add_loader_flags",
    # Utilities
    "setup_logging",
    "get_config",
    "get_loader",
]
