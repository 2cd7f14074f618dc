"""
itpl data resource helpers.

Bundled files (JSON schemas expressed in YAML) are located with
importlib.resources so they work from an installed wheel as well as from a
source checkout.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a data file or directory.

    Args:
        subpackage: Name of the data subdirectory (e.g., "schemas")
        filename: Optional filename within the subdirectory

    Returns:
        Absolute path to the file or directory

    Example:
        >>> get_data_path("schemas", "config.schema.yaml")
        PosixPath('/path/to/itpl/data/schemas/config.schema.yaml')
    """
    pkg = resources.files("itpl.data")
    base = Path(str(pkg / subpackage))
    return base / filename if filename else base


__all__ = ["get_data_path"]
