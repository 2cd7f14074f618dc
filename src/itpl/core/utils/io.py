"""File I/O helpers for itpl.

- Atomic text writes (temp file + fsync + rename) for CLI output files
- YAML reading for configuration files
"""
from __future__ import annotations

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

import yaml

PathLike = Union[str, Path]


def ensure_parent_dir(path: Path) -> None:
    """Ensure the parent directory for ``path`` exists."""
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def atomic_write_text(path: PathLike, content: str, *, encoding: str = "utf-8") -> None:
    """Write ``content`` to ``path`` atomically using a temp file + fsync + rename.

    - Parent directory is created if missing
    - Data is written to a temporary file in the same directory
    - Any leftover temp file is cleaned up on failure

    Args:
        path: Target file path
        content: Text to write
        encoding: Text encoding (default: utf-8)
    """
    path = Path(path)
    ensure_parent_dir(path)

    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            dir=str(path.parent),
            delete=False,
            newline="",
        ) as f:
            tmp_path = Path(f.name)
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        os.replace(str(tmp_path), str(path))
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


def read_yaml(path: PathLike, default: Any = None, raise_on_error: bool = False) -> Any:
    """Read YAML with error handling.

    Returns default if file is missing or empty, unless raise_on_error is True.

    Args:
        path: YAML file path to read
        default: Value to return if file missing or empty (default: None)
        raise_on_error: If True, missing files and parse errors propagate.

    Returns:
        Any: Parsed YAML data, or default

    Examples:
        >>> config = read_yaml(Path("itpl.yaml"), default={})
        >>> assert isinstance(config, dict)
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        with open(path, "r", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            data = yaml.safe_load(f)
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except yaml.YAMLError:
        if raise_on_error:
            raise
        return default
    return data if data is not None else default


__all__ = ["PathLike", "ensure_parent_dir", "atomic_write_text", "read_yaml"]
