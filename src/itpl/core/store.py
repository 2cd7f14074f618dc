"""File stores: where template files are read from.

The composition engine never touches the filesystem directly. It asks a
:class:`FileStore` for bytes and for path arithmetic, so the same code runs
against local disk (:class:`OsFileStore`) or an in-memory map
(:class:`MemoryFileStore`, handy in tests and for generated templates).
"""
from __future__ import annotations

import logging
import os
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from types import ModuleType
from typing import Dict, Mapping, Optional, Union

from itpl.core.exceptions import TemplateNotFoundError

logger = logging.getLogger(__name__)

Content = Union[str, bytes]


class FileStore(ABC):
    """Read-only access to template files plus path helpers.

    A store must return the same content for the same canonical path for the
    duration of one top-level load.
    """

    #: Path module used by the helpers (``os.path`` or ``posixpath``).
    pathmod: ModuleType = os.path

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Return the raw content of ``path``.

        Raises:
            TemplateNotFoundError: If ``path`` cannot be read.
        """
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return self.read_bytes(path).decode(encoding)

    def clean(self, path: str) -> str:
        """Normalize separators and ``.``/``..`` segments."""
        cleaned = self.pathmod.normpath(path)
        if self.pathmod is posixpath and cleaned.startswith("//"):
            # POSIX normpath keeps a leading "//"; collapse it.
            cleaned = "/" + cleaned.lstrip("/")
        return cleaned

    def dirname(self, path: str) -> str:
        return self.pathmod.dirname(path) or "."

    def join(self, base: str, rel: str) -> str:
        return self.pathmod.join(base, rel)

    def is_absolute(self, path: str) -> bool:
        return self.pathmod.isabs(path)


class OsFileStore(FileStore):
    """Store backed by the local filesystem.

    Relative paths are read relative to ``root`` when given, else relative
    to the process working directory.
    """

    pathmod = os.path

    def __init__(self, root: Optional[Union[str, Path]] = None) -> None:
        self.root = Path(root) if root is not None else None

    def _resolve(self, path: str) -> Path:
        if self.root is not None and not os.path.isabs(path):
            return self.root / path
        return Path(path)

    def read_bytes(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            data = target.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError, PermissionError) as exc:
            raise TemplateNotFoundError(path, reason=exc.strerror) from exc
        logger.debug("Read %d bytes from %s", len(data), target)
        return data

    def __repr__(self) -> str:
        return f"OsFileStore(root={str(self.root) if self.root else None!r})"


class MemoryFileStore(FileStore):
    """Store backed by an in-memory ``{path: content}`` map with POSIX paths."""

    pathmod = posixpath

    def __init__(self, files: Optional[Mapping[str, Content]] = None) -> None:
        self._files: Dict[str, bytes] = {}
        for path, content in (files or {}).items():
            self.write(path, content)

    def write(self, path: str, content: Content) -> None:
        """Store ``content`` under ``path`` (text is encoded as UTF-8)."""
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        self._files[self.clean(path)] = data

    def read_bytes(self, path: str) -> bytes:
        try:
            return self._files[self.clean(path)]
        except KeyError:
            raise TemplateNotFoundError(path) from None

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.clean(path) in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"MemoryFileStore({sorted(self._files)!r})"


__all__ = ["FileStore", "OsFileStore", "MemoryFileStore"]
