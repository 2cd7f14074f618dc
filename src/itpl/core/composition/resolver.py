"""Include resolver: turn an include directive into fully resolved text."""
from __future__ import annotations

import logging
from typing import Callable

from itpl.core.store import FileStore

from .context import ResolutionContext

logger = logging.getLogger(__name__)

# (canonical path, context) -> combined output of that file
ProcessFn = Callable[[str, ResolutionContext], str]


class IncludeResolver:
    """Resolve include targets relative to the including file.

    Relative targets are joined against the directory of the including file
    (not the working directory); absolute targets are used as given. Either
    way the result is cleaned and used as the identity for cycle detection.
    """

    def __init__(self, store: FileStore, process: ProcessFn) -> None:
        """Initialize with the store used for path arithmetic.

        Args:
            store: File store providing ``clean``/``dirname``/``join``/``is_absolute``
            process: Runs the full parse -> walk -> serialize pipeline on one file
        """
        self.store = store
        self._process = process

    def target_path(self, including_path: str, target: str) -> str:
        """Compute the canonical path of ``target`` as seen from ``including_path``."""
        if self.store.is_absolute(target):
            return self.store.clean(target)
        return self.store.clean(self.store.join(self.store.dirname(including_path), target))

    def resolve(self, including_path: str, target: str, context: ResolutionContext) -> str:
        """Load ``target`` recursively and return its combined output.

        Raises:
            CircularImportError: ``target`` is already being resolved.
            TemplateNotFoundError: ``target`` cannot be read.
            TemplateSyntaxError: ``target`` (or anything it includes) is malformed.
        """
        path = self.target_path(including_path, target)
        logger.debug("Resolving include %r from %s -> %s", target, including_path, path)
        with context.enter(path):
            text = self._process(path, context)
        context.record_include()
        return text


__all__ = ["IncludeResolver", "ProcessFn"]
