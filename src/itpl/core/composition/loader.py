"""Loader: the public entry point of the composition engine.

    from itpl import load

    combined = load("templates/page.tpl")

``load`` reads the file, resolves every ``{{include "..."}}`` recursively and
returns one template body, ready for any Go-compatible template engine. The
``Loader`` class exposes the same pipeline with a configurable file store and
function handling.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, Tuple

from itpl.core.exceptions import TemplateSyntaxError
from itpl.core.store import FileStore, OsFileStore

from .context import ResolutionContext
from .resolver import IncludeResolver
from .serializer import serialize
from .syntax import DEFAULT_MAX_FUNCTION_RETRIES, SyntaxAdapter
from .walker import walk

if TYPE_CHECKING:
    from itpl.core.config import LoaderConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadResult:
    """Combined template plus what it took to build it."""

    content: str
    dependencies: Tuple[str, ...] = ()
    functions: Tuple[str, ...] = ()
    includes_resolved: int = 0


class Loader:
    """Load templates and resolve their include actions.

    Every call to :meth:`load` gets its own resolution context, so one
    loader may serve several independent loads.
    """

    def __init__(
        self,
        store: Optional[FileStore] = None,
        *,
        functions: Optional[Iterable[str]] = None,
        max_function_retries: int = DEFAULT_MAX_FUNCTION_RETRIES,
        encoding: str = "utf-8",
    ) -> None:
        """Initialize the loader.

        Args:
            store: Where files are read from (default: local filesystem)
            functions: Explicit function names; disables iterative discovery
            max_function_retries: Parse attempts allowed during discovery
            encoding: Text encoding of template files
        """
        self.store: FileStore = store if store is not None else OsFileStore()
        self.encoding = encoding
        self.syntax = SyntaxAdapter(functions, max_retries=max_function_retries)
        self.resolver = IncludeResolver(self.store, self._process)

    @classmethod
    def from_config(cls, config: "LoaderConfig", store: Optional[FileStore] = None) -> "Loader":
        """Build a loader from a :class:`~itpl.core.config.LoaderConfig`."""
        if store is None:
            store = OsFileStore(config.root)
        return cls(
            store,
            functions=config.functions,
            max_function_retries=config.max_function_retries,
            encoding=config.encoding,
        )

    def with_store(self, store: FileStore) -> "Loader":
        """Switch to another file store (e.g. an in-memory one in tests)."""
        self.store = store
        self.resolver = IncludeResolver(store, self._process)
        return self

    def load(self, path: str) -> str:
        """Load ``path`` and return the combined template text."""
        return self.load_result(path).content

    def load_result(self, path: str) -> LoadResult:
        """Load ``path`` and return the combined text with dependency details.

        Raises:
            TemplateNotFoundError: A file cannot be read.
            TemplateSyntaxError: A file is malformed.
            UnresolvableFunctionError: Function discovery gave up.
            CircularImportError: An include chain loops.
        """
        context = ResolutionContext()
        canonical = self.store.clean(path)
        with context.enter(canonical):
            content = self._process(canonical, context)
        logger.debug(
            "Loaded %s: %d file(s), %d include(s) resolved",
            canonical,
            len(context.dependencies),
            context.includes_resolved,
        )
        return LoadResult(
            content=content,
            dependencies=tuple(context.dependencies),
            functions=tuple(sorted(context.discovered_functions)),
            includes_resolved=context.includes_resolved,
        )

    def _process(self, path: str, context: ResolutionContext) -> str:
        """Parse, resolve includes in, and reprint one file."""
        context.record_dependency(path)
        raw = self.store.read_bytes(path)
        try:
            text = raw.decode(self.encoding)
        except UnicodeDecodeError as exc:
            raise TemplateSyntaxError(f"invalid {self.encoding} text: {exc.reason}", name=path) from exc

        result = self.syntax.parse(text, source=path)
        context.record_functions(list(result.discovered))

        def resolve(including_path: str, target: str) -> str:
            return self.resolver.resolve(including_path, target, context)

        for tree in result.trees.values():
            walk(path, tree.root, resolve)
        return serialize(result.trees)


def load(
    path: str,
    *,
    store: Optional[FileStore] = None,
    functions: Optional[Iterable[str]] = None,
) -> str:
    """Load ``path`` and return the combined template text.

    Args:
        path: Template file to load.
        store: File store (default: local filesystem).
        functions: Explicit function names; disables iterative discovery.
    """
    return Loader(store, functions=functions).load(path)


__all__ = ["Loader", "LoadResult", "load"]
