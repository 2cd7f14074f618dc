"""Per-call resolution state for the composition engine."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, List, Set

from itpl.core.exceptions import CircularImportError


@dataclass
class ResolutionContext:
    """State threaded through one top-level load.

    Contains:
    - The stack of canonical paths currently being resolved (cycle detection)
    - Tracking for reporting: every file read and every placeholder discovered

    A new context is created for every top-level call, so concurrent loads
    never see each other's in-flight paths.
    """

    stack: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    discovered_functions: Set[str] = field(default_factory=set)
    includes_resolved: int = 0

    def is_in_flight(self, path: str) -> bool:
        return path in self.stack

    @contextmanager
    def enter(self, path: str) -> Iterator[None]:
        """Push ``path`` for the duration of the block.

        Raises:
            CircularImportError: If ``path`` is already being resolved.
        """
        if self.is_in_flight(path):
            raise CircularImportError(path, chain=self.stack)
        self.stack.append(path)
        try:
            yield
        finally:
            self.stack.pop()

    def record_dependency(self, path: str) -> None:
        """Record that a file was read."""
        if path not in self.dependencies:
            self.dependencies.append(path)

    def record_include(self) -> None:
        """Record that an include directive was resolved."""
        self.includes_resolved += 1

    def record_functions(self, names: List[str]) -> None:
        """Record placeholder names discovered while parsing."""
        self.discovered_functions.update(names)


__all__ = ["ResolutionContext"]
