"""Placeholder function registry for template parsing.

The parser only needs to know *which* names are functions. Each registered
name maps to :func:`placeholder`, a no-op that is never called: itpl parses
templates, it does not execute them.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, Iterator, List, Optional

PlaceholderType = Callable[..., None]

# Functions the Go template language defines natively.
BUILTIN_FUNCTIONS = (
    "and",
    "call",
    "html",
    "index",
    "slice",
    "js",
    "len",
    "not",
    "or",
    "print",
    "printf",
    "println",
    "urlquery",
    # Comparisons
    "eq",
    "ge",
    "gt",
    "le",
    "lt",
    "ne",
)

INCLUDE_FUNCTION = "include"


def placeholder(*args: object, **kwargs: object) -> None:
    """Stand-in for a template function; exists only so the parser accepts the call."""
    return None


class FunctionRegistry:
    """Closed set of function names the parser accepts.

        registry = FunctionRegistry.with_defaults()
        registry.add("upper")
        "upper" in registry  # True

    ``include`` and the builtins are present in every registry built by
    :meth:`with_defaults`.
    """

    def __init__(self, names: Optional[Iterable[str]] = None) -> None:
        """Initialize registry.

        Args:
            names: Initial function names (optional)
        """
        self._functions: Dict[str, PlaceholderType] = {}
        for name in names or ():
            self.add(name)

    @classmethod
    def with_defaults(cls, extra: Optional[Iterable[str]] = None) -> "FunctionRegistry":
        """Registry holding the builtins, ``include`` and any ``extra`` names."""
        registry = cls(BUILTIN_FUNCTIONS)
        registry.add(INCLUDE_FUNCTION)
        for name in extra or ():
            registry.add(name)
        return registry

    def add(self, name: str) -> None:
        """Register ``name`` as a placeholder function."""
        self._functions[name] = placeholder

    def get(self, name: str) -> Optional[PlaceholderType]:
        return self._functions.get(name)

    def copy(self) -> "FunctionRegistry":
        return FunctionRegistry(self._functions)

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __iter__(self) -> Iterator[str]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def list_functions(self) -> List[str]:
        """List all registered function names."""
        return list(self._functions.keys())


__all__ = [
    "BUILTIN_FUNCTIONS",
    "INCLUDE_FUNCTION",
    "FunctionRegistry",
    "PlaceholderType",
    "placeholder",
]
