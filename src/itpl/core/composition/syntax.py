"""Syntax adapter: parse templates whose functions are unknown.

Two strategies, chosen per :class:`SyntaxAdapter`:

- Iterative discovery (default): start from the builtins plus ``include``.
  When the parser reports an undefined function, register that name as a
  placeholder and parse again, up to ``max_retries`` attempts.
- Explicit registration: the caller lists the function names up front. One
  attempt; an unknown name is a syntax error.

Placeholders are never invoked. Syntax errors that are not about unknown
functions surface on the first attempt.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from itpl.core.exceptions import UndefinedFunctionError, UnresolvableFunctionError
from itpl.core.template import FunctionRegistry, Tree, parse

logger = logging.getLogger(__name__)

DEFAULT_MAX_FUNCTION_RETRIES = 100


@dataclass(frozen=True)
class ParseResult:
    trees: Dict[str, Tree]
    discovered: Tuple[str, ...] = ()


class SyntaxAdapter:
    """Parse template text without ever executing a function."""

    def __init__(
        self,
        functions: Optional[Iterable[str]] = None,
        *,
        max_retries: int = DEFAULT_MAX_FUNCTION_RETRIES,
    ) -> None:
        """Initialize the adapter.

        Args:
            functions: Explicit function names. ``None`` enables iterative
                discovery.
            max_retries: Maximum parse attempts during discovery.
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.explicit = functions is not None
        self.max_retries = max_retries
        self._registry = FunctionRegistry.with_defaults(functions)

    @property
    def function_names(self) -> List[str]:
        return self._registry.list_functions()

    def parse(self, text: str, *, source: str = "") -> ParseResult:
        """Parse ``text`` into trees keyed by template name.

        Args:
            text: Template source.
            source: File the text came from (used in error messages).

        Raises:
            TemplateSyntaxError: Malformed template (including an unknown
                function under explicit registration).
            UnresolvableFunctionError: Discovery hit its retry ceiling.
        """
        if self.explicit:
            return ParseResult(trees=parse(text, parse_name=source, functions=self._registry))

        registry = self._registry.copy()
        discovered = []
        for attempt in range(1, self.max_retries + 1):
            try:
                trees = parse(text, parse_name=source, functions=registry)
            except UndefinedFunctionError as exc:
                if attempt >= self.max_retries:
                    raise UnresolvableFunctionError(source, attempt, last_function=exc.function) from exc
                logger.debug("Registering placeholder function %r for %s", exc.function, source)
                registry.add(exc.function)
                discovered.append(exc.function)
                continue
            return ParseResult(trees=trees, discovered=tuple(discovered))
        # Unreachable: the loop either returns or raises.
        raise UnresolvableFunctionError(source, self.max_retries)


__all__ = ["DEFAULT_MAX_FUNCTION_RETRIES", "ParseResult", "SyntaxAdapter"]
