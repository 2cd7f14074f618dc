from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from itpl.core.utils.text import go_quote


class ItplError(Exception):
    """Base exception for itpl."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class TemplateNotFoundError(ItplError, FileNotFoundError):
    """Raised when a template file (top-level or included) cannot be read."""

    def __init__(self, path: str, *, reason: str | None = None) -> None:
        message = f"template not found: {path}"
        if reason:
            message = f"{message} ({reason})"
        ItplError.__init__(self, message, context={"path": path})
        FileNotFoundError.__init__(self, message)
        self.path = path


class TemplateSyntaxError(ItplError, ValueError):
    """Raised when template text is not well-formed."""

    def __init__(self, detail: str, *, name: str = "", line: int = 0) -> None:
        message = f"template: {name}:{line}: {detail}"
        ItplError.__init__(self, message, context={"name": name, "line": line})
        ValueError.__init__(self, message)
        self.detail = detail
        self.name = name
        self.line = line


class UndefinedFunctionError(TemplateSyntaxError):
    """Raised by the parser when an action calls a function it does not know."""

    def __init__(self, function: str, *, name: str = "", line: int = 0) -> None:
        super().__init__(f"function {go_quote(function)} not defined", name=name, line=line)
        self.function = function
        self.context["function"] = function


class UnresolvableFunctionError(ItplError):
    """Raised when placeholder discovery exceeds its retry ceiling."""

    def __init__(self, name: str, attempts: int, *, last_function: Optional[str] = None) -> None:
        message = f"template {name!r}: gave up discovering functions after {attempts} attempts"
        if last_function:
            message = f"{message} (last unknown function: {last_function!r})"
        super().__init__(message, context={"name": name, "attempts": attempts, "function": last_function})


class CircularImportError(ItplError):
    """Raised when an include chain revisits a file that is still being resolved."""

    def __init__(self, path: str, chain: Sequence[str] = ()) -> None:
        message = f"circular import detected: {go_quote(path)} is already processed"
        super().__init__(message, context={"path": path, "chain": [*chain, path]})
        self.path = path


class ConfigError(ItplError, ValueError):
    """Raised when an itpl configuration file holds invalid values."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        ItplError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


__all__ = [
    "ItplError",
    "TemplateNotFoundError",
    "TemplateSyntaxError",
    "UndefinedFunctionError",
    "UnresolvableFunctionError",
    "CircularImportError",
    "ConfigError",
]
