"""Stdlib logging setup for the itpl CLI.

Library modules only call ``logging.getLogger(__name__)``; handlers are
installed here, by the CLI, and nowhere else.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO, Union

_ITPL_STREAM_HANDLER: Optional[logging.Handler] = None
_JSON_MODE_NULL_HANDLER_INSTALLED: bool = False

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _level_from_name(name: Union[str, int]) -> int:
    if isinstance(name, int):
        return name
    try:
        return int(getattr(logging, name.upper()))
    except (AttributeError, TypeError, ValueError):
        return logging.WARNING


def configure_logging(level: Union[str, int] = "WARNING", *, stream: Optional[TextIO] = None) -> None:
    """Send ``itpl`` log records at ``level`` and above to stderr.

    Idempotent: calling again replaces the handler installed by the previous call.
    """
    global _ITPL_STREAM_HANDLER

    logger = logging.getLogger("itpl")
    if _ITPL_STREAM_HANDLER is not None:
        logger.removeHandler(_ITPL_STREAM_HANDLER)
        _ITPL_STREAM_HANDLER.close()
        _ITPL_STREAM_HANDLER = None

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_level_from_name(level))
    _ITPL_STREAM_HANDLER = handler


def suppress_lastresort_in_json_mode() -> None:
    """Keep logging's implicit ``lastResort`` handler off stderr in ``--json`` mode.

    Installs a NullHandler on the root logger when it has no handlers.
    """
    global _JSON_MODE_NULL_HANDLER_INSTALLED

    root = logging.getLogger()
    if root.handlers or _JSON_MODE_NULL_HANDLER_INSTALLED:
        return
    root.addHandler(logging.NullHandler())
    _JSON_MODE_NULL_HANDLER_INSTALLED = True


def reset_logging_for_tests() -> None:
    """Test-only: remove handlers installed by this module."""
    global _ITPL_STREAM_HANDLER, _JSON_MODE_NULL_HANDLER_INSTALLED

    logger = logging.getLogger("itpl")
    if _ITPL_STREAM_HANDLER is not None:
        logger.removeHandler(_ITPL_STREAM_HANDLER)
        _ITPL_STREAM_HANDLER.close()
    logger.setLevel(logging.NOTSET)
    root = logging.getLogger()
    for h in list(root.handlers):
        if isinstance(h, logging.NullHandler):
            root.removeHandler(h)
    _ITPL_STREAM_HANDLER = None
    _JSON_MODE_NULL_HANDLER_INSTALLED = False


__all__ = ["configure_logging", "suppress_lastresort_in_json_mode", "reset_logging_for_tests"]
