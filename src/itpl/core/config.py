"""Loader configuration.

Configuration sources, lowest to highest priority:
1. Built-in defaults
2. YAML file: explicit path, else ``itpl.yaml`` / ``itpl.yml`` in the working directory
3. Environment variables: ``ITPL_FUNCTIONS`` (comma-separated),
   ``ITPL_MAX_FUNCTION_RETRIES``, ``ITPL_ENCODING``, ``ITPL_ROOT``

Example ``itpl.yaml``::

    functions: [upper, lower, default]
    maxFunctionRetries: 50
    encoding: utf-8
    root: templates
"""
from __future__ import annotations

import codecs
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from itpl.core.composition.syntax import DEFAULT_MAX_FUNCTION_RETRIES
from itpl.core.exceptions import ConfigError
from itpl.core.schemas import validate_payload
from itpl.core.utils.io import read_yaml

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("itpl.yaml", "itpl.yml")
ENV_PREFIX = "ITPL_"


@dataclass(frozen=True)
class LoaderConfig:
    """Settings for :class:`~itpl.core.composition.loader.Loader`."""

    functions: Optional[Tuple[str, ...]] = None
    max_function_retries: int = DEFAULT_MAX_FUNCTION_RETRIES
    encoding: str = "utf-8"
    root: Optional[Path] = None
    source: Optional[Path] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, base_dir: Optional[Path] = None) -> "LoaderConfig":
        """Build a config from parsed YAML, validating every value.

        Args:
            data: Mapping with ``functions``, ``maxFunctionRetries``, ``encoding``, ``root``
            base_dir: Directory relative ``root`` values are resolved against

        Raises:
            ConfigError: On unknown keys or invalid values.
        """
        if not isinstance(data, Mapping):
            raise ConfigError("itpl config must be a mapping", context={"type": type(data).__name__})

        validate_payload(data, "config.schema")

        cfg = cls()
        if data.get("functions") is not None:
            cfg = replace(cfg, functions=_as_functions(data["functions"]))
        if data.get("maxFunctionRetries") is not None:
            cfg = replace(cfg, max_function_retries=_as_retries(data["maxFunctionRetries"]))
        if data.get("encoding") is not None:
            cfg = replace(cfg, encoding=_as_encoding(data["encoding"]))
        if data.get("root") is not None:
            cfg = replace(cfg, root=_as_root(data["root"], base_dir))
        return cfg

    def with_env(self, environ: Optional[Mapping[str, str]] = None) -> "LoaderConfig":
        """Return a copy with ``ITPL_*`` environment overrides applied."""
        env = os.environ if environ is None else environ
        cfg = self
        if env.get(f"{ENV_PREFIX}FUNCTIONS"):
            cfg = replace(cfg, functions=_as_functions(env[f"{ENV_PREFIX}FUNCTIONS"].split(",")))
        if env.get(f"{ENV_PREFIX}MAX_FUNCTION_RETRIES"):
            cfg = replace(cfg, max_function_retries=_as_retries(env[f"{ENV_PREFIX}MAX_FUNCTION_RETRIES"]))
        if env.get(f"{ENV_PREFIX}ENCODING"):
            cfg = replace(cfg, encoding=_as_encoding(env[f"{ENV_PREFIX}ENCODING"]))
        if env.get(f"{ENV_PREFIX}ROOT"):
            cfg = replace(cfg, root=_as_root(env[f"{ENV_PREFIX}ROOT"], None))
        return cfg

    def to_dict(self) -> Dict[str, Any]:
        return {
            "functions": list(self.functions) if self.functions is not None else None,
            "maxFunctionRetries": self.max_function_retries,
            "encoding": self.encoding,
            "root": str(self.root) if self.root is not None else None,
        }


def _as_functions(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError("functions must be a list of names", context={"value": value})
    names: List[str] = []
    for item in value:
        name = str(item).strip()
        if not name:
            continue
        if not name.replace("_", "a").isalnum() or name[0].isdigit():
            raise ConfigError(f"Invalid function name: {name!r}", context={"value": name})
        names.append(name)
    return tuple(names)


def _as_retries(value: Any) -> int:
    try:
        retries = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"maxFunctionRetries must be an integer, got {value!r}") from None
    if isinstance(value, bool) or retries < 1:
        raise ConfigError(f"maxFunctionRetries must be a positive integer, got {value!r}")
    return retries


def _as_encoding(value: Any) -> str:
    name = str(value).strip()
    try:
        codecs.lookup(name)
    except LookupError:
        raise ConfigError(f"Unknown encoding: {name!r}", context={"value": name}) from None
    return name


def _as_root(value: Any, base_dir: Optional[Path]) -> Path:
    root = Path(str(value)).expanduser()
    if not root.is_absolute() and base_dir is not None:
        root = base_dir / root
    return root


def find_config_file(cwd: Optional[Path] = None) -> Optional[Path]:
    """Return the first ``itpl.yaml``/``itpl.yml`` in ``cwd`` (default: working directory)."""
    base = Path(cwd) if cwd is not None else Path.cwd()
    for name in CONFIG_FILENAMES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: Optional[Union[str, Path]] = None,
    *,
    cwd: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> LoaderConfig:
    """Load configuration from YAML and the environment.

    Args:
        path: Explicit config file; must exist when given.
        cwd: Directory searched for ``itpl.yaml`` when ``path`` is None.
        environ: Environment mapping (default: ``os.environ``).

    Raises:
        ConfigError: Missing explicit file, malformed YAML or invalid values.
    """
    config_path = Path(path) if path is not None else find_config_file(cwd)
    if config_path is None:
        logger.debug("No itpl config file found; using defaults")
        return LoaderConfig().with_env(environ)

    try:
        data = read_yaml(config_path, default={}, raise_on_error=True)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {config_path}", context={"path": str(config_path)}) from None
    except Exception as exc:
        raise ConfigError(f"Cannot parse config file {config_path}: {exc}", context={"path": str(config_path)}) from exc

    logger.debug("Loaded itpl config from %s", config_path)
    cfg = LoaderConfig.from_mapping(data, base_dir=config_path.parent.resolve())
    return replace(cfg, source=config_path).with_env(environ)


__all__ = ["CONFIG_FILENAMES", "LoaderConfig", "find_config_file", "load_config"]
