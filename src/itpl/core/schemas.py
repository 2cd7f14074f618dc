"""Schema validation for itpl configuration.

Configuration payloads are validated with JSON Schema (Draft 2020-12).
Schemas are stored as YAML files under ``itpl/data/schemas/``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping

from jsonschema import Draft202012Validator

from itpl.core.exceptions import ConfigError
from itpl.core.utils.io import read_yaml
from itpl.data import get_data_path


def load_schema(schema_name: str) -> Dict[str, Any]:
    """Load a bundled schema.

    Automatically appends ``.yaml`` if no extension is present.

    Raises:
        FileNotFoundError: If the schema file doesn't exist.
        ValueError: If the schema is not a YAML mapping.
    """
    if not schema_name.lower().endswith((".yaml", ".yml")):
        schema_name = f"{schema_name}.yaml"
    schema = read_yaml(get_data_path("schemas", schema_name), default=None, raise_on_error=True)
    if not isinstance(schema, dict):
        raise ValueError(f"Schema must be a YAML mapping, got {type(schema).__name__}")
    return schema


def validate_payload_safe(payload: Mapping[str, Any], schema_name: str) -> List[str]:
    """Validate ``payload`` and return readable error messages (empty if valid)."""
    validator = Draft202012Validator(load_schema(schema_name))
    errors: List[str] = []
    for error in sorted(validator.iter_errors(dict(payload)), key=lambda e: str(list(e.path))):
        if error.path:
            path_str = ".".join(str(p) for p in error.path)
            errors.append(f"{path_str}: {error.message}")
        else:
            errors.append(error.message)
    return errors


def validate_payload(payload: Mapping[str, Any], schema_name: str) -> None:
    """Validate ``payload`` against a bundled schema.

    Raises:
        ConfigError: Listing every violation.
    """
    errors = validate_payload_safe(payload, schema_name)
    if errors:
        raise ConfigError(
            f"Invalid itpl config: {'; '.join(errors)}",
            context={"schema": schema_name, "errors": errors},
        )


__all__ = ["load_schema", "validate_payload", "validate_payload_safe"]
