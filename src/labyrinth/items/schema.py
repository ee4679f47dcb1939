import json
import logging
from functools import lru_cache
from importlib import resources
from typing import Any, Dict, Type

from jsonschema import Draft202012Validator

from ..exceptions import CatalogError, ConfigError, LabyrinthError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _load_schema(name: str) -> Dict[str, Any]:
    """
    Load a JSON schema bundled under labyrinth/data/schemas.

    Cached since the schemas are static.
    """
    resource = resources.files("labyrinth.data").joinpath("schemas").joinpath(f"{name}.schema.json")
    try:
        with resource.open("r", encoding="utf-8") as f:
            logger.debug("Loading %s schema", name)
            return json.load(f)
    except FileNotFoundError as exc:
        raise CatalogError(f"Schema file not found: schemas/{name}.schema.json") from exc


def _validate(schema_name: str, data: Dict[str, Any], error_cls: Type[LabyrinthError] = CatalogError) -> None:
    validator = Draft202012Validator(_load_schema(schema_name))
    errors = sorted(validator.iter_errors(data), key=lambda e: list(e.path))
    if errors:
        # Log all errors, then raise with the first for a clear message
        for err in errors:
            logger.error("%s schema validation error at %s: %s", schema_name, list(err.path), err.message)
        first = errors[0]
        label = data.get("name") if isinstance(data, dict) else None
        if not label:
            label = "/".join(str(p) for p in first.path) or "<invalid>"
        raise error_cls(f"Invalid {schema_name} '{label}': {first.message}") from first


def validate_item_dict(data: Dict[str, Any]) -> None:
    """
    Validate a single item template against the item JSON schema.

    Raises:
        CatalogError if the data is invalid.
    """
    _validate("item", data)


def validate_enemy_dict(data: Dict[str, Any]) -> None:
    """Validate a single enemy archetype against the enemy JSON schema."""
    _validate("enemy", data)


def validate_config_dict(data: Dict[str, Any]) -> None:
    """Check value types and bounds of a session config; raises ConfigError."""
    _validate("config", data, ConfigError)


__all__ = [
    "validate_config_dict",
    "validate_enemy_dict",
    "validate_item_dict",
]
