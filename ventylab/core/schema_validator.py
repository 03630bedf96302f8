"""
Schema Validator - Fail fast if the lesson schema is broken.

Philosophy:
- Validation should NOT start if the schema cannot be read or compiled
- No silent fallbacks - explicit failures only
- Every violation is reported, not just the first one
"""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from loguru import logger

from ventylab.content.errors import SchemaLoadError

DEFAULT_SCHEMA_RESOURCE = "lesson.schema.json"


def _location(error) -> str:
    """JSON Pointer to the failing instance, ``root`` for the document itself."""
    parts = [str(part) for part in error.absolute_path]
    return "/" + "/".join(parts) if parts else "root"


class LessonSchemaValidator:
    """Validates lesson documents against a Draft 7 JSON Schema."""

    def __init__(self, schema: dict[str, Any], origin: str = "<inline>"):
        try:
            Draft7Validator.check_schema(schema)
        except SchemaError as e:
            raise SchemaLoadError(f"Failed to compile schema {origin}: {e.message}") from e
        self.schema = schema
        self.origin = origin
        self._validator = Draft7Validator(schema)

    @classmethod
    def from_file(cls, path: Path | str) -> LessonSchemaValidator:
        """
        Load a schema file.

        Raises:
            SchemaLoadError: If the file is missing, not JSON, or not a valid schema
        """
        path = Path(path)
        try:
            schema = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError as e:
            raise SchemaLoadError(f"Schema file not found: {path}") from e
        except (OSError, json.JSONDecodeError) as e:
            raise SchemaLoadError(f"Schema file invalid: {path}: {e}") from e
        if not isinstance(schema, dict):
            raise SchemaLoadError(f"Schema file invalid: {path}: top level must be an object")
        logger.debug(f"Loaded lesson schema from {path}")
        return cls(schema, origin=str(path))

    @classmethod
    def bundled(cls) -> LessonSchemaValidator:
        """The lesson schema shipped with the package."""
        resource = resources.files("ventylab.content").joinpath("schemas").joinpath(DEFAULT_SCHEMA_RESOURCE)
        with resources.as_file(resource) as path:
            return cls.from_file(path)

    def validate(self, document: Any) -> list[str]:
        """
        Validate a document.

        Returns:
            One message per violation, ordered by location; empty when valid
        """
        errors = sorted(self._validator.iter_errors(document), key=lambda err: list(map(str, err.absolute_path)))
        return [f"Schema validation error at {_location(error)}: {error.message}" for error in errors]

    def is_valid(self, document: Any) -> bool:
        return self._validator.is_valid(document)


@lru_cache(maxsize=8)
def get_validator(schema_path: str | None = None) -> LessonSchemaValidator:
    """Get a validator for schema_path (the bundled schema when None), cached per path."""
    if schema_path is None:
        return LessonSchemaValidator.bundled()
    return LessonSchemaValidator.from_file(schema_path)
