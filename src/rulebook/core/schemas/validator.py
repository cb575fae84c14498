"""
Schema Validation Utilities

Validates the serialized fixture corpus against the bundled JSON schema
before it is written and after it is read back.

The schema file ships inside this package (``test_fixture.schema.json``)
and is loaded per call; nothing is cached at module level.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


FIXTURE_SCHEMA_NAME = "test_fixture"


class FixtureSchemaError(Exception):
    """Raised when fixture data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def load_schema(name: str = FIXTURE_SCHEMA_NAME) -> dict:
    """Load a schema from the schemas directory."""
    schema_path = Path(__file__).parent / f"{name}.schema.json"
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_path}")
    with open(schema_path, "r", encoding="utf-8") as f:
        return json.load(f)


def validate_fixture_corpus(data: Any) -> None:
    """
    Validate a serialized fixture corpus (list of fixture dicts).

    Every violation is collected, not just the first, so a broken corpus
    reports all of its bad records at once.

    Args:
        data: Decoded JSON value

    Raises:
        FixtureSchemaError: If data does not match the schema
    """
    schema = load_schema()
    validator = jsonschema.Draft202012Validator(schema)
    errors = list(validator.iter_errors(data))
    if errors:
        first = errors[0]
        raise FixtureSchemaError(
            f"Fixture corpus failed schema validation: {first.message}",
            path=".".join(str(p) for p in first.absolute_path),
            errors=[e.message for e in errors],
        )
