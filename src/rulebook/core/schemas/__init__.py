"""
Schemas Package

JSON schema definitions and validation utilities.
"""

from .validator import (
    FIXTURE_SCHEMA_NAME,
    FixtureSchemaError,
    load_schema,
    validate_fixture_corpus,
)

__all__ = [
    "FIXTURE_SCHEMA_NAME",
    "FixtureSchemaError",
    "load_schema",
    "validate_fixture_corpus",
]
