"""
Serialization Utilities

To/from JSON helpers for the fixture corpus.

- ``serialize_fixtures`` / ``deserialize_fixtures`` convert between
  TestFixture records and plain JSON values
- Both directions validate against the fixture schema
- ``fixtures_to_json`` produces the exact text written to disk: two-space
  indent, keys in record order, trailing newline. No timestamps, so the
  same corpus always serializes to the same bytes.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Sequence

from ..models.fixtures import TestFixture
from ..schemas.validator import validate_fixture_corpus


def serialize_fixtures(fixtures: Sequence[TestFixture], *, validate: bool = True) -> List[dict[str, Any]]:
    """
    Serialize fixtures to a list of dictionaries.

    Args:
        fixtures: Fixtures in corpus order
        validate: Whether to check the result against the schema

    Returns:
        List suitable for JSON serialization

    Raises:
        FixtureSchemaError: If validate=True and a record is invalid
    """
    data = [fixture.to_dict() for fixture in fixtures]
    if validate:
        validate_fixture_corpus(data)
    return data


def deserialize_fixtures(data: Any, *, validate: bool = True) -> List[TestFixture]:
    """
    Deserialize fixtures from a decoded JSON value.

    Raises:
        FixtureSchemaError: If validate=True and data is invalid
    """
    if validate:
        validate_fixture_corpus(data)
    return [TestFixture.from_dict(item) for item in data]


def fixtures_to_json(fixtures: Sequence[TestFixture]) -> str:
    """Render the fixture corpus as deterministic JSON text."""
    return json.dumps(serialize_fixtures(fixtures), indent=2, ensure_ascii=False) + "\n"


def load_fixtures(path: Path) -> List[TestFixture]:
    """
    Read and validate a fixture corpus written by the compiler.

    Args:
        path: Path to the JSON corpus

    Returns:
        Fixtures in file order

    Raises:
        FileNotFoundError: If path does not exist
        FixtureSchemaError: If the content does not match the schema
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return deserialize_fixtures(data)
