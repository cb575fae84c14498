"""Core utilities (serialization)."""

from .serialization import (
    deserialize_fixtures,
    fixtures_to_json,
    load_fixtures,
    serialize_fixtures,
)

__all__ = [
    "deserialize_fixtures",
    "fixtures_to_json",
    "load_fixtures",
    "serialize_fixtures",
]
