"""Document metadata (``metadata.json``) loading and validation.

The metadata file is optional. When present it supplies the version,
organization, date, abstract and reference links rendered around the
compiled document.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from rulebook.core.models import DiagnosticKind, DocumentMetadata

from .errors import RuleSourceError

logger = logging.getLogger(__name__)

_STRING_FIELDS = ("version", "organization", "date", "abstract")


def load_metadata(path: Optional[Path]) -> Optional[DocumentMetadata]:
    """Load document metadata, or None when no file exists.

    Args:
        path: Path to metadata.json (None disables metadata).

    Returns:
        DocumentMetadata, or None if path is None or missing.

    Raises:
        RuleSourceError: ManifestError if the file is unreadable or invalid.
    """
    if path is None or not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise RuleSourceError(DiagnosticKind.MANIFEST, f"Cannot read metadata {path.name}: {e}") from e

    metadata = metadata_from_dict(data)
    logger.debug(f"Loaded document metadata from {path}")
    return metadata


def metadata_from_dict(data: Any) -> DocumentMetadata:
    """Validate decoded metadata JSON.

    Unknown keys are ignored; known keys must have the right types.
    """
    if not isinstance(data, dict):
        raise RuleSourceError(DiagnosticKind.MANIFEST, "Metadata must be a JSON object")

    values = {}
    for name in _STRING_FIELDS:
        value = data.get(name)
        if value is not None and not isinstance(value, (str, int, float)):
            raise RuleSourceError(DiagnosticKind.MANIFEST, f"Metadata field '{name}' must be a string")
        values[name] = str(value).strip() if value is not None and str(value).strip() else None

    references = data.get("references", [])
    if not isinstance(references, list) or not all(isinstance(r, str) for r in references):
        raise RuleSourceError(DiagnosticKind.MANIFEST, "Metadata field 'references' must be a list of strings")

    return DocumentMetadata(
        references=tuple(r.strip() for r in references if r.strip()),
        **values,
    )
