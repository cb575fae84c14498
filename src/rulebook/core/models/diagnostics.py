"""
Module: diagnostics

Purpose:
    The Diagnostic record: one structured validation finding. Diagnostics
    are a tagged collection (kind + payload) rather than exceptions, so
    validation can collect every problem across the corpus while
    generation still refuses to run when any ERROR exists.

Key Classes:
    - Severity: ERROR or WARNING
    - DiagnosticKind: Error taxonomy
    - Diagnostic: Immutable finding

Used By:
    - parsing.errors: RuleSourceError carries a DiagnosticKind
    - validation.diagnostics, validation.validator
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Severity(str, Enum):
    """Diagnostic severity. Only ERROR blocks generation."""
    ERROR = "ERROR"
    WARNING = "WARNING"

    def __str__(self) -> str:
        return self.value


class DiagnosticKind(str, Enum):
    """Error taxonomy."""
    PARSE = "ParseError"                # malformed/missing frontmatter delimiters
    SCHEMA = "SchemaError"              # missing required key, impact outside the enum
    STRUCTURAL = "StructuralError"      # example layout problems inside one rule
    MANIFEST = "ManifestError"          # prefix not in manifest, bad manifest
    CONSISTENCY = "ConsistencyError"    # duplicate ids, incorrect/correct count mismatch

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """
    One validation finding.

    Attributes:
        severity: ERROR or WARNING
        source_file_id: Rule id, category id or manifest/metadata file name
        kind: Taxonomy entry
        message: Human readable description
        line: Optional 1-based line number within the source file
    """

    severity: Severity
    source_file_id: str
    kind: DiagnosticKind
    message: str
    line: Optional[int] = None

    @classmethod
    def error(cls, kind: DiagnosticKind, source_file_id: str, message: str, line: Optional[int] = None) -> Diagnostic:
        return cls(Severity.ERROR, source_file_id, kind, message, line)

    @classmethod
    def warning(cls, kind: DiagnosticKind, source_file_id: str, message: str, line: Optional[int] = None) -> Diagnostic:
        return cls(Severity.WARNING, source_file_id, kind, message, line)

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def format(self) -> str:
        """Single-line form printed by the CLI."""
        location = self.source_file_id if self.line is None else f"{self.source_file_id}:{self.line}"
        return f"{self.severity.value:<7} {self.kind.value:<16} {location}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "severity": self.severity.value,
            "source": self.source_file_id,
            "kind": self.kind.value,
            "message": self.message,
        }
        if self.line is not None:
            d["line"] = self.line
        return d
