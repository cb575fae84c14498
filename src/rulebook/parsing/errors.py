"""
Module: parsing.errors

Purpose:
    The single exception raised at the parse boundary. It carries the
    diagnostic kind so the loader can turn any parse fault into a
    Diagnostic without a per-kind exception hierarchy.
"""

from __future__ import annotations

from typing import Optional

from rulebook.core.models.diagnostics import Diagnostic, DiagnosticKind


class RuleSourceError(Exception):
    """Raised when a rule, manifest or metadata file cannot be parsed."""

    def __init__(self, kind: DiagnosticKind, message: str, line: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.line = line

    def to_diagnostic(self, source_file_id: str) -> Diagnostic:
        """Convert to an ERROR diagnostic attributed to source_file_id."""
        return Diagnostic.error(self.kind, source_file_id, self.message, self.line)
