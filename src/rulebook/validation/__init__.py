"""Corpus validation: structural and consistency checks producing diagnostics."""

from .diagnostics import DiagnosticsCollector, DiagnosticsReport, has_errors
from .validator import validate

__all__ = [
    "DiagnosticsCollector",
    "DiagnosticsReport",
    "has_errors",
    "validate",
]
