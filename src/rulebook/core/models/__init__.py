"""
Core Models Package

Immutable, validated records shared by every pipeline stage.

All models in this package are frozen dataclasses. A parsed corpus can be
handed to worker threads, sorted, and compared without defensive copies,
and two parses of the same file compare equal.
"""

from .rules import BlockKind, ExampleBlock, Impact, RuleFile, RuleHeader, category_prefix_of
from .categories import Category, CategoryManifest
from .fixtures import TestFixture
from .diagnostics import Diagnostic, DiagnosticKind, Severity
from .document import CompiledDocument, CompiledSection, DocumentMetadata

__all__ = [
    "BlockKind",
    "Category",
    "CategoryManifest",
    "CompiledDocument",
    "CompiledSection",
    "Diagnostic",
    "DiagnosticKind",
    "DocumentMetadata",
    "ExampleBlock",
    "Impact",
    "RuleFile",
    "RuleHeader",
    "Severity",
    "TestFixture",
    "category_prefix_of",
]
