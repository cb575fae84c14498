"""
Module: compiler

Purpose:
    Generation side of the rulebook: document assembly, fixture
    extraction, and the pipeline that gates both on a clean validation.

Key Functions:
    - build(): Validate, then write document and fixtures
    - validate_corpus(): Diagnostics only
    - extract_tests(): Validate, then write fixtures only
"""

from .assembler import AssemblyError, assemble, slugify, write_document
from .config import CompilerConfig
from .extractor import ExtractionError, extract_fixtures, write_fixtures
from .pipeline import CompileResult, build, extract_tests, validate_corpus
from .timing import TimingLog, timed_phase

__all__ = [
    "AssemblyError",
    "CompileResult",
    "CompilerConfig",
    "ExtractionError",
    "TimingLog",
    "assemble",
    "build",
    "extract_fixtures",
    "extract_tests",
    "slugify",
    "timed_phase",
    "validate_corpus",
    "write_document",
    "write_fixtures",
]
