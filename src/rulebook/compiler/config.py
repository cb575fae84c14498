"""
Module: compiler.config

Purpose:
    Configuration dataclass for compiler runs. Immutable configuration
    with validation on construction; CLI flags map onto it 1:1.

Key Classes:
    - CompilerConfig: Paths and options for one run

Used By:
    - compiler.pipeline: validate_corpus / build / extract_tests
    - cli: Built from parsed arguments
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

MANIFEST_FILENAME = "_sections.md"
METADATA_FILENAME = "metadata.json"
DOCUMENT_FILENAME = "AGENTS.md"
FIXTURES_FILENAME = "test-cases.json"
DEFAULT_TITLE = "Rules"


@dataclass(frozen=True)
class CompilerConfig:
    """
    Configuration for compiling a rule corpus (immutable).

    Attributes:
        rules_dir: Directory holding the rule files
        manifest_path: Category manifest
        output_path: Compiled document destination
        fixtures_path: Fixture corpus destination (None skips fixtures)
        metadata_path: Optional document metadata (missing file is fine)
        document_title: Top-level heading of the compiled document
        max_workers: Parser threads (1 parses sequentially)
        report_path: Optional JSON diagnostics report destination

    Example:
        >>> config = CompilerConfig.for_rules_dir(Path("skill/rules"))
        >>> config.output_path
        PosixPath('skill/AGENTS.md')
    """

    rules_dir: Path
    manifest_path: Path
    output_path: Path
    fixtures_path: Optional[Path] = None
    metadata_path: Optional[Path] = None
    document_title: str = DEFAULT_TITLE
    max_workers: int = 4
    report_path: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1: {self.max_workers}")
        if not self.document_title.strip():
            raise ValueError("document_title must not be empty")
        if "\n" in self.document_title:
            raise ValueError(f"document_title must be a single line: {self.document_title!r}")
        if self.fixtures_path is not None and self.fixtures_path == self.output_path:
            raise ValueError(f"fixtures_path and output_path are the same file: {self.output_path}")

    @classmethod
    def for_rules_dir(cls, rules_dir: Path, **overrides: Any) -> "CompilerConfig":
        """
        Build a config with the default layout around rules_dir.

        The manifest lives inside the rules directory; metadata, the
        compiled document and the fixture corpus live next to it. Any
        override given as None keeps the default.
        """
        rules_dir = Path(rules_dir)
        parent = rules_dir.parent
        defaults = {
            "manifest_path": rules_dir / MANIFEST_FILENAME,
            "metadata_path": parent / METADATA_FILENAME,
            "output_path": parent / DOCUMENT_FILENAME,
            "fixtures_path": parent / FIXTURES_FILENAME,
        }
        for key, value in overrides.items():
            if value is not None:
                defaults[key] = value
        return cls(rules_dir=rules_dir, **defaults)

    def without_fixtures(self) -> "CompilerConfig":
        return replace(self, fixtures_path=None)
