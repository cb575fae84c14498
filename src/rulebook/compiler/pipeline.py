"""
Module: compiler.pipeline

Purpose:
    Orchestrates one compiler run. Every command follows the same shape:

    1. Load the manifest (once per run), parse every rule file in parallel,
       load the optional metadata
    2. Validate, collecting every diagnostic (fail-slow)
    3. If no ERROR was recorded, generate the requested artifacts
       (fail-fast: one ERROR anywhere means nothing is written)

    Content problems never raise here; they come back as diagnostics on
    the result. Only programming-level faults (AssemblyError,
    ExtractionError, FixtureSchemaError) and write failures propagate.

Key Functions:
    - validate_corpus(): Diagnostics only
    - build(): Compiled document plus fixture corpus
    - extract_tests(): Fixture corpus only

Key Classes:
    - CompileResult: Diagnostics, counts and written paths for a run

Used By:
    - cli: build / validate / extract-tests commands
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from rulebook.core.models import (
    CategoryManifest,
    Diagnostic,
    DocumentMetadata,
    RuleFile,
)
from rulebook.parsing import RuleSourceError, load_manifest, load_metadata, load_rules
from rulebook.validation import DiagnosticsReport, has_errors, validate

from .assembler import assemble, write_document
from .config import CompilerConfig
from .extractor import extract_fixtures, write_fixtures
from .timing import TimingLog, timed_phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompileResult:
    """
    Result of one compiler run (immutable).

    Attributes:
        diagnostics: Every diagnostic, parse failures first
        file_count: Rule files discovered
        rule_count: Rule files parsed successfully
        document_path: Compiled document written, if any
        fixtures_path: Fixture corpus written, if any
        fixture_count: Fixtures written
        timings: Phase durations in seconds

    Example:
        >>> result = build(CompilerConfig.for_rules_dir(Path("rules")))
        >>> result.passed, result.document_path
        (True, PosixPath('AGENTS.md'))
    """
    diagnostics: Tuple[Diagnostic, ...]
    file_count: int
    rule_count: int
    document_path: Optional[Path] = None
    fixtures_path: Optional[Path] = None
    fixture_count: int = 0
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return not has_errors(self.diagnostics)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def report(self) -> DiagnosticsReport:
        return DiagnosticsReport.from_diagnostics(list(self.diagnostics), self.timings)


@dataclass
class _Corpus:
    rules: Tuple[RuleFile, ...]
    manifest: Optional[CategoryManifest]
    metadata: Optional[DocumentMetadata]
    diagnostics: List[Diagnostic]
    file_count: int


def validate_corpus(config: CompilerConfig) -> CompileResult:
    """
    Parse and validate the corpus without writing artifacts.

    A diagnostics report is written when config.report_path is set.

    Raises:
        FileNotFoundError: If the rules directory does not exist
    """
    timing = TimingLog()
    corpus = _analyze(config, timing, with_metadata=True)
    return _finish(config, corpus, timing)


def build(config: CompilerConfig) -> CompileResult:
    """
    Validate, then write the compiled document and (unless
    config.fixtures_path is None) the fixture corpus.

    Raises:
        FileNotFoundError: If the rules directory does not exist
        AssemblyError / ExtractionError: If a corpus that passed
            validation still cannot be generated
        OSError: If an output cannot be written
    """
    timing = TimingLog()
    corpus = _analyze(config, timing, with_metadata=True)
    if has_errors(corpus.diagnostics) or corpus.manifest is None:
        logger.warning("Validation failed; no artifacts written")
        return _finish(config, corpus, timing)

    with timed_phase(timing, "assemble"):
        document = assemble(
            corpus.rules,
            corpus.manifest,
            metadata=corpus.metadata,
            title=config.document_title,
        )
        document_path = write_document(document, config.output_path)

    fixtures_path = None
    fixture_count = 0
    if config.fixtures_path is not None:
        fixtures_path, fixture_count = _write_fixtures(corpus, config.fixtures_path, timing)

    return _finish(
        config,
        corpus,
        timing,
        document_path=document_path,
        fixtures_path=fixtures_path,
        fixture_count=fixture_count,
    )


def extract_tests(config: CompilerConfig) -> CompileResult:
    """
    Validate, then write only the fixture corpus.

    Raises:
        ValueError: If config.fixtures_path is None
        FileNotFoundError: If the rules directory does not exist
    """
    if config.fixtures_path is None:
        raise ValueError("extract_tests needs a fixtures_path")

    timing = TimingLog()
    corpus = _analyze(config, timing, with_metadata=False)
    if has_errors(corpus.diagnostics) or corpus.manifest is None:
        logger.warning("Validation failed; no fixtures written")
        return _finish(config, corpus, timing)

    fixtures_path, fixture_count = _write_fixtures(corpus, config.fixtures_path, timing)
    return _finish(config, corpus, timing, fixtures_path=fixtures_path, fixture_count=fixture_count)


# ─────────────────────────────────────────────────────────────────────────────
# Stages
# ─────────────────────────────────────────────────────────────────────────────

def _analyze(config: CompilerConfig, timing: TimingLog, *, with_metadata: bool) -> _Corpus:
    """Load and validate; setup failures become diagnostics."""
    failures: List[Diagnostic] = []
    manifest: Optional[CategoryManifest] = None
    metadata: Optional[DocumentMetadata] = None

    with timed_phase(timing, "parse"):
        try:
            manifest = load_manifest(config.manifest_path)
        except RuleSourceError as e:
            logger.error(f"Manifest rejected: {e.message}")
            failures.append(e.to_diagnostic(config.manifest_path.name))

        if with_metadata and config.metadata_path is not None:
            try:
                metadata = load_metadata(config.metadata_path)
            except RuleSourceError as e:
                logger.error(f"Metadata rejected: {e.message}")
                failures.append(e.to_diagnostic(config.metadata_path.name))

        loaded = load_rules(config.rules_dir, max_workers=config.max_workers)

    with timed_phase(timing, "validate"):
        diagnostics = validate(loaded.rules, manifest, failures + list(loaded.failures))

    return _Corpus(
        rules=loaded.rules,
        manifest=manifest,
        metadata=metadata,
        diagnostics=diagnostics,
        file_count=loaded.file_count,
    )


def _write_fixtures(corpus: _Corpus, path: Path, timing: TimingLog) -> Tuple[Path, int]:
    with timed_phase(timing, "extract"):
        fixtures = extract_fixtures(corpus.rules, corpus.manifest)
        write_fixtures(fixtures, path)
    return path, len(fixtures)


def _finish(
    config: CompilerConfig,
    corpus: _Corpus,
    timing: TimingLog,
    **outputs,
) -> CompileResult:
    result = CompileResult(
        diagnostics=tuple(corpus.diagnostics),
        file_count=corpus.file_count,
        rule_count=len(corpus.rules),
        timings=timing.to_dict(),
        **outputs,
    )
    logger.debug(timing.summary())
    if config.report_path is not None:
        result.report().save(config.report_path)
    return result
