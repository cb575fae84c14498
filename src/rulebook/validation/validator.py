"""
Module: validation.validator

Purpose:
    Structural and corpus-wide validation of parsed rules. Validation
    never raises: every problem becomes a Diagnostic and the full list is
    returned, including the parse failures handed in by the loader.

    Per-file checks (each rule, filename order):
    1. At least one incorrect/correct example block
    2. No unclosed code fence, no example label without code,
       no empty example block
    3. A Reference: line (WARNING when absent)
    4. Category prefix defined in the manifest
    5. Positional pairing sanity (WARNING when the i-th correct example
       comes before the i-th incorrect one)

    Corpus-wide checks:
    1. Rule ids unique
    2. Incorrect/correct counts equal unless the rule is example-only
    3. Every manifest category has at least one rule (WARNING)

Key Functions:
    - validate(): Run every check and return diagnostics

Used By:
    - compiler.pipeline: Gate before document assembly and extraction
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence

from rulebook.core.models import (
    CategoryManifest,
    Diagnostic,
    DiagnosticKind,
    RuleFile,
)
from rulebook.parsing.sections import scan_structure

from .diagnostics import DiagnosticsCollector

logger = logging.getLogger(__name__)


def validate(
    rules: Sequence[RuleFile],
    manifest: Optional[CategoryManifest],
    failures: Iterable[Diagnostic] = (),
) -> List[Diagnostic]:
    """
    Validate a parsed corpus.

    Args:
        rules: Parsed rules (any order; checked in filename order)
        manifest: Category manifest, or None if it failed to load
            (manifest-dependent checks are then skipped)
        failures: Diagnostics for files that failed to parse

    Returns:
        All diagnostics: parse failures, then per-file, then corpus-wide
    """
    collector = DiagnosticsCollector(failures)
    ordered = sorted(rules, key=RuleFile.sort_key)

    for rule in ordered:
        _check_rule(rule, manifest, collector)

    _check_duplicate_ids(ordered, collector)
    _check_pair_counts(ordered, collector)
    if manifest is not None:
        _check_empty_categories(ordered, manifest, collector)

    logger.info(
        f"Validated {len(ordered)} rules: {collector.error_count} errors",
        extra={"rule_count": len(ordered), "error_count": collector.error_count},
    )
    return collector.diagnostics


# ─────────────────────────────────────────────────────────────────────────────
# Per-file checks
# ─────────────────────────────────────────────────────────────────────────────

def _check_rule(rule: RuleFile, manifest: Optional[CategoryManifest], collector: DiagnosticsCollector) -> None:
    source = rule.filename
    incorrect = rule.incorrect_examples
    correct = rule.correct_examples

    if not incorrect and not correct:
        collector.error(
            DiagnosticKind.STRUCTURAL,
            source,
            "Rule has no 'Incorrect'/'Correct' labeled example blocks",
        )

    report = scan_structure(rule.raw_body)
    if report.unclosed_fence_line is not None:
        collector.error(
            DiagnosticKind.STRUCTURAL,
            source,
            "Code fence is never closed",
            line=rule.body_start_line + report.unclosed_fence_line - 1,
        )
    for line, label in report.dangling_labels:
        collector.error(
            DiagnosticKind.STRUCTURAL,
            source,
            f"Example label {label!r} is not followed by a code block",
            line=rule.body_start_line + line - 1,
        )

    for block in incorrect + correct:
        if not block.content.strip():
            collector.error(
                DiagnosticKind.STRUCTURAL,
                source,
                f"Empty {block.kind.value} example block ({block.label or 'unlabeled'})",
            )

    if not rule.references:
        collector.warning(DiagnosticKind.STRUCTURAL, source, "No 'Reference:' link")

    if manifest is not None and rule.category_prefix not in manifest:
        collector.error(
            DiagnosticKind.MANIFEST,
            source,
            f"Category prefix {rule.category_prefix!r} is not defined in the manifest",
        )

    if not rule.is_example_only:
        for index, (bad, good) in enumerate(zip(incorrect, correct)):
            if good.order < bad.order:
                collector.warning(
                    DiagnosticKind.STRUCTURAL,
                    source,
                    f"Correct example {index + 1} precedes incorrect example {index + 1}; "
                    "pairs are matched by position",
                )
                break


# ─────────────────────────────────────────────────────────────────────────────
# Corpus-wide checks
# ─────────────────────────────────────────────────────────────────────────────

def _check_duplicate_ids(rules: Sequence[RuleFile], collector: DiagnosticsCollector) -> None:
    first_seen: Dict[str, RuleFile] = {}
    for rule in rules:
        original = first_seen.get(rule.id)
        if original is None:
            first_seen[rule.id] = rule
            continue
        where = original.source_path.as_posix() if original.source_path else original.filename
        collector.error(
            DiagnosticKind.CONSISTENCY,
            rule.filename,
            f"Duplicate rule id {rule.id!r} (also defined in {where})",
        )


def _check_pair_counts(rules: Sequence[RuleFile], collector: DiagnosticsCollector) -> None:
    for rule in rules:
        incorrect = len(rule.incorrect_examples)
        correct = len(rule.correct_examples)
        if rule.is_example_only or incorrect == correct:
            continue
        collector.error(
            DiagnosticKind.CONSISTENCY,
            rule.filename,
            f"{incorrect} incorrect example(s) but {correct} correct example(s)",
        )


def _check_empty_categories(
    rules: Sequence[RuleFile],
    manifest: CategoryManifest,
    collector: DiagnosticsCollector,
) -> None:
    prefixes = {rule.category_prefix for rule in rules}
    for category in manifest:
        if category.id not in prefixes:
            collector.warning(
                DiagnosticKind.MANIFEST,
                category.id,
                f"Category {category.title!r} has no rules",
            )

