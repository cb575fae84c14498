"""
Module: compiler.extractor

Purpose:
    Turn the labeled examples of every rule into test fixtures: the i-th
    incorrect block is paired with the i-th correct block. Example-only
    rules (correct examples, no incorrect ones) contribute nothing.

    Fixture order follows the compiled document: categories in manifest
    order, rules in filename order, pairs in source order.

Key Functions:
    - extract_fixtures(): Build the fixture list
    - write_fixtures(): Validate and write the JSON corpus

Key Classes:
    - ExtractionError: Rule cannot be paired (count mismatch, unknown prefix)

Dependencies:
    - jsonschema (via core.schemas): Corpus validation before writing

Used By:
    - compiler.pipeline: After a clean validation
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from rulebook.core.models import CategoryManifest, RuleFile, TestFixture
from rulebook.core.utils import fixtures_to_json

from .file_locking import locked_write_text

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when a rule's examples cannot be paired into fixtures."""


def extract_fixtures(rules: Sequence[RuleFile], manifest: CategoryManifest) -> List[TestFixture]:
    """
    Extract positional incorrect/correct pairs.

    Args:
        rules: Validated rules, any order
        manifest: Category manifest (defines category order)

    Returns:
        Fixtures in document order

    Raises:
        ExtractionError: On an incorrect/correct count mismatch (outside
            example-only rules) or a prefix missing from the manifest
    """
    position = {category.id: category.order for category in manifest}
    for rule in rules:
        if rule.category_prefix not in position:
            raise ExtractionError(
                f"Rule {rule.filename} has category prefix {rule.category_prefix!r}, "
                "which is not defined in the manifest"
            )

    ordered = sorted(rules, key=lambda r: (position[r.category_prefix], r.sort_key()))
    fixtures: List[TestFixture] = []
    for rule in ordered:
        fixtures.extend(_rule_fixtures(rule))

    logger.info(
        f"Extracted {len(fixtures)} fixtures from {len(ordered)} rules",
        extra={"fixture_count": len(fixtures), "rule_count": len(ordered)},
    )
    return fixtures


def _rule_fixtures(rule: RuleFile) -> List[TestFixture]:
    if rule.is_example_only:
        logger.debug(f"{rule.filename}: example-only, no fixtures")
        return []

    incorrect = rule.incorrect_examples
    correct = rule.correct_examples
    if len(incorrect) != len(correct):
        raise ExtractionError(
            f"Rule {rule.filename} has {len(incorrect)} incorrect and "
            f"{len(correct)} correct examples; pairs are positional"
        )

    return [
        TestFixture(
            rule_id=rule.id,
            rule_title=rule.title,
            category_id=rule.category_prefix,
            impact=rule.impact,
            language=bad.language or good.language,
            incorrect_code=bad.content,
            correct_code=good.content,
            pair_index=index,
        )
        for index, (bad, good) in enumerate(zip(incorrect, correct))
    ]


def write_fixtures(fixtures: Sequence[TestFixture], path: Path) -> Path:
    """
    Write the fixture corpus as JSON (exclusive lock).

    Raises:
        FixtureSchemaError: If a record does not match the fixture schema
    """
    text = fixtures_to_json(fixtures)
    locked_write_text(path, text)
    logger.info(f"Wrote {len(fixtures)} fixtures: {path}")
    return path
