"""
Tests for compiler.extractor

Test Coverage:
- extract_fixtures(): positional pairing, example-only rules, ordering
- Failure modes: count mismatch, unknown prefix
- write_fixtures(): schema-valid JSON output
"""

import json
from pathlib import Path

import pytest

from rulebook.compiler import ExtractionError, extract_fixtures, write_fixtures
from rulebook.core.models import Impact
from rulebook.core.utils import load_fixtures
from rulebook.parsing import parse_manifest, parse_rule_text

from conftest import MANIFEST_TEXT, example_body, rule_text


@pytest.fixture
def manifest():
    return parse_manifest(MANIFEST_TEXT)


def _rule(name: str, body=None, **kwargs):
    return parse_rule_text(rule_text(body=body, **kwargs), Path("rules") / name)


class TestExtractFixtures:
    """Tests for fixture extraction."""

    def test_extract_when_two_pairs_then_positional_fixtures(self, manifest):
        """The i-th incorrect block pairs with the i-th correct block."""
        rule = _rule("async-two.md", body=example_body(2, 2), impact="HIGH")

        fixtures = extract_fixtures([rule], manifest)

        assert [(f.incorrect_code, f.correct_code, f.pair_index) for f in fixtures] == [
            ("bad1()", "good1()", 0),
            ("bad2()", "good2()", 1),
        ]
        assert fixtures[0].rule_id == "async-two"
        assert fixtures[0].category_id == "async"
        assert fixtures[0].impact is Impact.HIGH
        assert fixtures[0].language == "js"

    def test_extract_when_example_only_then_no_fixtures(self, manifest):
        """Example-only rules contribute no fixtures."""
        assert extract_fixtures([_rule("async-show.md", body=example_body(0, 1))], manifest) == []

    def test_extract_when_incorrect_untagged_then_correct_language_used(self, manifest):
        """Language falls back to the correct block's fence tag."""
        body = "**Incorrect:**\n\n```\nbad()\n```\n\n**Correct:**\n\n```tsx\ngood()\n```\n"

        fixture = extract_fixtures([_rule("async-lang.md", body=body)], manifest)[0]

        assert fixture.language == "tsx"

    def test_extract_when_no_tags_then_language_none(self, manifest):
        """Untagged fences give a null language."""
        body = "**Incorrect:**\n\n```\nbad()\n```\n\n**Correct:**\n\n```\ngood()\n```\n"

        assert extract_fixtures([_rule("async-plain.md", body=body)], manifest)[0].language is None

    def test_extract_when_rules_unordered_then_document_order(self, manifest):
        """Fixtures follow category order, then filename order."""
        rules = [
            _rule("bundle-a.md"),
            _rule("async-z.md"),
            _rule("async-b.md"),
        ]

        fixtures = extract_fixtures(rules, manifest)

        assert [f.rule_id for f in fixtures] == ["async-b", "async-z", "bundle-a"]

    def test_extract_when_counts_differ_then_raises(self, manifest):
        """Unequal incorrect/correct counts cannot be paired."""
        with pytest.raises(ExtractionError, match="1 incorrect and 2 correct"):
            extract_fixtures([_rule("async-odd.md", body=example_body(1, 2))], manifest)

    def test_extract_when_prefix_unknown_then_raises(self, manifest):
        """Rules outside the manifest cannot be ordered."""
        with pytest.raises(ExtractionError, match="'orphan'"):
            extract_fixtures([_rule("orphan-x.md")], manifest)


def test_write_fixtures_when_written_then_loadable_camel_case_json(tmp_path, manifest):
    """Written corpus uses camelCase keys and loads back."""
    fixtures = extract_fixtures([_rule("async-two.md", body=example_body(2, 2))], manifest)
    path = tmp_path / "test-cases.json"

    write_fixtures(fixtures, path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert [d["pairIndex"] for d in data] == [0, 1]
    assert set(data[0]) == {
        "ruleId", "ruleTitle", "categoryId", "impact", "language",
        "incorrectCode", "correctCode", "pairIndex",
    }
    assert load_fixtures(path) == fixtures
