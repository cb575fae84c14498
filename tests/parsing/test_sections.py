"""
Tests for parsing.sections

Test Coverage:
- extract_sections(): block order, label classification, fences, references
- scan_structure(): unclosed fences and dangling labels
- classify_label()
"""

import pytest

from rulebook.core.models import BlockKind
from rulebook.parsing import extract_sections, scan_structure
from rulebook.parsing.sections import classify_label


PAIRED = """Intro.

**Incorrect (sequential):**

```ts
a()
```

**Correct:**

```ts
b()
```

Reference: https://example.com/docs
"""


def _kinds(body: str):
    return [block.kind for block in extract_sections(body)]


class TestExtractSections:
    """Tests for block extraction and classification."""

    def test_extract_when_labeled_pair_then_ordered_blocks(self):
        """Blocks come back in source order with sequential order values."""
        blocks = extract_sections(PAIRED)

        assert [b.kind for b in blocks] == [
            BlockKind.PROSE,
            BlockKind.INCORRECT_EXAMPLE,
            BlockKind.PROSE,
            BlockKind.CORRECT_EXAMPLE,
            BlockKind.REFERENCE,
        ]
        assert [b.order for b in blocks] == [0, 1, 2, 3, 4]
        assert blocks[0].content == "Intro.\n\n**Incorrect (sequential):**"

    def test_extract_when_fenced_example_then_code_language_and_label_kept(self):
        """Example blocks keep code, fence language and label."""
        incorrect = extract_sections(PAIRED)[1]

        assert incorrect.content == "a()"
        assert incorrect.language == "ts"
        assert incorrect.label == "Incorrect (sequential)"
        assert incorrect.fenced

    def test_extract_when_heading_label_then_classifies_following_fence(self):
        """Headings work as example labels."""
        assert _kinds("### Incorrect\n\n```py\nx = 1\n```\n") == [
            BlockKind.PROSE,
            BlockKind.INCORRECT_EXAMPLE,
        ]

    def test_extract_when_unlabeled_fence_then_prose(self):
        """Unlabeled code is prose."""
        blocks = extract_sections("Some text.\n\n```bash\nnpm install\n```\n")

        assert blocks[-1].kind is BlockKind.PROSE
        assert blocks[-1].fenced
        assert blocks[-1].language == "bash"

    def test_extract_when_two_fences_after_one_label_then_both_take_label(self):
        """A label stays active until the next label."""
        body = "**Correct:**\n\n```js\na()\n```\n\n```js\nb()\n```\n"

        assert _kinds(body).count(BlockKind.CORRECT_EXAMPLE) == 2

    def test_extract_when_neutral_label_follows_then_fence_is_prose(self):
        """A neutral label ends the active example label."""
        body = "**Incorrect:**\n\n```js\na()\n```\n\n**Notes**\n\n```js\nb()\n```\n"

        kinds = _kinds(body)
        assert kinds.count(BlockKind.INCORRECT_EXAMPLE) == 1
        assert kinds[-1] is BlockKind.PROSE

    def test_extract_when_longer_fence_wraps_shorter_then_one_block(self):
        """A shorter fence inside a longer one does not close it."""
        body = "**Correct:**\n\n````md\n```js\ninner()\n```\n````\n"

        block = extract_sections(body)[-1]
        assert block.kind is BlockKind.CORRECT_EXAMPLE
        assert block.content == "```js\ninner()\n```"
        assert block.language == "md"

    def test_extract_when_tilde_fence_then_recognized(self):
        """Tilde fences are code fences."""
        assert _kinds("**Incorrect:**\n\n~~~\nbad()\n~~~\n")[-1] is BlockKind.INCORRECT_EXAMPLE

    def test_extract_when_indented_fence_then_code_dedented(self):
        """Fence indentation is removed from code lines."""
        body = "**Correct:**\n\n  ```js\n  a()\n    b()\n  ```\n"

        assert extract_sections(body)[-1].content == "a()\n  b()"

    def test_extract_when_backticks_on_one_line_then_not_a_fence(self):
        """Inline triple backticks do not open a fence."""
        blocks = extract_sections("```const a = 1```\n\nMore text.\n")

        assert len(blocks) == 1
        assert blocks[0].kind is BlockKind.PROSE
        assert not blocks[0].fenced

    def test_extract_when_bold_reference_then_reference_block(self):
        """Bold Reference: lines become reference blocks."""
        blocks = extract_sections("**Reference:** [MDN](https://developer.mozilla.org)\n")

        assert len(blocks) == 1
        assert blocks[0].kind is BlockKind.REFERENCE
        assert blocks[0].content == "[MDN](https://developer.mozilla.org)"

    def test_extract_when_bold_lead_in_label_then_classifies_following_fence(self):
        """A bold Correct lead-in followed by prose still labels the next fence."""
        body = (
            "**Incorrect (a):**\n\n```js\nbad()\n```\n\n"
            "**Correct:** use the cached value.\n\n```js\ngood()\n```\n"
        )

        fences = [b for b in extract_sections(body) if b.fenced]

        assert [b.kind for b in fences] == [BlockKind.INCORRECT_EXAMPLE, BlockKind.CORRECT_EXAMPLE]
        assert fences[1].label == "Correct"

    def test_extract_when_bold_phrase_starts_prose_line_then_label_kept(self):
        """Bold emphasis opening an ordinary sentence does not end the active label."""
        body = "**Incorrect:**\n\n**Note** this runs twice.\n\n```js\nbad()\n```\n"

        assert _kinds(body)[-1] is BlockKind.INCORRECT_EXAMPLE

    def test_extract_when_references_list_then_reference_per_item(self):
        """Links listed under a bare References: line become reference blocks."""
        body = PAIRED.replace(
            "Reference: https://example.com/docs\n",
            "References:\n\n- [a](https://a.example)\n- [b](https://b.example)\n\nClosing text.\n",
        )

        blocks = extract_sections(body)

        assert [b.content for b in blocks if b.kind is BlockKind.REFERENCE] == [
            "[a](https://a.example)",
            "[b](https://b.example)",
        ]
        assert blocks[-1].kind is BlockKind.PROSE
        assert blocks[-1].content == "Closing text."

    def test_extract_when_list_not_under_references_then_prose(self):
        """List items elsewhere in the body stay prose."""
        assert BlockKind.REFERENCE not in _kinds("Steps:\n\n- one\n- two\n")

    def test_extract_when_crlf_body_then_code_has_no_carriage_returns(self):
        """CRLF bodies give the same blocks as LF bodies."""
        assert extract_sections(PAIRED.replace("\n", "\r\n")) == extract_sections(PAIRED)

    def test_extract_when_empty_body_then_no_blocks(self):
        assert extract_sections("") == []
        assert extract_sections("\n\n") == []

    def test_extract_when_called_twice_then_equal(self):
        """Extraction is deterministic."""
        assert extract_sections(PAIRED) == extract_sections(PAIRED)


class TestScanStructure:
    """Tests for structural problem detection."""

    def test_scan_when_clean_body_then_no_problems(self):
        """A well-formed body reports nothing."""
        assert scan_structure(PAIRED).is_clean

    def test_scan_when_fence_never_closed_then_reports_opening_line(self):
        """Unclosed fences report the opening line."""
        body = "**Incorrect:**\n\n```js\nbad()\n"

        report = scan_structure(body)

        assert report.unclosed_fence_line == 3
        assert extract_sections(body)[-1].content == "bad()"

    def test_scan_when_label_without_code_then_dangling(self):
        """A label followed by prose only is dangling."""
        body = "**Incorrect:**\n\nNo code here.\n\n**Correct:**\n\n```js\nok()\n```\n"

        assert scan_structure(body).dangling_labels == ((1, "Incorrect"),)

    def test_scan_when_trailing_label_then_dangling(self):
        """A label at the end of the body is dangling."""
        body = "**Incorrect:**\n\n```js\nbad()\n```\n\n**Correct:**\n"

        assert scan_structure(body).dangling_labels == ((7, "Correct"),)

    def test_scan_when_neutral_label_without_code_then_clean(self):
        """Neutral headings never dangle."""
        assert scan_structure("## Why it matters\n\nText.\n").is_clean


@pytest.mark.parametrize("label,kind", [
    ("Incorrect (waterfall)", BlockKind.INCORRECT_EXAMPLE),
    ("incorrect", BlockKind.INCORRECT_EXAMPLE),
    ("Correct: parallel", BlockKind.CORRECT_EXAMPLE),
    ("Why it matters", BlockKind.PROSE),
])
def test_classify_label_when_prefix_matches_then_kind(label, kind):
    """Label prefix decides the example kind."""
    assert classify_label(label) is kind
