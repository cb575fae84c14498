"""
Module: rules

Purpose:
    Provides the immutable records for a parsed rule file: the closed
    Impact enumeration, the ExampleBlock body unit and the RuleFile itself.
    Records are validated on construction so an invalid rule can never
    reach the assembler or the fixture extractor.

Key Classes:
    - Impact: Closed impact enumeration (CRITICAL ... LOW)
    - BlockKind: Classification of a body block
    - ExampleBlock: One ordered unit of a rule body
    - RuleHeader: Fields recognized in a rule's frontmatter
    - RuleFile: Complete parsed rule

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - parsing.frontmatter: Builds RuleHeader
    - parsing.sections: Builds ExampleBlock
    - parsing.loader: Builds RuleFile
    - validation.validator, compiler.assembler, compiler.extractor
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


class Impact(str, Enum):
    """Impact level of a rule or category, highest first."""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM_HIGH = "MEDIUM-HIGH"
    MEDIUM = "MEDIUM"
    LOW_MEDIUM = "LOW-MEDIUM"
    LOW = "LOW"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> Impact:
        """
        Parse an impact value as written in frontmatter or the manifest.

        Values must be written exactly as enumerated (``HIGH``, not
        ``high`` or ``High``); only surrounding whitespace is ignored.

        Raises:
            ValueError: If text is not one of the enumerated levels.
        """
        normalized = (text or "").strip()
        for member in cls:
            if member.value == normalized:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown impact {text!r} (expected one of: {allowed})")


class BlockKind(str, Enum):
    """Classification of a block within a rule body."""
    PROSE = "prose"
    INCORRECT_EXAMPLE = "incorrect"
    CORRECT_EXAMPLE = "correct"
    REFERENCE = "reference"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ExampleBlock:
    """
    One ordered unit of a rule body.

    Attributes:
        kind: PROSE, INCORRECT_EXAMPLE, CORRECT_EXAMPLE or REFERENCE
        content: Block text (code without fences for fenced blocks)
        order: Position within the rule body, 0-based
        language: Fence info tag (e.g. "tsx"), None if absent
        label: Label text that classified an example (e.g. "Incorrect (waterfall)")
        fenced: True when the block came from a fenced code block
    """

    kind: BlockKind
    content: str
    order: int
    language: Optional[str] = None
    label: Optional[str] = None
    fenced: bool = False

    def __post_init__(self) -> None:
        if self.order < 0:
            raise ValueError(f"Block order cannot be negative: {self.order}")
        if self.kind in (BlockKind.INCORRECT_EXAMPLE, BlockKind.CORRECT_EXAMPLE) and not self.fenced:
            raise ValueError(f"{self.kind.name} blocks must come from a fenced code block")

    @property
    def is_example(self) -> bool:
        return self.kind in (BlockKind.INCORRECT_EXAMPLE, BlockKind.CORRECT_EXAMPLE)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "kind": self.kind.value,
            "order": self.order,
            "content": self.content,
        }
        if self.language:
            d["language"] = self.language
        if self.label:
            d["label"] = self.label
        return d


@dataclass(frozen=True, slots=True)
class RuleHeader:
    """Recognized frontmatter fields of a rule file."""

    title: str
    impact: Impact
    impact_description: Optional[str] = None
    tags: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("Rule title cannot be empty")


@dataclass(frozen=True, slots=True)
class RuleFile:
    """
    A parsed rule file (immutable).

    The id is the filename stem and the category prefix is everything
    before its first ``-``, so ``async-parallel.md`` belongs to the
    ``async`` category.

    Attributes:
        id: Filename stem, unique across the corpus
        category_prefix: Substring of id before the first "-"
        title: Rule title from frontmatter
        impact: Rule impact level
        impact_description: Optional short impact note ("2-10x improvement")
        tags: Ordered, de-duplicated tags
        body: Ordered body blocks
        raw_body: Body text after the frontmatter, rendered verbatim
        source_path: File the rule was read from
        body_start_line: 1-based file line where raw_body starts

    Example:
        >>> rule = RuleFile.create(Path("async-parallel.md"), header, blocks, body_text)
        >>> rule.category_prefix
        'async'
    """

    id: str
    category_prefix: str
    title: str
    impact: Impact
    body: Tuple[ExampleBlock, ...]
    raw_body: str = ""
    impact_description: Optional[str] = None
    tags: Tuple[str, ...] = ()
    source_path: Optional[Path] = None
    body_start_line: int = 1

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Rule id cannot be empty")
        if self.category_prefix != category_prefix_of(self.id):
            raise ValueError(
                f"Category prefix {self.category_prefix!r} does not match id {self.id!r}"
            )
        for expected, block in enumerate(self.body):
            if block.order != expected:
                raise ValueError(
                    f"Rule {self.id}: block order {block.order} at position {expected}"
                )

    @classmethod
    def create(
        cls,
        path: Path,
        header: RuleHeader,
        body: Tuple[ExampleBlock, ...],
        raw_body: str,
        body_start_line: int = 1,
    ) -> RuleFile:
        """Build a RuleFile from a path plus its parsed header and body."""
        rule_id = path.stem
        return cls(
            id=rule_id,
            category_prefix=category_prefix_of(rule_id),
            title=header.title,
            impact=header.impact,
            impact_description=header.impact_description,
            tags=header.tags,
            body=tuple(body),
            raw_body=raw_body,
            source_path=path,
            body_start_line=body_start_line,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def filename(self) -> str:
        return self.source_path.name if self.source_path else f"{self.id}.md"

    @property
    def incorrect_examples(self) -> Tuple[ExampleBlock, ...]:
        return tuple(b for b in self.body if b.kind == BlockKind.INCORRECT_EXAMPLE)

    @property
    def correct_examples(self) -> Tuple[ExampleBlock, ...]:
        return tuple(b for b in self.body if b.kind == BlockKind.CORRECT_EXAMPLE)

    @property
    def references(self) -> Tuple[ExampleBlock, ...]:
        return tuple(b for b in self.body if b.kind == BlockKind.REFERENCE)

    @property
    def is_example_only(self) -> bool:
        """True for rules with correct examples and no incorrect ones."""
        return not self.incorrect_examples and bool(self.correct_examples)

    def sort_key(self) -> Tuple[str, str]:
        """Filename order, independent of directory listing order."""
        return (self.filename, self.source_path.as_posix() if self.source_path else "")

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "id": self.id,
            "category_prefix": self.category_prefix,
            "title": self.title,
            "impact": self.impact.value,
            "tags": list(self.tags),
            "body": [block.to_dict() for block in self.body],
        }
        if self.impact_description:
            d["impact_description"] = self.impact_description
        return d


def category_prefix_of(rule_id: str) -> str:
    """Return the category prefix of a rule id (text before the first '-')."""
    return rule_id.split("-", 1)[0]
