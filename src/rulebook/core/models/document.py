"""
Module: document

Purpose:
    Records for the compiled reference document: optional header metadata,
    one section per category and the rendered text.

Key Classes:
    - DocumentMetadata: Version/organization/abstract/references header data
    - CompiledSection: A category with its rules in filename order
    - CompiledDocument: All sections in manifest order plus rendered text

Used By:
    - parsing.metadata: Builds DocumentMetadata
    - compiler.assembler: Builds CompiledDocument
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .categories import Category
from .rules import RuleFile


@dataclass(frozen=True, slots=True)
class DocumentMetadata:
    """
    Header data for the compiled document (``metadata.json``).

    Attributes:
        version: Document version string ("1.0.0")
        organization: Author organization
        date: Free-form publication date ("January 2026")
        abstract: Abstract paragraph
        references: Links listed at the end of the document
    """

    version: Optional[str] = None
    organization: Optional[str] = None
    date: Optional[str] = None
    abstract: Optional[str] = None
    references: Tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CompiledSection:
    """A category and its rules, rules in filename order."""

    category: Category
    rules: Tuple[RuleFile, ...]

    def __post_init__(self) -> None:
        for rule in self.rules:
            if rule.category_prefix != self.category.id:
                raise ValueError(
                    f"Rule {rule.id} (prefix {rule.category_prefix!r}) "
                    f"placed under category {self.category.id!r}"
                )


@dataclass(frozen=True, slots=True)
class CompiledDocument:
    """
    The assembled reference document.

    Invariants:
        - sections follow manifest order
        - every rule appears exactly once, under its own category
    """

    sections: Tuple[CompiledSection, ...]
    text: str

    def __post_init__(self) -> None:
        seen = set()
        for section in self.sections:
            for rule in section.rules:
                if rule.id in seen:
                    raise ValueError(f"Rule {rule.id} appears more than once")
                seen.add(rule.id)

    def iter_rules(self) -> Iterator[RuleFile]:
        for section in self.sections:
            yield from section.rules

    @property
    def rule_count(self) -> int:
        return sum(len(section.rules) for section in self.sections)
