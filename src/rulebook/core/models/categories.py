"""
Module: categories

Purpose:
    Category and CategoryManifest records. The manifest's order is the
    canonical order of the compiled document, so it is kept as a tuple
    and never re-sorted.

Key Classes:
    - Category: One manifest entry
    - CategoryManifest: Ordered, id-unique collection of categories

Used By:
    - parsing.manifest: Builds the manifest
    - validation.validator, compiler.assembler, compiler.extractor
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from .rules import Impact


@dataclass(frozen=True, slots=True)
class Category:
    """
    A rule category defined in the manifest.

    Attributes:
        id: Filename prefix that groups rules ("async")
        title: Display title ("Eliminating Waterfalls")
        impact: Category impact level
        description: Description paragraph
        order: Position in the manifest, 0-based
    """

    id: str
    title: str
    impact: Impact
    description: str
    order: int

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Category id cannot be empty")
        if not self.title:
            raise ValueError(f"Category {self.id!r} has an empty title")
        if not self.description:
            raise ValueError(f"Category {self.id!r} has an empty description")
        if self.order < 0:
            raise ValueError(f"Category order cannot be negative: {self.order}")

    @property
    def number(self) -> int:
        """1-based section number in the compiled document."""
        return self.order + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "impact": self.impact.value,
            "description": self.description,
            "order": self.order,
        }


@dataclass(frozen=True, slots=True)
class CategoryManifest:
    """
    Ordered list of categories.

    Invariants:
        - Category ids are unique
        - categories[i].order == i
    """

    categories: Tuple[Category, ...]
    source_path: Optional[Path] = None

    def __post_init__(self) -> None:
        seen = set()
        for position, category in enumerate(self.categories):
            if category.id in seen:
                raise ValueError(f"Duplicate category id: {category.id!r}")
            seen.add(category.id)
            if category.order != position:
                raise ValueError(
                    f"Category {category.id!r} has order {category.order}, expected {position}"
                )

    def __iter__(self) -> Iterator[Category]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    def __contains__(self, category_id: object) -> bool:
        return any(c.id == category_id for c in self.categories)

    def get(self, category_id: str) -> Optional[Category]:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def ids(self) -> Tuple[str, ...]:
        return tuple(c.id for c in self.categories)
