"""
Module: parsing.manifest

Purpose:
    Parse the category manifest (``_sections.md``). Each category is a
    level-2 heading with the id in parentheses, followed by an ``Impact:``
    line and a description:

        ## 1. Eliminating Waterfalls (async)

        **Impact:** CRITICAL
        **Description:** Waterfalls are the #1 performance killer.

    Order of appearance is the canonical document order.

Key Functions:
    - load_manifest(): Read and parse a manifest file
    - parse_manifest(): Parse manifest text

Used By:
    - compiler.pipeline: Loaded once per run and passed to every stage
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from rulebook.core.models import Category, CategoryManifest, DiagnosticKind, Impact

from .errors import RuleSourceError

logger = logging.getLogger(__name__)


_CATEGORY_HEADING_RE = re.compile(r"^##(?!#)\s+(?P<text>.+?)\s*$")
_TITLE_ID_RE = re.compile(r"^(?:\d+[.)]\s+)?(?P<title>.*?)\s*\((?P<id>[^()]*)\)$")
_FIELD_RE = re.compile(
    r"^\s*(?:\*\*|__)?(?P<key>impact|description)(?:\*\*|__)?\s*:\s*(?:\*\*|__)?\s*(?P<value>.*?)\s*$",
    re.IGNORECASE,
)
_ID_RE = re.compile(r"^[A-Za-z0-9_]+$")


@dataclass
class _Section:
    heading: str
    line: int
    impact: Optional[str] = None
    impact_line: int = 0
    description: List[str] = field(default_factory=list)
    description_closed: bool = False


def load_manifest(path: Path) -> CategoryManifest:
    """
    Load the category manifest from disk.

    Args:
        path: Path to the manifest markdown file

    Returns:
        CategoryManifest in file order

    Raises:
        RuleSourceError: ManifestError if the file is unreadable or invalid
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RuleSourceError(DiagnosticKind.MANIFEST, f"Cannot read manifest {path}: {e}") from e

    manifest = parse_manifest(text, source_path=path)
    logger.info(f"Loaded {len(manifest)} categories from {path.name}")
    return manifest


def parse_manifest(text: str, *, source_path: Optional[Path] = None) -> CategoryManifest:
    """
    Parse manifest text into a CategoryManifest.

    Raises:
        RuleSourceError: ManifestError on a heading without an id, a
            duplicate id, a missing or unknown impact, a missing
            description, or a manifest with no categories
    """
    sections = _split_sections(text)
    if not sections:
        raise RuleSourceError(DiagnosticKind.MANIFEST, "Manifest defines no categories")

    categories: List[Category] = []
    seen: dict[str, int] = {}
    for section in sections:
        category = _build_category(section, order=len(categories))
        if category.id in seen:
            raise RuleSourceError(
                DiagnosticKind.MANIFEST,
                f"Duplicate category id {category.id!r} (first defined on line {seen[category.id]})",
                line=section.line,
            )
        seen[category.id] = section.line
        categories.append(category)

    return CategoryManifest(categories=tuple(categories), source_path=source_path)


def _split_sections(text: str) -> List[_Section]:
    sections: List[_Section] = []
    current: Optional[_Section] = None

    for number, line in enumerate(text.lstrip("\ufeff").splitlines(), start=1):
        heading = _CATEGORY_HEADING_RE.match(line)
        if heading:
            current = _Section(heading=heading.group("text"), line=number)
            sections.append(current)
            continue
        if current is None:
            continue  # preamble before the first category

        stripped = line.strip()
        field_match = _FIELD_RE.match(line)
        if field_match:
            value = field_match.group("value").strip("*_ ")
            if field_match.group("key").lower() == "impact":
                current.impact = value
                current.impact_line = number
            else:
                current.description = [value] if value else []
                current.description_closed = False
            continue

        if not stripped or stripped == "---" or stripped.startswith("#"):
            if current.description:
                current.description_closed = True
            continue
        if (current.impact is not None or current.description) and not current.description_closed:
            current.description.append(stripped)

    return sections


def _build_category(section: _Section, order: int) -> Category:
    match = _TITLE_ID_RE.match(section.heading)
    if not match:
        raise RuleSourceError(
            DiagnosticKind.MANIFEST,
            f"Category heading {section.heading!r} has no parenthesized id",
            line=section.line,
        )

    title = match.group("title").strip()
    category_id = match.group("id").strip()
    if not category_id:
        raise RuleSourceError(DiagnosticKind.MANIFEST, f"Category {title!r} has an empty id", line=section.line)
    if not _ID_RE.match(category_id):
        raise RuleSourceError(
            DiagnosticKind.MANIFEST,
            f"Category id {category_id!r} must be letters, digits or '_' (ids are filename prefixes before '-')",
            line=section.line,
        )
    if not title:
        raise RuleSourceError(DiagnosticKind.MANIFEST, f"Category {category_id!r} has no title", line=section.line)

    if not section.impact:
        raise RuleSourceError(DiagnosticKind.MANIFEST, f"Category {category_id!r} has no Impact line", line=section.line)
    try:
        impact = Impact.parse(section.impact)
    except ValueError as e:
        raise RuleSourceError(
            DiagnosticKind.MANIFEST, f"Category {category_id!r}: {e}", line=section.impact_line
        ) from e

    description = " ".join(section.description).strip()
    if not description:
        raise RuleSourceError(
            DiagnosticKind.MANIFEST, f"Category {category_id!r} has no description", line=section.line
        )

    return Category(
        id=category_id,
        title=title,
        impact=impact,
        description=description,
        order=order,
    )
