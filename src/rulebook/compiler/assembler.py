"""
Module: compiler.assembler

Purpose:
    Compose the single reference document from a validated corpus:
    categories in manifest order, rules in filename order, a table of
    contents with GitHub-style anchors, then every rule's summary line and
    verbatim body.

    Output is a pure function of the input: no timestamps, no dependence
    on the order rules are passed in, lines joined with ``\\n`` and exactly
    one trailing newline.

Key Functions:
    - slugify(): GitHub heading anchor for a heading text
    - assemble(): Build a CompiledDocument
    - write_document(): Write the document text under an exclusive lock

Key Classes:
    - AssemblyError: Corpus cannot be assembled (unknown prefix, duplicate id)

Used By:
    - compiler.pipeline: After a clean validation
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from rulebook.core.models import (
    Category,
    CategoryManifest,
    CompiledDocument,
    CompiledSection,
    DocumentMetadata,
    RuleFile,
)

from .config import DEFAULT_TITLE
from .file_locking import locked_write_text

logger = logging.getLogger(__name__)

_SLUG_STRIP_RE = re.compile(r"[^\w\- ]", re.UNICODE)
_HEADING_LINE_RE = re.compile(r"^\s{0,3}#{1,6}\s+(?P<text>.+?)\s*#*\s*$")

SEPARATOR = "---"


class AssemblyError(Exception):
    """Raised when a rule cannot be placed in the document."""


def slugify(text: str) -> str:
    """
    GitHub heading anchor for text.

    Lowercases, drops everything except letters, digits, ``-``, ``_`` and
    spaces, then turns each space into ``-``.

    Example:
        >>> slugify("1.1 Defer Await Until Needed")
        '11-defer-await-until-needed'
    """
    return _SLUG_STRIP_RE.sub("", text.strip().lower()).replace(" ", "-")


class _Anchors:
    """Unique anchors in document order (``x``, ``x-1``, ``x-2``...)."""

    def __init__(self) -> None:
        self._counts: Dict[str, int] = {}

    def claim(self, heading: str) -> str:
        base = slugify(heading)
        count = self._counts.get(base, 0)
        self._counts[base] = count + 1
        return base if count == 0 else f"{base}-{count}"


def assemble(
    rules: Sequence[RuleFile],
    manifest: CategoryManifest,
    metadata: Optional[DocumentMetadata] = None,
    title: str = DEFAULT_TITLE,
) -> CompiledDocument:
    """
    Assemble the compiled document.

    Args:
        rules: Validated rules, any order
        manifest: Category manifest (defines category order)
        metadata: Optional header data and references
        title: Top-level heading

    Returns:
        CompiledDocument with its sections and rendered text

    Raises:
        AssemblyError: If a rule's prefix is not in the manifest or a rule
            id appears twice
    """
    sections = _group_sections(rules, manifest)
    try:
        document = CompiledDocument(sections=sections, text=_render(sections, metadata, title))
    except ValueError as e:
        raise AssemblyError(str(e)) from e

    logger.info(
        f"Assembled {document.rule_count} rules in {len(sections)} categories",
        extra={"rule_count": document.rule_count, "category_count": len(sections)},
    )
    return document


def write_document(document: CompiledDocument, path: Path) -> Path:
    """Write the compiled document to path (exclusive lock)."""
    locked_write_text(path, document.text)
    logger.info(f"Wrote compiled document: {path}")
    return path


# ─────────────────────────────────────────────────────────────────────────────
# Grouping
# ─────────────────────────────────────────────────────────────────────────────

def _group_sections(rules: Sequence[RuleFile], manifest: CategoryManifest) -> Tuple[CompiledSection, ...]:
    grouped: Dict[str, List[RuleFile]] = {category.id: [] for category in manifest}
    for rule in rules:
        if rule.category_prefix not in grouped:
            raise AssemblyError(
                f"Rule {rule.filename} has category prefix {rule.category_prefix!r}, "
                "which is not defined in the manifest"
            )
        grouped[rule.category_prefix].append(rule)

    return tuple(
        CompiledSection(
            category=category,
            rules=tuple(sorted(grouped[category.id], key=RuleFile.sort_key)),
        )
        for category in manifest
    )


# ─────────────────────────────────────────────────────────────────────────────
# Rendering
# ─────────────────────────────────────────────────────────────────────────────

def _render(
    sections: Sequence[CompiledSection],
    metadata: Optional[DocumentMetadata],
    title: str,
) -> str:
    anchors = _Anchors()
    anchors.claim(title)

    lines: List[str] = [f"# {title}", ""]
    if metadata is not None:
        lines.extend(_render_metadata(metadata, anchors))

    toc_heading = "Table of Contents"
    anchors.claim(toc_heading)
    body: List[str] = []
    toc: List[str] = [f"## {toc_heading}", ""]

    for section in sections:
        if body:
            body.extend([SEPARATOR, ""])
        category = section.category
        heading = f"{category.number}. {category.title}"
        toc.append(f"{category.number}. [{category.title}](#{anchors.claim(heading)}) — **{category.impact}**")
        body.extend(_render_category(category, heading))

        for index, rule in enumerate(section.rules, start=1):
            number = f"{category.number}.{index}"
            rule_heading = f"{number} {rule.title}"
            toc.append(f"   - {number} [{rule.title}](#{anchors.claim(rule_heading)})")
            body.extend(_render_rule(rule, rule_heading))

    lines.extend(toc)
    lines.extend(["", SEPARATOR, ""])
    lines.extend(body)

    if metadata is not None and metadata.references:
        anchors.claim("References")
        lines.extend([SEPARATOR, "", "## References", ""])
        lines.extend(f"{i}. {ref}" for i, ref in enumerate(metadata.references, start=1))

    return "\n".join(lines).rstrip("\n") + "\n"


def _render_metadata(metadata: DocumentMetadata, anchors: _Anchors) -> List[str]:
    lines: List[str] = []
    header = [
        f"**Version {metadata.version}**" if metadata.version else None,
        metadata.organization,
        metadata.date,
    ]
    header = [line for line in header if line]
    if header:
        lines.extend(header)
        lines.append("")

    if metadata.abstract:
        anchors.claim("Abstract")
        lines.extend(["## Abstract", "", metadata.abstract, ""])

    if lines:
        lines.extend([SEPARATOR, ""])
    return lines


def _render_category(category: Category, heading: str) -> List[str]:
    return [
        f"## {heading}",
        "",
        f"**Impact: {category.impact}**",
        "",
        category.description,
        "",
    ]


def _render_rule(rule: RuleFile, heading: str) -> List[str]:
    summary = f"**Impact: {rule.impact}"
    if rule.impact_description:
        summary += f" ({rule.impact_description})"
    summary += "**"

    lines = [f"### {heading}", "", summary, ""]
    if rule.tags:
        lines.extend([f"Tags: {', '.join(rule.tags)}", ""])

    body = _rule_body(rule)
    if body:
        lines.extend([body, ""])
    return lines


def _rule_body(rule: RuleFile) -> str:
    """Verbatim body with surrounding blank lines and a title-repeating heading removed."""
    body_lines = _trim_blank(rule.raw_body.split("\n"))
    if body_lines:
        heading = _HEADING_LINE_RE.match(body_lines[0])
        if heading and heading.group("text").strip() == rule.title:
            body_lines = _trim_blank(body_lines[1:])
    return "\n".join(body_lines)


def _trim_blank(lines: List[str]) -> List[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]
