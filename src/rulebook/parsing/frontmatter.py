"""
Module: parsing.frontmatter

Purpose:
    Extract the small ``---`` delimited header from a rule file and turn
    the recognized keys into a validated RuleHeader. This is deliberately
    not a YAML parser: each line is ``key: value`` and only title, impact,
    impactDescription and tags mean anything.

Key Functions:
    - split_frontmatter(): Separate raw key/value lines from the body
    - header_from_fields(): Validate recognized keys into a RuleHeader
    - parse_frontmatter(): Both steps, returning (RuleHeader, body)

Dependencies:
    - rulebook.core.models: RuleHeader, Impact

Used By:
    - parsing.loader: Per-file parsing
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from rulebook.core.models import DiagnosticKind, Impact, RuleHeader

from .errors import RuleSourceError

logger = logging.getLogger(__name__)

DELIMITER = "---"

# Keys mapped onto RuleHeader; anything else is ignored
RECOGNIZED_KEYS = ("title", "impact", "impactDescription", "tags")


@dataclass(frozen=True)
class FrontmatterBlock:
    """
    Raw frontmatter split from a rule file.

    Attributes:
        fields: Key/value pairs in file order (last value wins on repeats)
        body: Text after the closing delimiter, with LF line endings
        body_start_line: 1-based line number of the first body line
    """
    fields: Dict[str, str]
    body: str
    body_start_line: int


def split_frontmatter(text: str) -> FrontmatterBlock:
    """
    Split a rule file into frontmatter fields and body.

    Leading blank lines and a byte-order mark before the opening
    delimiter are tolerated. CRLF and CR line endings become LF, so the
    body is identical whichever convention the file was saved with.

    Args:
        text: Complete file content

    Returns:
        FrontmatterBlock with raw (unvalidated) fields

    Raises:
        RuleSourceError: ParseError if the delimiters are missing or a
            line inside the block is not ``key: value``
    """
    text = text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")
    lines = text.splitlines(keepends=True)

    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1
    if start >= len(lines) or lines[start].strip() != DELIMITER:
        raise RuleSourceError(
            DiagnosticKind.PARSE,
            f"File must begin with a '{DELIMITER}' frontmatter delimiter",
            line=start + 1 if start < len(lines) else 1,
        )

    close = None
    for index in range(start + 1, len(lines)):
        if lines[index].strip() == DELIMITER:
            close = index
            break
    if close is None:
        raise RuleSourceError(
            DiagnosticKind.PARSE,
            f"No closing '{DELIMITER}' frontmatter delimiter before end of file",
            line=start + 1,
        )

    fields: Dict[str, str] = {}
    for index in range(start + 1, close):
        stripped = lines[index].strip()
        if not stripped or stripped.startswith("#"):
            continue
        if ":" not in stripped:
            raise RuleSourceError(
                DiagnosticKind.PARSE,
                f"Malformed frontmatter line (expected 'key: value'): {stripped!r}",
                line=index + 1,
            )
        key, value = stripped.split(":", 1)
        fields[key.strip()] = _unquote(value.strip())

    return FrontmatterBlock(
        fields=fields,
        body="".join(lines[close + 1:]),
        body_start_line=close + 2,
    )


def header_from_fields(fields: Dict[str, str]) -> RuleHeader:
    """
    Validate recognized frontmatter keys.

    Unrecognized keys are ignored. Exactly one error is raised for an
    invalid header, checked in the order title, impact.

    Raises:
        RuleSourceError: SchemaError for a missing/empty title, a missing
            impact, or an impact outside the enumeration
    """
    title = fields.get("title", "").strip()
    if not title:
        raise RuleSourceError(DiagnosticKind.SCHEMA, "Missing required frontmatter key 'title'")

    raw_impact = fields.get("impact", "").strip()
    if not raw_impact:
        raise RuleSourceError(DiagnosticKind.SCHEMA, "Missing required frontmatter key 'impact'")
    try:
        impact = Impact.parse(raw_impact)
    except ValueError as e:
        raise RuleSourceError(DiagnosticKind.SCHEMA, str(e)) from e

    impact_description = fields.get("impactDescription", "").strip() or None

    ignored = sorted(k for k in fields if k not in RECOGNIZED_KEYS)
    if ignored:
        logger.debug(f"Ignoring unrecognized frontmatter keys: {', '.join(ignored)}")

    return RuleHeader(
        title=title,
        impact=impact,
        impact_description=impact_description,
        tags=parse_tags(fields.get("tags", "")),
    )


def parse_frontmatter(text: str) -> Tuple[RuleHeader, str]:
    """
    Parse a rule file's frontmatter.

    Example:
        >>> header, body = parse_frontmatter("---\\ntitle: Use keys\\nimpact: HIGH\\n---\\nBody\\n")
        >>> header.impact
        <Impact.HIGH: 'HIGH'>
        >>> body
        'Body\\n'
    """
    block = split_frontmatter(text)
    return header_from_fields(block.fields), block.body


def parse_tags(raw: str) -> Tuple[str, ...]:
    """Split comma-separated tags; trims, drops empties and repeats, keeps order."""
    raw = raw.strip()
    if raw.startswith("[") and raw.endswith("]"):
        raw = raw[1:-1]
    tags: List[str] = []
    for item in raw.split(","):
        tag = _unquote(item.strip())
        if tag and tag not in tags:
            tags.append(tag)
    return tuple(tags)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value

