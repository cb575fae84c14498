"""
Module: parsing.sections

Purpose:
    Split a rule body into ordered blocks and classify fenced code as
    incorrect or correct examples. A fenced block takes its kind from the
    nearest preceding label (a markdown heading, a whole-line bold label,
    or a bold "Incorrect"/"Correct" lead-in such as ``**Correct:** text``):
    "Incorrect ..." → INCORRECT_EXAMPLE, "Correct ..." → CORRECT_EXAMPLE,
    anything else → PROSE. ``Reference: link`` lines become REFERENCE
    blocks, as does each list item under a bare ``References:`` line.

    Line endings are normalized, so CRLF and LF files give the same blocks.

Key Functions:
    - extract_sections(): Ordered ExampleBlock list for a body
    - scan_structure(): Unclosed fences and labels with no code block

Key Classes:
    - StructureReport: Layout problems found while scanning

Used By:
    - parsing.loader: Per-file parsing
    - validation.validator: StructuralError checks
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from rulebook.core.models import BlockKind, ExampleBlock


_FENCE_RE = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_HEADING_RE = re.compile(r"^ {0,3}#{1,6}\s+(?P<text>.*?)(?:\s+#+)?\s*$")
_BOLD_LABEL_RE = re.compile(r"^\s*(?P<mark>\*\*|__)(?P<text>(?:(?!(?P=mark)).)+)(?P=mark)\s*:?\s*(?P<rest>.*?)\s*$")
_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+(?P<text>.+?)\s*$")
_REFERENCE_RE = re.compile(
    r"^\s*(?:\*\*|__)?references?(?:\*\*|__)?\s*:\s*(?:\*\*|__)?\s*(?P<text>.*?)\s*$",
    re.IGNORECASE,
)

INCORRECT_PREFIX = "incorrect"
CORRECT_PREFIX = "correct"


@dataclass(frozen=True)
class StructureReport:
    """
    Layout problems found while scanning a body.

    Line numbers are 1-based and relative to the body text.

    Attributes:
        unclosed_fence_line: Line of a fence that is never closed, or None
        dangling_labels: (line, label) for example labels with no code block
    """
    unclosed_fence_line: Optional[int] = None
    dangling_labels: Tuple[Tuple[int, str], ...] = ()

    @property
    def is_clean(self) -> bool:
        return self.unclosed_fence_line is None and not self.dangling_labels


@dataclass
class _Label:
    text: str
    line: int
    used: bool = False

    @property
    def kind(self) -> BlockKind:
        return classify_label(self.text)


@dataclass
class _Scan:
    blocks: List[ExampleBlock] = field(default_factory=list)
    prose: List[str] = field(default_factory=list)
    dangling: List[Tuple[int, str]] = field(default_factory=list)
    unclosed_fence_line: Optional[int] = None
    label: Optional[_Label] = None
    in_references: bool = False

    def add(self, kind: BlockKind, content: str, **kwargs) -> None:
        self.blocks.append(ExampleBlock(kind=kind, content=content, order=len(self.blocks), **kwargs))

    def flush_prose(self) -> None:
        text = "".join(self.prose).strip("\n")
        self.prose.clear()
        if text.strip():
            self.add(BlockKind.PROSE, text)

    def set_label(self, text: str, line: int) -> None:
        self._check_dangling()
        self.label = _Label(text=text, line=line)

    def finish(self) -> None:
        self.flush_prose()
        self._check_dangling()

    def _check_dangling(self) -> None:
        if self.label and not self.label.used and self.label.kind != BlockKind.PROSE:
            self.dangling.append((self.label.line, self.label.text))


def classify_label(text: str) -> BlockKind:
    """Kind implied by a label: incorrect, correct, or prose."""
    lowered = text.strip().lower()
    if lowered.startswith(INCORRECT_PREFIX):
        return BlockKind.INCORRECT_EXAMPLE
    if lowered.startswith(CORRECT_PREFIX):
        return BlockKind.CORRECT_EXAMPLE
    return BlockKind.PROSE


def extract_sections(body: str) -> List[ExampleBlock]:
    """
    Parse a rule body into ordered blocks.

    Never fails: an unclosed fence swallows the rest of the body into one
    block, which scan_structure() reports separately.

    Example:
        >>> blocks = extract_sections("**Incorrect:**\\n\\n```ts\\nbad()\\n```\\n")
        >>> [(b.kind.name, b.language, b.content) for b in blocks]
        [('PROSE', None, '**Incorrect:**'), ('INCORRECT_EXAMPLE', 'ts', 'bad()')]
    """
    return list(_scan(body).blocks)


def scan_structure(body: str) -> StructureReport:
    """Report an unclosed fence and example labels not followed by code."""
    scan = _scan(body)
    return StructureReport(
        unclosed_fence_line=scan.unclosed_fence_line,
        dangling_labels=tuple(scan.dangling),
    )


def _scan(body: str) -> _Scan:
    scan = _Scan()
    lines = body.splitlines()

    fence: Optional[Tuple[str, int, int, int, Optional[str]]] = None  # char, length, indent, line, language
    code: List[str] = []

    for number, text in enumerate(lines, start=1):
        line = text + "\n"

        if fence is not None:
            char, length, indent, _, language = fence
            if _closes(text, char, length):
                _emit_code(scan, code, language)
                fence = None
                code = []
            else:
                code.append(_dedent(line, indent))
            continue

        opened = _opens(text)
        if opened is not None:
            scan.flush_prose()
            scan.in_references = False
            char, length, indent, language = opened
            fence = (char, length, indent, number, language)
            continue

        if scan.in_references:
            item = _LIST_ITEM_RE.match(text)
            if item:
                scan.flush_prose()
                scan.add(BlockKind.REFERENCE, item.group("text"))
                continue
            if text.strip():
                scan.in_references = False

        reference = _REFERENCE_RE.match(text)
        if reference:
            if reference.group("text"):
                scan.flush_prose()
                scan.add(BlockKind.REFERENCE, reference.group("text"))
                continue
            scan.in_references = True  # links follow as a list

        label = _label_text(text)
        if label is not None:
            scan.set_label(label, number)
        scan.prose.append(line)

    if fence is not None:
        scan.unclosed_fence_line = fence[3]
        _emit_code(scan, code, fence[4])

    scan.finish()
    return scan


def _emit_code(scan: _Scan, code: List[str], language: Optional[str]) -> None:
    content = "".join(code)
    if content.endswith("\n"):
        content = content[:-1]

    kind = BlockKind.PROSE
    label_text = None
    if scan.label is not None:
        kind = scan.label.kind
        if kind != BlockKind.PROSE:
            scan.label.used = True
            label_text = scan.label.text

    scan.add(kind, content, language=language, label=label_text, fenced=True)


def _opens(text: str) -> Optional[Tuple[str, int, int, Optional[str]]]:
    match = _FENCE_RE.match(text)
    if not match:
        return None
    marker = match.group("fence")
    info = match.group("info").strip()
    if marker[0] == "`" and "`" in info:
        return None  # inline code span, not a fence
    language = info.split()[0] if info else None
    return marker[0], len(marker), len(match.group("indent")), language


def _closes(text: str, char: str, length: int) -> bool:
    stripped = text.strip()
    return (
        len(text) - len(text.lstrip(" ")) <= 3
        and len(stripped) >= length
        and set(stripped) == {char}
    )


def _dedent(line: str, indent: int) -> str:
    removed = 0
    while removed < indent and line.startswith(" "):
        line = line[1:]
        removed += 1
    return line


def _label_text(text: str) -> Optional[str]:
    heading = _HEADING_RE.match(text)
    if heading:
        return heading.group("text").strip()
    bold = _BOLD_LABEL_RE.match(text)
    if bold:
        label = bold.group("text").strip().rstrip(":").strip()
        if not bold.group("rest") or classify_label(label) != BlockKind.PROSE:
            return label
    return None
