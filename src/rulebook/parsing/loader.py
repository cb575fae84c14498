"""
Module: parsing.loader

Purpose:
    Discover the rule files of a corpus and parse them into RuleFile
    records. Parsing is independent per file, so files are parsed in a
    thread pool; results are collected and re-sorted by filename so the
    outcome never depends on completion or directory-listing order.

    Parse faults never escape this module: every RuleSourceError (and any
    unreadable file) becomes exactly one ERROR diagnostic, and the file is
    left out of the parsed corpus.

Key Functions:
    - discover_rule_files(): Rule paths under a directory, filename order
    - parse_rule_text(): Parse one rule from its text
    - parse_rule_file(): Read and parse one rule file
    - load_rules(): Parse a whole corpus in parallel

Key Classes:
    - LoadResult: Parsed rules plus failure diagnostics

Dependencies:
    - concurrent.futures: Thread pool execution

Used By:
    - compiler.pipeline: First stage of every command
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from rulebook.core.models import Diagnostic, DiagnosticKind, RuleFile

from .errors import RuleSourceError
from .frontmatter import header_from_fields, split_frontmatter
from .sections import extract_sections

logger = logging.getLogger(__name__)

RULE_SUFFIX = ".md"

# Files starting with this prefix (manifest, templates) are not rules
RESERVED_PREFIX = "_"


@dataclass(frozen=True)
class LoadResult:
    """
    Result of parsing a rule corpus.

    Attributes:
        rules: Successfully parsed rules, filename order
        failures: One ERROR diagnostic per file that failed to parse
        file_count: Number of rule files discovered
    """
    rules: Tuple[RuleFile, ...]
    failures: Tuple[Diagnostic, ...]
    file_count: int


def discover_rule_files(rules_dir: Path) -> List[Path]:
    """
    Find rule files under rules_dir (recursive).

    Files whose name starts with ``_`` are skipped. The result is sorted
    by filename, then by full path, never by listing order.

    Raises:
        FileNotFoundError: If rules_dir does not exist
    """
    if not rules_dir.is_dir():
        raise FileNotFoundError(f"Rules directory not found: {rules_dir}")

    paths = [
        p for p in rules_dir.rglob(f"*{RULE_SUFFIX}")
        if p.is_file() and not p.name.startswith(RESERVED_PREFIX)
    ]
    return sorted(paths, key=lambda p: (p.name, p.as_posix()))


def parse_rule_text(text: str, path: Path) -> RuleFile:
    """
    Parse rule file content.

    Args:
        text: File content
        path: Path the content came from (id and prefix derive from it)

    Raises:
        RuleSourceError: ParseError or SchemaError
    """
    block = split_frontmatter(text)
    header = header_from_fields(block.fields)
    body = extract_sections(block.body)
    return RuleFile.create(
        path,
        header,
        tuple(body),
        raw_body=block.body,
        body_start_line=block.body_start_line,
    )


def parse_rule_file(path: Path) -> RuleFile:
    """
    Read and parse one rule file.

    Raises:
        RuleSourceError: ParseError (including unreadable files) or SchemaError
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RuleSourceError(DiagnosticKind.PARSE, f"Cannot read rule file: {e}") from e
    return parse_rule_text(text, path)


def load_rules(
    paths: Union[Path, Sequence[Path]],
    *,
    max_workers: int = 4,
) -> LoadResult:
    """
    Parse every rule file, collecting failures as diagnostics.

    Args:
        paths: A rules directory, or an explicit list of rule files
        max_workers: Parser threads; 1 parses sequentially

    Returns:
        LoadResult with rules and failures, both in filename order

    Example:
        >>> result = load_rules(Path("rules"))
        >>> len(result.rules), len(result.failures)
        (42, 0)
    """
    if isinstance(paths, Path):
        files = discover_rule_files(paths)
    else:
        files = sorted(paths, key=lambda p: (p.name, p.as_posix()))

    if max_workers > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(files))) as pool:
            outcomes = list(pool.map(_parse_one, files))
    else:
        outcomes = [_parse_one(path) for path in files]

    rules: List[RuleFile] = []
    failures: List[Diagnostic] = []
    for outcome in outcomes:
        if isinstance(outcome, RuleFile):
            rules.append(outcome)
        else:
            failures.append(outcome)

    logger.info(
        f"Parsed {len(rules)} of {len(files)} rule files",
        extra={"rule_count": len(rules), "failed_count": len(failures)},
    )
    return LoadResult(rules=tuple(rules), failures=tuple(failures), file_count=len(files))


def _parse_one(path: Path) -> Union[RuleFile, Diagnostic]:
    try:
        rule = parse_rule_file(path)
    except RuleSourceError as e:
        logger.warning(f"Failed to parse {path.name}: {e.message}", extra={"kind": e.kind.value})
        return e.to_diagnostic(path.name)
    logger.debug(f"Parsed {path.name}: {len(rule.body)} blocks")
    return rule

