"""
Module: parsing

Purpose:
    Parsers for rule files, the category manifest and document metadata,
    plus the parallel corpus loader. Everything here either returns
    immutable records or raises RuleSourceError; the loader converts those
    errors into diagnostics.

Key Functions:
    - parse_frontmatter(): Rule header + body
    - extract_sections(): Ordered body blocks
    - load_manifest(): Category manifest
    - load_metadata(): Optional document metadata
    - load_rules(): Whole corpus, failures as diagnostics
"""

from .errors import RuleSourceError
from .frontmatter import parse_frontmatter, split_frontmatter, header_from_fields
from .sections import extract_sections, scan_structure, StructureReport
from .manifest import load_manifest, parse_manifest
from .metadata import load_metadata
from .loader import discover_rule_files, load_rules, parse_rule_file, parse_rule_text, LoadResult

__all__ = [
    "LoadResult",
    "RuleSourceError",
    "StructureReport",
    "discover_rule_files",
    "extract_sections",
    "header_from_fields",
    "load_manifest",
    "load_metadata",
    "load_rules",
    "parse_frontmatter",
    "parse_manifest",
    "parse_rule_file",
    "parse_rule_text",
    "scan_structure",
    "split_frontmatter",
]
