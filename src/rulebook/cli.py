"""
Command-line entry point for the rulebook compiler.

Usage:
    rulebook build RULES_DIR [--output AGENTS.md] [--fixtures test-cases.json]
    rulebook validate RULES_DIR [--report diagnostics.json]
    rulebook extract-tests RULES_DIR [--fixtures test-cases.json]

Every diagnostic is printed as one line on stdout, followed by a summary.
Exit codes: 0 no errors, 1 at least one ERROR diagnostic, 2 usage error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from rulebook import __version__
from rulebook.compiler import CompileResult, CompilerConfig, build, extract_tests, validate_corpus

logger = logging.getLogger("rulebook")

EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulebook",
        description="Compile a directory of markdown rule files into one reference document and a test-fixture corpus.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log errors")

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    build_cmd = commands.add_parser("build", help="Validate, then write the document and fixtures")
    _add_common(build_cmd)
    _add_metadata(build_cmd)
    build_cmd.add_argument("--output", type=Path, help="Compiled document path (default: ../AGENTS.md)")
    build_cmd.add_argument("--fixtures", type=Path, help="Fixture corpus path (default: ../test-cases.json)")
    build_cmd.add_argument("--no-fixtures", action="store_true", help="Skip writing the fixture corpus")
    build_cmd.add_argument("--title", help="Document title")
    build_cmd.add_argument("--workers", type=int, help="Parser threads (default: 4)")
    _add_report(build_cmd)

    validate_cmd = commands.add_parser("validate", help="Report diagnostics without writing artifacts")
    _add_common(validate_cmd)
    _add_metadata(validate_cmd)
    _add_report(validate_cmd)

    extract_cmd = commands.add_parser("extract-tests", help="Validate, then write only the fixture corpus")
    _add_common(extract_cmd)
    extract_cmd.add_argument("--fixtures", type=Path, help="Fixture corpus path (default: ../test-cases.json)")

    return parser


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("rules_dir", type=Path, metavar="RULES_DIR", help="Directory of rule files")
    parser.add_argument("--manifest", type=Path, help="Category manifest (default: RULES_DIR/_sections.md)")


def _add_metadata(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--metadata", type=Path, help="Document metadata JSON (default: ../metadata.json)")


def _add_report(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--report", type=Path, help="Write a JSON diagnostics report")


def _configure_logging(verbose: int, quiet: bool) -> None:
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _config_from_args(args: argparse.Namespace) -> CompilerConfig:
    config = CompilerConfig.for_rules_dir(
        args.rules_dir,
        manifest_path=args.manifest,
        metadata_path=getattr(args, "metadata", None),
        output_path=getattr(args, "output", None),
        fixtures_path=getattr(args, "fixtures", None),
        document_title=getattr(args, "title", None),
        max_workers=getattr(args, "workers", None),
        report_path=getattr(args, "report", None),
    )
    if getattr(args, "no_fixtures", False):
        config = config.without_fixtures()
    return config


def _print_result(command: str, result: CompileResult) -> None:
    for diagnostic in result.diagnostics:
        print(diagnostic.format())

    report = result.report()
    print(f"{result.rule_count}/{result.file_count} rule files parsed: {report.summary()}")
    if result.document_path is not None:
        print(f"Wrote {result.document_path}")
    if result.fixtures_path is not None:
        print(f"Wrote {result.fixture_count} fixtures to {result.fixtures_path}")
    if not result.passed and command != "validate":
        print("Errors found; no artifacts written.")


COMMANDS: Dict[str, Callable[[CompilerConfig], CompileResult]] = {
    "build": build,
    "validate": validate_corpus,
    "extract-tests": extract_tests,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)
    logger.debug(f"rulebook {__version__}: {args.command}")

    try:
        config = _config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        result = COMMANDS[args.command](config)
    except FileNotFoundError as e:
        print(f"rulebook: error: {e}", file=sys.stderr)
        return EXIT_USAGE

    _print_result(args.command, result)
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
