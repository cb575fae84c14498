"""Top-level package for the rulebook compiler.

Provides subpackages:
- rulebook.core – immutable rule/category/fixture models and schemas
- rulebook.parsing – frontmatter, section and manifest parsers, corpus loader
- rulebook.validation – diagnostics and structural/corpus validation
- rulebook.compiler – document assembly, fixture extraction, pipeline
- rulebook.cli – command-line entry point
"""

def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        try:
            content = pyproject.read_text(encoding="utf-8")
            for line in content.splitlines():
                if line.strip().startswith("version"):
                    # Parse: version = "0.3.0"
                    return line.split("=")[1].strip().strip('"').strip("'")
        except OSError:
            pass

    # Fallback to importlib.metadata for installed package
    try:
        from importlib.metadata import PackageNotFoundError, version as pkg_version
        return pkg_version("rulebook-compiler")
    except PackageNotFoundError:
        return "0.0.0"

__version__ = _get_version()
__all__: list[str] = ["__version__"]
