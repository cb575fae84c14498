"""
Tests for compiler.config

Test Coverage:
- CompilerConfig.for_rules_dir(): default layout and overrides
- __post_init__ validation
"""

from pathlib import Path

import pytest

from rulebook.compiler import CompilerConfig


class TestCompilerConfig:
    """Tests for CompilerConfig."""

    def test_for_rules_dir_when_no_overrides_then_default_layout(self):
        """Defaults sit next to and above the rules directory."""
        config = CompilerConfig.for_rules_dir(Path("skill/rules"))

        assert config.manifest_path == Path("skill/rules/_sections.md")
        assert config.metadata_path == Path("skill/metadata.json")
        assert config.output_path == Path("skill/AGENTS.md")
        assert config.fixtures_path == Path("skill/test-cases.json")
        assert config.document_title == "Rules"
        assert config.max_workers == 4
        assert config.report_path is None

    def test_for_rules_dir_when_overrides_then_applied_and_none_ignored(self):
        """None overrides keep the default paths."""
        config = CompilerConfig.for_rules_dir(
            Path("rules"),
            output_path=Path("out/DOC.md"),
            document_title=None,
            max_workers=2,
        )

        assert config.output_path == Path("out/DOC.md")
        assert config.document_title == "Rules"
        assert config.max_workers == 2

    def test_without_fixtures_when_called_then_fixtures_disabled(self):
        """without_fixtures() returns a copy with no fixture path."""
        config = CompilerConfig.for_rules_dir(Path("rules")).without_fixtures()

        assert config.fixtures_path is None

    def test_config_is_immutable(self):
        config = CompilerConfig.for_rules_dir(Path("rules"))

        with pytest.raises(AttributeError):
            config.max_workers = 8

    @pytest.mark.parametrize("overrides,message", [
        ({"max_workers": 0}, "max_workers"),
        ({"document_title": "  "}, "document_title"),
        ({"document_title": "Two\nLines"}, "single line"),
        ({"fixtures_path": Path("AGENTS.md"), "output_path": Path("AGENTS.md")}, "same file"),
    ])
    def test_config_when_invalid_then_raises(self, overrides, message):
        """Invalid settings are rejected on construction."""
        with pytest.raises(ValueError, match=message):
            CompilerConfig.for_rules_dir(Path("rules"), **overrides)
