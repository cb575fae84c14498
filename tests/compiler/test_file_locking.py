"""
Tests for compiler.file_locking

Test Coverage:
- locked_write_text(): create, replace, parent directories
- locked_file(): lock held while open
"""

from concurrent.futures import ThreadPoolExecutor

import portalocker

from rulebook.compiler.file_locking import locked_file, locked_write_text


def test_locked_write_text_when_parent_missing_then_created(tmp_path):
    """Parent directories are created on demand."""
    path = tmp_path / "nested" / "deep" / "AGENTS.md"

    locked_write_text(path, "# Rules\n")

    assert path.read_text(encoding="utf-8") == "# Rules\n"


def test_locked_write_text_when_file_longer_then_fully_replaced(tmp_path):
    """Shorter content leaves no tail of the old file."""
    path = tmp_path / "AGENTS.md"
    path.write_text("x" * 1000, encoding="utf-8")

    locked_write_text(path, "short\n")

    assert path.read_text(encoding="utf-8") == "short\n"


def test_locked_write_text_when_newlines_then_written_as_lf(tmp_path):
    """Output always uses LF line endings."""
    path = tmp_path / "AGENTS.md"

    locked_write_text(path, "a\nb\n")

    assert path.read_bytes() == b"a\nb\n"


def test_locked_write_text_when_concurrent_writers_then_one_complete_version(tmp_path):
    """Concurrent writers never interleave their content."""
    path = tmp_path / "test-cases.json"
    texts = [f"{i}\n" * (100 + i) for i in range(8)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda text: locked_write_text(path, text), texts))

    assert path.read_text(encoding="utf-8") in texts


def test_locked_file_when_read_mode_and_missing_then_touched(tmp_path):
    """Read mode creates an empty file when missing."""
    path = tmp_path / "empty.md"

    with locked_file(path, "r", portalocker.LOCK_SH) as f:
        assert f.read() == ""

    assert path.exists()
