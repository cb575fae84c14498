"""
Module: compiler.file_locking

Purpose:
    Exclusive locked writes for compiler outputs. Two builds pointed at the
    same output path never interleave their bytes: each write takes an
    exclusive portalocker lock, truncates, then writes the full text.

Key Functions:
    - locked_file: Context manager for locked file access
    - locked_write_text: Replace a file's content under an exclusive lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - compiler.assembler: Compiled document output
    - compiler.extractor: Fixture corpus output
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import portalocker

logger = logging.getLogger(__name__)


@contextmanager
def locked_file(
    path: Path,
    mode: str = 'r',
    lock_type: int = portalocker.LOCK_EX,
) -> Generator:
    """
    Context manager for cross-platform locked file access.

    Args:
        path: Path to file.
        mode: File open mode ('r', 'r+', 'a').
        lock_type: Lock type (LOCK_EX for exclusive, LOCK_SH for shared).

    Yields:
        Open file handle with lock held.

    Example:
        >>> with locked_file(path, 'r', portalocker.LOCK_SH) as f:
        ...     text = f.read()
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if 'r' in mode and not path.exists():
        path.touch()

    # newline='\n' keeps output byte-identical across platforms
    with open(path, mode, encoding='utf-8', newline='\n') as f:
        portalocker.lock(f, lock_type)
        try:
            yield f
        finally:
            portalocker.unlock(f)


def locked_write_text(path: Path, text: str) -> None:
    """
    Replace the content of path with text, holding an exclusive lock.

    The file is opened without truncation (created first if missing) so
    the lock is taken before any existing content is discarded.

    Args:
        path: Output path (parent directories are created).
        text: Full file content.
    """
    with locked_file(path, 'r+', portalocker.LOCK_EX) as f:
        f.seek(0)
        f.truncate()
        f.write(text)

    logger.debug(f"Wrote {len(text)} chars to {path.name}")
