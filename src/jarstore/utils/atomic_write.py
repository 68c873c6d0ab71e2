"""
Atomic file operations for jarstore.

Writes either complete or leave the destination as it was: content goes to
a temporary file in the destination directory, which is then renamed over
the target. On POSIX and Windows, ``os.replace`` within one filesystem is
atomic.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Union


def _fsync_dir(directory: Path) -> None:
    try:
        dir_fd = os.open(str(directory), os.O_RDONLY | os.O_DIRECTORY)
    except (OSError, AttributeError):
        # O_DIRECTORY not available on all platforms
        return
    try:
        os.fsync(dir_fd)
    except OSError:
        pass
    finally:
        os.close(dir_fd)


def atomic_write_bytes(path: Union[str, Path], content: bytes, mode: int = 0o644) -> None:
    """
    Write binary content to file atomically.

    Args:
        path: Destination file path (parent directories are created)
        content: Binary content to write
        mode: File permissions (default 0o644)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
    )

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise

    _fsync_dir(path.parent)


def atomic_write_text(path: Union[str, Path], content: str, mode: int = 0o644) -> None:
    """Write UTF-8 text atomically. No newline is appended."""
    atomic_write_bytes(path, content.encode("utf-8"), mode)


def atomic_replace(src: Union[str, Path], dst: Union[str, Path]) -> None:
    """
    Move ``src`` over ``dst`` in a single rename.

    Both paths must be on the same filesystem; ``dst`` is either the old
    file or the new one, never a partial write.
    """
    dst = Path(dst)
    os.replace(src, dst)
    _fsync_dir(dst.parent)
