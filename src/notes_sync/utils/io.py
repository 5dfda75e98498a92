"""File I/O helpers for atomic writes."""

import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import IO

from notes_sync.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def atomic_write(path: str | Path, encoding: str = "utf-8") -> Iterator[IO[str]]:
    """
    Context manager for atomic text file writing.

    Writes to a temporary file in the target's directory, then renames it
    over the target, so a note file is never left half-written.

    Example:
        with atomic_write(notes_dir / "my-note.md") as f:
            f.write(text)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".tmp_{path.name}_")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(temp_fd, "w", encoding=encoding, newline="") as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        # mkstemp creates 0600 files
        temp_path.chmod(path.stat().st_mode & 0o777 if path.exists() else 0o644)
        temp_path.replace(path)
    except BaseException as e:
        with suppress(OSError):
            temp_path.unlink()
        logger.error("atomic_write_failed", path=str(path), error=str(e))
        raise


def write_text_atomic(path: str | Path, content: str) -> None:
    """Replace the contents of ``path`` with ``content`` atomically."""
    with atomic_write(path) as f:
        f.write(content)
