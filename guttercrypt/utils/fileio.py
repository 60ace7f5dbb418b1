"""Crash-safe file writes.

Artifacts are written to a temp file in the target directory and renamed
over the destination, so an interrupted write leaves the previous version
in place.
"""

import os
import tempfile
from pathlib import Path


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """
    Atomically replace ``path`` with ``data``.

    Args:
        path: Destination file (its parent directory must exist)
        data: Bytes to write
    """
    path = Path(path)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except BaseException:
        # Prior version of path is untouched; only the temp file goes
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """Atomically replace ``path`` with ``text``."""
    atomic_write_bytes(path, text.encode(encoding))
