"""Utility modules for guttercrypt.

Provides common utilities:
- Logging configuration
- Atomic file writes
"""

from .fileio import (
    atomic_write_bytes,
    atomic_write_text,
)
from .logging import (
    console,
    get_logger,
    setup_logging,
)


__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "console",
    # File I/O
    "atomic_write_bytes",
    "atomic_write_text",
]
