"""Encrypted memory for the guttercrypt assistant.

Notes the user asks to keep and a bounded history of assistant exchanges,
stored as one encrypted JSON document inside the vault directory.
"""

from .context import build_prompt_context
from .models import (
    MEMORY_FORMAT_VERSION,
    Exchange,
    Memory,
    Note,
)
from .storage import MemoryStore

__all__ = [
    # Models
    "Memory",
    "Note",
    "Exchange",
    "MEMORY_FORMAT_VERSION",
    # Storage
    "MemoryStore",
    # Context
    "build_prompt_context",
]
