"""guttercrypt - local passphrase-encrypted secrets vault."""

__version__ = "1.0.0"

from .memory import Memory, MemoryStore, build_prompt_context
from .vault import VaultConfig, VaultError, VaultMeta, VaultStore

__all__ = [
    "__version__",
    "VaultConfig",
    "VaultError",
    "VaultMeta",
    "VaultStore",
    "Memory",
    "MemoryStore",
    "build_prompt_context",
]
