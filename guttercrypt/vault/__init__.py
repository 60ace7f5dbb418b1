"""Vault encryption module for guttercrypt.

Keeps a project's secret document encrypted with a passphrase, plus a
plaintext sidecar listing its key names.

Usage:
    from guttercrypt.vault import VaultConfig, VaultStore

    store = VaultStore(project_dir, VaultConfig())
    store.create()
    store.store_file(".env", passphrase)
    store.unlock(".env", passphrase)
"""

# Exceptions
from .exceptions import (
    DecryptionError,
    EncryptionError,
    NoteIndexError,
    PassphraseRequiredError,
    SourceFileNotFoundError,
    VaultAlreadyExistsError,
    VaultCorruptedError,
    VaultError,
    VaultNotFoundError,
    WrongPassphraseError,
)

# Configuration
from .config import VaultConfig

# Crypto primitives
from .crypto import (
    Envelope,
    EnvelopeCipher,
    KeyDerivation,
)

# Vault operations
from .vault_manager import (
    VaultMeta,
    VaultStore,
    parse_env_keys,
)

__all__ = [
    # Exceptions
    "VaultError",
    "WrongPassphraseError",
    "PassphraseRequiredError",
    "VaultNotFoundError",
    "VaultAlreadyExistsError",
    "VaultCorruptedError",
    "SourceFileNotFoundError",
    "NoteIndexError",
    "DecryptionError",
    "EncryptionError",
    # Configuration
    "VaultConfig",
    # Crypto
    "KeyDerivation",
    "Envelope",
    "EnvelopeCipher",
    # Vault store
    "VaultMeta",
    "VaultStore",
    "parse_env_keys",
]
