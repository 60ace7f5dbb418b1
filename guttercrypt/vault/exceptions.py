"""Vault exceptions for guttercrypt."""


class VaultError(Exception):
    """Base exception for vault operations."""

    pass


class WrongPassphraseError(VaultError):
    """Raised when a payload cannot be decrypted with the given passphrase.

    Covers both a wrong passphrase and tampered or truncated data; the two
    cases are indistinguishable on purpose.
    """

    def __init__(self, message: str = "Wrong passphrase."):
        super().__init__(message)


class PassphraseRequiredError(VaultError):
    """Raised when an operation needs to decrypt but no passphrase was given."""

    def __init__(self, message: str = "A passphrase is required for this operation."):
        super().__init__(message)


class VaultNotFoundError(VaultError):
    """Raised when the vault directory or payload does not exist."""

    def __init__(self, path: str = ""):
        message = f"Vault not found: {path}" if path else "Vault not found."
        super().__init__(message)


class VaultAlreadyExistsError(VaultError):
    """Raised when trying to initialize a vault that already exists."""

    def __init__(self, message: str = "Vault already exists."):
        super().__init__(message)


class VaultCorruptedError(VaultError):
    """Raised when vault metadata or memory contents are corrupted."""

    def __init__(self, message: str = "Vault data is corrupted."):
        super().__init__(message)


class SourceFileNotFoundError(VaultError):
    """Raised when a plaintext document to store or lock is missing."""

    def __init__(self, path: str = ""):
        message = f"File not found: {path}" if path else "File not found."
        super().__init__(message)
        self.path = path


class NoteIndexError(VaultError, IndexError):
    """Raised when a note index does not address an existing note."""

    def __init__(self, index: int, count: int):
        super().__init__(f"Invalid note index {index} (have {count} notes).")
        self.index = index
        self.count = count


class DecryptionError(VaultError):
    """Raised when an envelope fails authentication or is malformed."""

    def __init__(self, message: str = "Failed to decrypt payload."):
        super().__init__(message)


class EncryptionError(VaultError):
    """Raised when encryption fails."""

    def __init__(self, message: str = "Failed to encrypt payload."):
        super().__init__(message)
