"""Vault store for high-level secret document operations.

Handles vault creation, storing and injecting the encrypted document, and
the plaintext key-name sidecar.
"""

import json
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from ..utils.fileio import atomic_write_bytes, atomic_write_text
from ..utils.logging import get_logger
from .config import VaultConfig
from .crypto import EnvelopeCipher, Passphrase
from .exceptions import (
    DecryptionError,
    PassphraseRequiredError,
    SourceFileNotFoundError,
    VaultAlreadyExistsError,
    VaultCorruptedError,
    VaultNotFoundError,
    WrongPassphraseError,
)

logger = get_logger(__name__)

META_FORMAT_VERSION = 1


def parse_env_keys(contents: str) -> list[str]:
    """
    Extract key names from a KEY=VALUE document.

    Blank lines and ``#`` comments are skipped; lines without ``=`` count as
    a key in their entirety.
    """
    keys = []
    for line in contents.split("\n"):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key = line.split("=", 1)[0].strip()
        if key:
            keys.append(key)
    return keys


@dataclass
class VaultMeta:
    """
    Metadata stored in the vault.meta sidecar.

    This file is NOT encrypted - it contains only key names so that they
    can be listed without a passphrase. It never contains values.
    """

    format_version: int = META_FORMAT_VERSION
    stored_at: str = ""
    source_file: Optional[str] = None
    key_count: int = 0
    keys: list[str] = field(default_factory=list)
    raw_text: bool = False

    @classmethod
    def for_document(cls, plaintext: str, source_file: Optional[str] = None) -> "VaultMeta":
        """Build metadata for a KEY=VALUE document."""
        keys = parse_env_keys(plaintext)
        return cls(
            stored_at=datetime.now().isoformat(),
            source_file=source_file,
            key_count=len(keys),
            keys=keys,
        )

    @classmethod
    def for_raw_text(cls) -> "VaultMeta":
        """Build metadata for a free-form text payload."""
        return cls(stored_at=datetime.now().isoformat(), raw_text=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "formatVersion": self.format_version,
            "storedAt": self.stored_at,
            "sourceFile": self.source_file,
            "keyCount": self.key_count,
            "keys": list(self.keys),
            "rawText": self.raw_text,
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VaultMeta":
        """Create from dictionary.

        Accepts camelCase or snake_case field names, and ``version`` as an
        older name for the format version.
        """

        def get(camel: str, snake: str, default: Any = None) -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        keys = data.get("keys", [])
        if not isinstance(keys, list):
            raise ValueError("keys is not a list")
        keys = [str(k) for k in keys]

        format_version = get("formatVersion", "format_version", data.get("version", META_FORMAT_VERSION))
        return cls(
            format_version=int(format_version),
            stored_at=get("storedAt", "stored_at", ""),
            source_file=get("sourceFile", "source_file"),
            key_count=int(get("keyCount", "key_count", len(keys))),
            keys=keys,
            raw_text=bool(get("rawText", "raw_text", False)),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "VaultMeta":
        """Deserialize from JSON string."""
        try:
            data = json.loads(json_str)
            if not isinstance(data, dict):
                raise ValueError("metadata is not an object")
            return cls.from_dict(data)
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise VaultCorruptedError(f"Invalid vault metadata: {e}")


class VaultStore:
    """
    Owns the encrypted secret document of one project.

    Usage:
        store = VaultStore(project_dir, config)
        store.create()
        store.store_file(project_dir / ".env", passphrase)
        plaintext = store.inject(passphrase)
        keys = store.list_keys()  # no passphrase needed once stored

    Every call is a full load/decrypt or encrypt/write cycle; nothing is
    cached between calls.
    """

    def __init__(self, project_dir: Path, config: Optional[VaultConfig] = None):
        """
        Initialize vault store for a project directory.

        Args:
            project_dir: Directory that owns the hidden vault directory
            config: Vault configuration (defaults if not provided)
        """
        self.project_dir = Path(project_dir).resolve()
        self.config = config or VaultConfig()
        self._cipher = EnvelopeCipher(self.config.pbkdf2_iterations)

    @property
    def vault_path(self) -> Path:
        """Path to the hidden vault directory."""
        return self.project_dir / self.config.vault_dir

    @property
    def payload_path(self) -> Path:
        """Path to the encrypted document."""
        return self.vault_path / self.config.vault_file

    @property
    def metadata_path(self) -> Path:
        """Path to the vault.meta sidecar."""
        return self.vault_path / self.config.metadata_file

    @property
    def exists(self) -> bool:
        """Check if the vault directory has been created."""
        return self.vault_path.is_dir()

    @property
    def is_populated(self) -> bool:
        """Check if a document has been stored."""
        return self.payload_path.exists()

    def resolve(self, path: Path) -> Path:
        """Resolve a document path relative to the project directory."""
        return self.project_dir / Path(path)

    def create(self) -> Path:
        """
        Create an empty vault directory.

        Returns:
            Path to the vault directory

        Raises:
            VaultAlreadyExistsError: If the directory already exists
        """
        if self.vault_path.exists():
            raise VaultAlreadyExistsError(f"Vault already exists: {self.vault_path}")

        self.vault_path.mkdir(parents=True)
        logger.info("Created vault at %s", self.vault_path)
        return self.vault_path

    def read_metadata(self) -> Optional[VaultMeta]:
        """
        Load the metadata sidecar.

        Returns:
            VaultMeta, or None if no sidecar exists
        """
        if not self.metadata_path.exists():
            return None
        return VaultMeta.from_json(self.metadata_path.read_text(encoding="utf-8"))

    def _write(self, plaintext: bytes, passphrase: Passphrase, meta: VaultMeta) -> None:
        """
        Replace the payload, then the sidecar.

        The two files cannot be swapped together. If the sidecar write fails
        after the payload was replaced, the old sidecar is removed so that
        listing falls back to decrypting the new payload instead of reporting
        the previous document's keys.
        """
        if not self.exists:
            raise VaultNotFoundError(str(self.vault_path))

        encoded = self._cipher.encrypt_text(plaintext, passphrase)
        atomic_write_text(self.payload_path, encoded + "\n")
        try:
            atomic_write_text(self.metadata_path, meta.to_json())
        except BaseException:
            self.metadata_path.unlink(missing_ok=True)
            raise

    def store(
        self,
        plaintext: bytes,
        passphrase: Passphrase,
        source_file: Optional[str] = None,
    ) -> int:
        """
        Encrypt a KEY=VALUE document into the vault, replacing any prior one.

        Args:
            plaintext: Exact document bytes
            passphrase: User passphrase
            source_file: Name recorded in metadata

        Returns:
            Number of keys found in the document

        Raises:
            VaultNotFoundError: If the vault was never created
        """
        meta = VaultMeta.for_document(
            plaintext.decode("utf-8", errors="replace"),
            source_file=source_file,
        )
        self._write(plaintext, passphrase, meta)
        logger.info("Stored %d keys in vault", meta.key_count)
        return meta.key_count

    def store_file(self, path: Path, passphrase: Passphrase) -> int:
        """
        Read a document from disk and store it.

        Args:
            path: Document path (relative paths resolve against the project)
            passphrase: User passphrase

        Returns:
            Number of keys stored

        Raises:
            SourceFileNotFoundError: If the document does not exist
        """
        full_path = self.resolve(path)
        if not full_path.is_file():
            raise SourceFileNotFoundError(str(path))

        return self.store(full_path.read_bytes(), passphrase, source_file=str(path))

    def store_text(self, text: str, passphrase: Passphrase) -> None:
        """Store free-form text (not parsed for keys)."""
        self._write(text.encode("utf-8"), passphrase, VaultMeta.for_raw_text())
        logger.info("Stored raw text in vault")

    def inject(self, passphrase: Passphrase) -> bytes:
        """
        Decrypt the stored document.

        Returns:
            Exact document bytes

        Raises:
            VaultNotFoundError: If nothing has been stored
            WrongPassphraseError: If decryption fails for any reason
        """
        if not self.is_populated:
            raise VaultNotFoundError(str(self.payload_path))

        encoded = self.payload_path.read_text(encoding="ascii", errors="replace")
        try:
            return self._cipher.decrypt_text(encoded, passphrase)
        except DecryptionError:
            raise WrongPassphraseError()

    def inject_to_file(self, path: Path, passphrase: Passphrase) -> Path:
        """
        Decrypt the stored document and write it to disk.

        Args:
            path: Destination (relative paths resolve against the project)
            passphrase: User passphrase

        Returns:
            Path written
        """
        plaintext = self.inject(passphrase)
        full_path = self.resolve(path)
        atomic_write_bytes(full_path, plaintext)
        logger.info("Injected vault into %s", full_path)
        return full_path

    def list_keys(self, passphrase: Optional[Passphrase] = None) -> list[str]:
        """
        List key names in the vault.

        Uses the metadata sidecar when present, so no passphrase is needed;
        otherwise decrypts the payload.

        Raises:
            VaultNotFoundError: If nothing has been stored
            PassphraseRequiredError: If decryption is needed and passphrase is None
            WrongPassphraseError: If decryption fails
        """
        meta = self.read_metadata()
        if meta is not None:
            return list(meta.keys)

        if not self.is_populated:
            raise VaultNotFoundError(str(self.payload_path))

        if passphrase is None:
            raise PassphraseRequiredError()

        plaintext = self.inject(passphrase)
        return parse_env_keys(plaintext.decode("utf-8", errors="replace"))

    def lock(self, path: Path) -> None:
        """
        Delete the plaintext document, leaving only the encrypted copy.

        Raises:
            VaultNotFoundError: If the vault holds no document
            SourceFileNotFoundError: If the plaintext is already gone
        """
        full_path = self.resolve(path)
        if not full_path.exists():
            raise SourceFileNotFoundError(str(path))
        if not self.is_populated:
            raise VaultNotFoundError(str(self.payload_path))

        full_path.unlink()
        logger.info("Locked vault, removed %s", full_path)

    def unlock(self, path: Path, passphrase: Passphrase) -> Path:
        """Restore the plaintext document from the vault."""
        return self.inject_to_file(path, passphrase)

    def destroy(self) -> None:
        """
        Irreversibly remove the vault directory and everything in it.

        Raises:
            VaultNotFoundError: If there is no vault
        """
        if not self.vault_path.exists():
            raise VaultNotFoundError(str(self.vault_path))

        shutil.rmtree(self.vault_path)
        logger.info("Destroyed vault at %s", self.vault_path)
