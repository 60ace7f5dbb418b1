"""Storage layer for the encrypted memory log.

Memory is stored as one encrypted JSON document next to the vault:

    project_dir/.guttercrypt/memory.enc

Each operation loads, decrypts, mutates, re-encrypts and rewrites the
whole document.
"""

import json
from pathlib import Path
from typing import Optional

from ..utils.fileio import atomic_write_text
from ..utils.logging import get_logger
from ..vault.config import VaultConfig
from ..vault.crypto import EnvelopeCipher, Passphrase
from ..vault.exceptions import (
    DecryptionError,
    NoteIndexError,
    VaultCorruptedError,
    WrongPassphraseError,
)
from .models import Exchange, Memory, Note

logger = get_logger(__name__)


class MemoryStore:
    """Manages the memory artifact for a project.

    A missing artifact is a valid state and loads as empty memory.
    """

    def __init__(self, project_dir: Path, config: Optional[VaultConfig] = None):
        """Initialize storage for a project directory.

        Args:
            project_dir: Directory that owns the hidden vault directory
            config: Vault configuration (defaults if not provided)
        """
        self.project_dir = Path(project_dir).resolve()
        self.config = config or VaultConfig()
        self._cipher = EnvelopeCipher(self.config.pbkdf2_iterations)

    @property
    def memory_path(self) -> Path:
        """Path to the encrypted memory file."""
        return self.project_dir / self.config.vault_dir / self.config.memory_file

    @property
    def exists(self) -> bool:
        return self.memory_path.exists()

    def load(self, passphrase: Passphrase) -> Memory:
        """Load and decrypt memory.

        Returns:
            Memory (empty if no artifact exists)

        Raises:
            WrongPassphraseError: If decryption fails
            VaultCorruptedError: If the decrypted document is not valid memory
        """
        if not self.exists:
            return Memory()

        encoded = self.memory_path.read_text(encoding="ascii", errors="replace")
        try:
            plaintext = self._cipher.decrypt_text(encoded, passphrase)
        except DecryptionError:
            raise WrongPassphraseError()

        try:
            data = json.loads(plaintext.decode("utf-8"))
            return Memory.from_dict(data)
        except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise VaultCorruptedError(f"Memory data is corrupted: {e}")

    def save(self, memory: Memory, passphrase: Passphrase) -> None:
        """Encrypt and write memory, replacing the previous version."""
        self.memory_path.parent.mkdir(parents=True, exist_ok=True)

        plaintext = json.dumps(memory.to_dict(), ensure_ascii=False).encode("utf-8")
        encoded = self._cipher.encrypt_text(plaintext, passphrase)
        atomic_write_text(self.memory_path, encoded + "\n")
        logger.debug(
            "Saved memory (%d notes, %d conversations)",
            len(memory.notes),
            len(memory.conversations),
        )

    def add_note(self, text: str, passphrase: Passphrase) -> Note:
        """Append a note."""
        memory = self.load(passphrase)
        note = memory.add_note(text)
        self.save(memory, passphrase)
        return note

    def remove_note(self, index: int, passphrase: Passphrase) -> Note:
        """Remove the note at a zero-based index.

        Returns:
            The removed note

        Raises:
            NoteIndexError: If no note exists at index (nothing is written)
        """
        memory = self.load(passphrase)

        if index < 0 or index >= len(memory.notes):
            raise NoteIndexError(index, len(memory.notes))

        note = memory.notes.pop(index)
        self.save(memory, passphrase)
        return note

    def get_notes(self, passphrase: Passphrase) -> list[Note]:
        """Get all notes in insertion order."""
        return self.load(passphrase).notes

    def add_conversation(self, question: str, answer: str, passphrase: Passphrase) -> Exchange:
        """Record an exchange, keeping only the most recent ones."""
        memory = self.load(passphrase)
        exchange = memory.add_exchange(question, answer, self.config.max_conversations)
        self.save(memory, passphrase)
        return exchange
