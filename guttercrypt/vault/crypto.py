"""Core cryptographic primitives for the vault.

Uses the cryptography library for:
- PBKDF2-HMAC-SHA512 key derivation (100,000 iterations by default)
- AES-256-GCM authenticated encryption

Every encryption produces a self-describing envelope:

    [salt (32 bytes)] [nonce (16 bytes)] [tag (16 bytes)] [ciphertext]

On disk the envelope is kept as a single base64 line.
"""

import base64
import binascii
import os
from dataclasses import dataclass
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .exceptions import DecryptionError, EncryptionError

# Key derivation parameters
PBKDF2_ITERATIONS = 100_000
SALT_SIZE = 32  # 256 bits
KEY_SIZE = 32  # 256 bits for AES-256

# Envelope parameters
NONCE_SIZE = 16  # 128 bits
TAG_SIZE = 16  # 128-bit authentication tag
HEADER_SIZE = SALT_SIZE + NONCE_SIZE + TAG_SIZE

Passphrase = Union[str, bytes]


def _passphrase_bytes(passphrase: Passphrase) -> bytes:
    if isinstance(passphrase, str):
        return passphrase.encode("utf-8")
    return bytes(passphrase)


class KeyDerivation:
    """Derives encryption keys from a passphrase using PBKDF2."""

    @staticmethod
    def generate_salt() -> bytes:
        """Generate cryptographically secure random salt."""
        return os.urandom(SALT_SIZE)

    @staticmethod
    def derive_key(
        passphrase: Passphrase,
        salt: bytes,
        iterations: int = PBKDF2_ITERATIONS,
    ) -> bytes:
        """
        Derive a 256-bit key from a passphrase using PBKDF2-HMAC-SHA512.

        Args:
            passphrase: User passphrase (str is UTF-8 encoded)
            salt: Random salt (stored with the encrypted data)
            iterations: PBKDF2 iteration count

        Returns:
            32-byte derived key
        """
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA512(),
            length=KEY_SIZE,
            salt=salt,
            iterations=iterations,
        )
        return kdf.derive(_passphrase_bytes(passphrase))


@dataclass(frozen=True)
class Envelope:
    """Parsed form of an encrypted payload."""

    salt: bytes
    nonce: bytes
    auth_tag: bytes
    ciphertext: bytes

    def to_bytes(self) -> bytes:
        """Serialize as salt || nonce || tag || ciphertext."""
        return self.salt + self.nonce + self.auth_tag + self.ciphertext

    @classmethod
    def from_bytes(cls, data: bytes) -> "Envelope":
        """
        Split a serialized envelope into its parts.

        Raises:
            DecryptionError: If the data is too short to be an envelope
        """
        if len(data) < HEADER_SIZE:
            raise DecryptionError("Malformed envelope")

        offset = 0
        salt = data[offset:offset + SALT_SIZE]
        offset += SALT_SIZE
        nonce = data[offset:offset + NONCE_SIZE]
        offset += NONCE_SIZE
        auth_tag = data[offset:offset + TAG_SIZE]
        offset += TAG_SIZE

        return cls(salt=salt, nonce=nonce, auth_tag=auth_tag, ciphertext=data[offset:])


class EnvelopeCipher:
    """
    AES-256-GCM encryption of whole payloads under a passphrase.

    A fresh salt and nonce are generated for every call, so the derived key
    differs per envelope and a nonce is never reused under the same key.
    Keys are derived inside each call and not kept on the instance.
    """

    def __init__(self, iterations: int = PBKDF2_ITERATIONS):
        self.iterations = iterations

    def encrypt(self, plaintext: bytes, passphrase: Passphrase) -> bytes:
        """
        Encrypt data.

        Args:
            plaintext: Data to encrypt
            passphrase: User passphrase

        Returns:
            Serialized envelope bytes
        """
        salt = KeyDerivation.generate_salt()
        nonce = os.urandom(NONCE_SIZE)

        try:
            key = KeyDerivation.derive_key(passphrase, salt, self.iterations)
            sealed = AESGCM(key).encrypt(nonce, plaintext, None)
        except Exception as e:
            raise EncryptionError(f"AES-GCM encryption failed: {e}")

        # AESGCM appends the tag to the ciphertext
        envelope = Envelope(
            salt=salt,
            nonce=nonce,
            auth_tag=sealed[-TAG_SIZE:],
            ciphertext=sealed[:-TAG_SIZE],
        )
        return envelope.to_bytes()

    def decrypt(self, data: bytes, passphrase: Passphrase) -> bytes:
        """
        Decrypt and authenticate an envelope.

        Args:
            data: Serialized envelope bytes
            passphrase: User passphrase

        Returns:
            Decrypted plaintext

        Raises:
            DecryptionError: Wrong passphrase, tampered data or malformed
                envelope. The cases are not distinguished.
        """
        envelope = Envelope.from_bytes(data)
        key = KeyDerivation.derive_key(passphrase, envelope.salt, self.iterations)

        try:
            return AESGCM(key).decrypt(
                envelope.nonce,
                envelope.ciphertext + envelope.auth_tag,
                None,
            )
        except (InvalidTag, ValueError):
            raise DecryptionError("Invalid ciphertext or wrong key")

    def encrypt_text(self, plaintext: bytes, passphrase: Passphrase) -> str:
        """Encrypt and return the envelope as a base64 line."""
        return base64.b64encode(self.encrypt(plaintext, passphrase)).decode("ascii")

    def decrypt_text(self, encoded: str, passphrase: Passphrase) -> bytes:
        """Decrypt an envelope stored as a base64 line."""
        try:
            data = base64.b64decode(encoded.strip(), validate=True)
        except (binascii.Error, ValueError):
            raise DecryptionError("Malformed envelope")
        return self.decrypt(data, passphrase)
