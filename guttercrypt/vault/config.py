"""Vault configuration for guttercrypt."""

import os
from dataclasses import dataclass


@dataclass
class VaultConfig:
    """Configuration for vault and memory storage.

    Passed explicitly into every store together with the project directory;
    the stores never look at the environment or the working directory.
    """

    # Key derivation
    pbkdf2_iterations: int = 100_000
    salt_size: int = 32  # 256 bits
    nonce_size: int = 16  # 128 bits
    key_size: int = 32  # 256 bits for AES-256

    # Artifact layout (all inside vault_dir)
    vault_dir: str = ".guttercrypt"
    vault_file: str = "vault.enc"
    metadata_file: str = "vault.meta"
    memory_file: str = "memory.enc"
    config_file: str = "config"

    # Memory
    max_conversations: int = 20

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            GUTTERCRYPT_DIR: Name of the project-local vault directory
            GUTTERCRYPT_PBKDF2_ITERATIONS: PBKDF2 iteration count (default: 100000)
            GUTTERCRYPT_MAX_CONVERSATIONS: Conversation history bound (default: 20)
        """
        config = cls()

        if vault_dir := os.getenv("GUTTERCRYPT_DIR"):
            config.vault_dir = vault_dir

        if iterations := os.getenv("GUTTERCRYPT_PBKDF2_ITERATIONS"):
            config.pbkdf2_iterations = int(iterations)

        if max_conversations := os.getenv("GUTTERCRYPT_MAX_CONVERSATIONS"):
            config.max_conversations = int(max_conversations)

        return config
