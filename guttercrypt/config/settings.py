"""Configuration settings for guttercrypt.

Settings come from the environment and are only read by the CLI layer;
the vault and memory stores take an explicit VaultConfig instead.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..vault.config import VaultConfig


@dataclass
class GeminiConfig:
    """Configuration for the Gemini REST API."""

    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    model: str = "gemini-2.0-flash"
    api_key: Optional[str] = field(default_factory=lambda: os.getenv("GEMINI_API_KEY"))


@dataclass
class OllamaConfig:
    """Configuration for a local Ollama server."""

    base_url: str = "http://localhost:11434"
    model: str = "llama3.2:latest"


@dataclass
class AIConfig:
    """Configuration for the assistant."""

    provider: Optional[str] = None  # "gemini" or "ollama"; None = auto
    timeout: int = 60  # Seconds
    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    ollama: OllamaConfig = field(default_factory=OllamaConfig)


@dataclass
class SyncConfig:
    """Configuration for GitHub Gist sync."""

    api_url: str = "https://api.github.com/gists"
    timeout: int = 30
    description: str = "guttercrypt vault sync"


@dataclass
class Settings:
    """Main settings container."""

    vault: VaultConfig = field(default_factory=VaultConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        settings = cls(vault=VaultConfig.from_env())

        if provider := os.getenv("GUTTERCRYPT_AI_PROVIDER"):
            settings.ai.provider = provider.lower()

        if model := os.getenv("GEMINI_MODEL"):
            settings.ai.gemini.model = model

        if url := os.getenv("OLLAMA_BASE_URL"):
            settings.ai.ollama.base_url = url

        if model := os.getenv("OLLAMA_MODEL"):
            settings.ai.ollama.model = model

        if timeout := os.getenv("GUTTERCRYPT_AI_TIMEOUT"):
            settings.ai.timeout = int(timeout)

        if url := os.getenv("GUTTERCRYPT_GIST_API"):
            settings.sync.api_url = url

        if log_level := os.getenv("LOG_LEVEL"):
            settings.log_level = log_level

        if log_file := os.getenv("GUTTERCRYPT_LOG_FILE"):
            settings.log_file = Path(log_file)

        return settings


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Set the global settings instance (None resets to environment)."""
    global _settings
    _settings = settings
