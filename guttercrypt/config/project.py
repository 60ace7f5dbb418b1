"""Project-local configuration stored next to the vault.

The config file is plain JSON and is NOT encrypted. It holds the assistant
provider choice, an optional API key, an optional GitHub token and the id of
the linked sync gist.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..utils.fileio import atomic_write_text
from ..utils.logging import get_logger
from ..vault.config import VaultConfig

logger = get_logger(__name__)

# Attribute name -> field name in the JSON file
FIELD_NAMES = {
    "ai_provider": "aiProvider",
    "api_key": "geminiApiKey",
    "gist_id": "gistId",
    "github_token": "githubToken",
}


@dataclass
class ProjectConfig:
    """Contents of the local config artifact."""

    ai_provider: Optional[str] = None
    api_key: Optional[str] = None
    gist_id: Optional[str] = None
    github_token: Optional[str] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = dict(self.extra)
        for name, key in FIELD_NAMES.items():
            value = getattr(self, name)
            if value is not None:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectConfig":
        """Create from dictionary, keeping unknown keys.

        Attribute names are accepted as an alternative spelling.
        """
        known = set(FIELD_NAMES) | set(FIELD_NAMES.values())
        values = {name: data.get(key, data.get(name)) for name, key in FIELD_NAMES.items()}
        return cls(
            **values,
            extra={k: v for k, v in data.items() if k not in known},
        )


def config_path(project_dir: Path, config: Optional[VaultConfig] = None) -> Path:
    """Path to the local config file."""
    config = config or VaultConfig()
    return Path(project_dir) / config.vault_dir / config.config_file


def load_project_config(project_dir: Path, config: Optional[VaultConfig] = None) -> ProjectConfig:
    """
    Read the local config.

    A missing or unreadable file yields an empty config.
    """
    path = config_path(project_dir, config)
    if not path.exists():
        return ProjectConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return ProjectConfig()

    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: not a JSON object", path)
        return ProjectConfig()

    return ProjectConfig.from_dict(data)


def save_project_config(
    project_config: ProjectConfig,
    project_dir: Path,
    config: Optional[VaultConfig] = None,
) -> Path:
    """Write the local config, creating the vault directory if needed."""
    path = config_path(project_dir, config)
    path.parent.mkdir(parents=True, exist_ok=True)
    atomic_write_text(path, json.dumps(project_config.to_dict(), indent=2))
    return path
