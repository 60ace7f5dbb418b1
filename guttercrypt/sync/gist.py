"""GitHub Gist sync for vault artifacts.

Pushes the encrypted payload, the metadata sidecar and the encrypted memory
to a secret gist and pulls them back. Artifacts travel as opaque text and are
written back byte-for-byte; nothing here decrypts them. The last writer wins.
"""

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import httpx

from ..config.project import load_project_config, save_project_config
from ..config.settings import SyncConfig
from ..utils.fileio import atomic_write_text
from ..utils.logging import get_logger
from ..vault.config import VaultConfig

logger = get_logger(__name__)

# Error codes
NO_TOKEN = "no_token"
NO_VAULT = "no_vault"
NO_GIST_LINKED = "no_gist_linked"
GIST_NOT_FOUND = "gist_not_found"
AUTH_FAILED = "auth_failed"
NOT_A_VAULT_GIST = "not_a_vault_gist"
API_ERROR = "api_error"
NETWORK_ERROR = "network_error"


@dataclass
class SyncResult:
    """Outcome of a sync operation."""

    success: bool = True
    error: Optional[str] = None
    message: Optional[str] = None
    gist_id: Optional[str] = None
    gist_url: Optional[str] = None
    created: bool = False
    files_updated: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, message: Optional[str] = None) -> "SyncResult":
        return cls(success=False, error=error, message=message)


def _status_failure(response: httpx.Response) -> Optional[SyncResult]:
    if response.status_code == 404:
        return SyncResult.failure(GIST_NOT_FOUND)
    if response.status_code in (401, 403):
        return SyncResult.failure(AUTH_FAILED)
    if not response.is_success:
        return SyncResult.failure(API_ERROR, f"HTTP {response.status_code}")
    return None


def gh_cli_token() -> Optional[str]:
    """Ask the GitHub CLI for a token, if it is installed and logged in."""
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


class GistSync:
    """Syncs one project's vault directory with a GitHub gist."""

    def __init__(
        self,
        project_dir: Path,
        vault_config: Optional[VaultConfig] = None,
        config: Optional[SyncConfig] = None,
        token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize gist sync.

        Args:
            project_dir: Directory that owns the vault directory
            vault_config: Artifact layout
            config: Gist API settings
            token: GitHub token (looked up if not provided)
            client: Preconfigured httpx client (for tests)
        """
        self.project_dir = Path(project_dir).resolve()
        self.vault_config = vault_config or VaultConfig()
        self.config = config or SyncConfig()
        self._token = token
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=self.config.timeout)

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GistSync":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def vault_path(self) -> Path:
        return self.project_dir / self.vault_config.vault_dir

    @property
    def artifact_names(self) -> tuple[str, str, str]:
        """Files carried by sync, payload first."""
        return (
            self.vault_config.vault_file,
            self.vault_config.metadata_file,
            self.vault_config.memory_file,
        )

    def get_token(self) -> Optional[str]:
        """Resolve a GitHub token: explicit, environment, local config, gh CLI."""
        if self._token:
            return self._token
        for var in ("GITHUB_TOKEN", "GH_TOKEN"):
            if token := os.getenv(var):
                return token
        project_config = load_project_config(self.project_dir, self.vault_config)
        if project_config.github_token:
            return project_config.github_token
        return gh_cli_token()

    def get_gist_id(self) -> Optional[str]:
        return load_project_config(self.project_dir, self.vault_config).gist_id

    def save_gist_id(self, gist_id: str) -> None:
        project_config = load_project_config(self.project_dir, self.vault_config)
        project_config.gist_id = gist_id
        save_project_config(project_config, self.project_dir, self.vault_config)

    def _headers(self, token: str) -> dict[str, str]:
        return {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github+json",
        }

    def _collect_files(self) -> dict[str, dict[str, str]]:
        files = {}
        for name in self.artifact_names:
            path = self.vault_path / name
            if path.exists():
                files[name] = {"content": path.read_text(encoding="utf-8")}
        return files

    def _request(self, method: str, url: str, token: str, **kwargs: Any) -> httpx.Response:
        return self._client.request(method, url, headers=self._headers(token), **kwargs)

    def push(self) -> SyncResult:
        """
        Upload artifacts, creating a secret gist on first push.

        Returns:
            SyncResult with gist id/url and whether the gist was created
        """
        token = self.get_token()
        if not token:
            return SyncResult.failure(NO_TOKEN)

        if not (self.vault_path / self.vault_config.vault_file).exists():
            return SyncResult.failure(NO_VAULT)

        files = self._collect_files()
        gist_id = self.get_gist_id()

        try:
            if gist_id:
                response = self._request(
                    "PATCH", f"{self.config.api_url}/{gist_id}", token, json={"files": files}
                )
            else:
                response = self._request(
                    "POST",
                    self.config.api_url,
                    token,
                    json={
                        "description": self.config.description,
                        "public": False,
                        "files": files,
                    },
                )
        except httpx.HTTPError as e:
            return SyncResult.failure(NETWORK_ERROR, str(e))

        if failure := _status_failure(response):
            return failure

        try:
            data = response.json()
        except ValueError as e:
            return SyncResult.failure(API_ERROR, f"Unexpected response: {e}")

        created = gist_id is None
        if created:
            self.save_gist_id(data["id"])

        logger.info("Pushed %d files to gist %s", len(files), data.get("id"))
        return SyncResult(
            gist_id=data.get("id"),
            gist_url=data.get("html_url"),
            created=created,
            files_updated=sorted(files),
        )

    def _fetch(self, gist_id: str, token: str) -> tuple[Optional[dict[str, Any]], Optional[SyncResult]]:
        try:
            response = self._request("GET", f"{self.config.api_url}/{gist_id}", token)
        except httpx.HTTPError as e:
            return None, SyncResult.failure(NETWORK_ERROR, str(e))

        if failure := _status_failure(response):
            return None, failure

        try:
            return response.json(), None
        except ValueError as e:
            return None, SyncResult.failure(API_ERROR, f"Unexpected response: {e}")

    def pull(self) -> SyncResult:
        """
        Download artifacts from the linked gist, overwriting local copies.

        Returns:
            SyncResult listing the files written
        """
        token = self.get_token()
        if not token:
            return SyncResult.failure(NO_TOKEN)

        gist_id = self.get_gist_id()
        if not gist_id:
            return SyncResult.failure(NO_GIST_LINKED)

        data, failure = self._fetch(gist_id, token)
        if failure:
            return failure

        gist_files = data.get("files") or {}
        self.vault_path.mkdir(parents=True, exist_ok=True)

        files_updated = []
        for name in self.artifact_names:
            entry = gist_files.get(name)
            if not entry:
                continue
            atomic_write_text(self.vault_path / name, entry.get("content", ""))
            files_updated.append(name)

        logger.info("Pulled %d files from gist %s", len(files_updated), gist_id)
        return SyncResult(gist_id=gist_id, gist_url=data.get("html_url"), files_updated=files_updated)

    def link(self, gist_id: str) -> SyncResult:
        """
        Link this project to an existing vault gist.

        The gist must contain a vault payload. Nothing is downloaded.
        """
        token = self.get_token()
        if not token:
            return SyncResult.failure(NO_TOKEN)

        data, failure = self._fetch(gist_id, token)
        if failure:
            return failure

        gist_files = data.get("files") or {}
        if self.vault_config.vault_file not in gist_files:
            return SyncResult.failure(NOT_A_VAULT_GIST)

        self.save_gist_id(gist_id)
        return SyncResult(gist_id=gist_id, gist_url=data.get("html_url"))
