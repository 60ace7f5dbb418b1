"""Shared pytest fixtures for guttercrypt tests."""

from pathlib import Path

import pytest

# Low iteration count keeps key derivation fast in tests
TEST_ITERATIONS = 1_000
PASSPHRASE = "correct horse battery staple"
SAMPLE_ENV = "A=1\n# comment\n\nB=2\nNOVALUE\n"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Keep tests independent of the developer's environment and settings."""
    from guttercrypt.config.settings import configure

    for var in (
        "GEMINI_API_KEY",
        "GITHUB_TOKEN",
        "GH_TOKEN",
        "GEMINI_MODEL",
        "OLLAMA_BASE_URL",
        "OLLAMA_MODEL",
        "GUTTERCRYPT_AI_PROVIDER",
        "GUTTERCRYPT_AI_TIMEOUT",
        "GUTTERCRYPT_GIST_API",
        "GUTTERCRYPT_DIR",
        "GUTTERCRYPT_MAX_CONVERSATIONS",
        "LOG_LEVEL",
        "GUTTERCRYPT_LOG_FILE",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("GUTTERCRYPT_PBKDF2_ITERATIONS", str(TEST_ITERATIONS))

    configure(None)
    yield
    configure(None)


@pytest.fixture
def vault_config():
    """Vault configuration with a fast KDF."""
    from guttercrypt.vault import VaultConfig

    return VaultConfig(pbkdf2_iterations=TEST_ITERATIONS)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A clean project directory."""
    project = tmp_path / "project"
    project.mkdir()
    return project


@pytest.fixture
def vault_store(project_dir: Path, vault_config):
    """A created but empty vault."""
    from guttercrypt.vault import VaultStore

    store = VaultStore(project_dir, vault_config)
    store.create()
    return store


@pytest.fixture
def populated_vault(vault_store):
    """A vault holding SAMPLE_ENV."""
    vault_store.store(SAMPLE_ENV.encode("utf-8"), PASSPHRASE, source_file=".env")
    return vault_store


@pytest.fixture
def memory_store(project_dir: Path, vault_config):
    """A memory store for the project (no artifact yet)."""
    from guttercrypt.memory import MemoryStore

    return MemoryStore(project_dir, vault_config)


@pytest.fixture
def cli_project(project_dir: Path, monkeypatch) -> Path:
    """Run CLI commands from inside the project directory."""
    monkeypatch.chdir(project_dir)
    return project_dir


@pytest.fixture
def passphrase() -> str:
    """Passphrase used by the populated fixtures."""
    return PASSPHRASE


@pytest.fixture
def sample_env() -> str:
    """Sample KEY=VALUE document with a comment, a blank line and a bare key."""
    return SAMPLE_ENV
