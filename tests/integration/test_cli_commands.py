"""Integration tests for CLI commands."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from guttercrypt.cli.main import app


runner = CliRunner()

PASS = "hunter2hunter2"
TWICE = f"{PASS}\n{PASS}\n"
ONCE = f"{PASS}\n"


@pytest.fixture
def initialized(cli_project: Path) -> Path:
    """A project with an empty vault, run from inside it."""
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    return cli_project


@pytest.fixture
def stored(initialized: Path, sample_env: str) -> Path:
    """A project whose .env has been stored."""
    (initialized / ".env").write_text(sample_env)
    result = runner.invoke(app, ["store"], input=TWICE)
    assert result.exit_code == 0
    return initialized


class TestInitCommand:
    """Tests for the init command."""

    def test_init_creates_vault(self, cli_project: Path):
        """'init' creates the vault directory."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "Vault created" in result.output
        assert (cli_project / ".guttercrypt").is_dir()

    def test_init_twice_fails(self, initialized: Path):
        """'init' refuses to overwrite an existing vault."""
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 1
        assert "already exists" in result.output


class TestStoreCommand:
    """Tests for store and store-text."""

    def test_store_without_vault(self, cli_project: Path):
        """'store' before 'init' exits with error."""
        (cli_project / ".env").write_text("A=1\n")

        result = runner.invoke(app, ["store"], input=TWICE)

        assert result.exit_code == 1
        assert "guttercrypt init" in result.output

    def test_store_reports_key_count(self, initialized: Path, sample_env: str):
        """'store' counts the KEY=VALUE lines."""
        (initialized / ".env").write_text(sample_env)

        result = runner.invoke(app, ["store"], input=TWICE)

        assert result.exit_code == 0
        assert "Stored 3 secrets" in result.output
        assert (initialized / ".guttercrypt" / "vault.enc").exists()

    def test_store_named_file(self, initialized: Path):
        """'store FILE' reads the given file."""
        (initialized / "prod.env").write_text("ONLY=1\n")

        result = runner.invoke(app, ["store", "prod.env"], input=TWICE)

        assert result.exit_code == 0
        assert "Stored 1 secret from prod.env" in result.output

    def test_store_missing_file(self, initialized: Path):
        """'store' fails before prompting when the file is missing."""
        result = runner.invoke(app, ["store", "nope.env"])

        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_store_passphrase_mismatch(self, initialized: Path):
        """Mismatched confirmation re-prompts; nothing stored on abort."""
        (initialized / ".env").write_text("A=1\n")

        result = runner.invoke(app, ["store"], input=f"{PASS}\nother\n")

        assert result.exit_code != 0
        assert not (initialized / ".guttercrypt" / "vault.enc").exists()

    def test_store_text(self, initialized: Path):
        """'store-text' stores free-form text and 'list' says so."""
        result = runner.invoke(app, ["store-text", "just a sentence"], input=TWICE)
        assert result.exit_code == 0

        listed = runner.invoke(app, ["list"])

        assert listed.exit_code == 0
        assert "raw text" in listed.output


class TestListCommand:
    """Tests for the list command."""

    def test_list_needs_no_passphrase(self, stored: Path):
        """'list' reads key names from metadata."""
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "- A" in result.output
        assert "- B" in result.output
        assert "Passphrase" not in result.output

    def test_list_never_shows_values(self, initialized: Path):
        """'list' prints names only."""
        (initialized / ".env").write_text("API_KEY=sk-live-123\n")
        runner.invoke(app, ["store"], input=TWICE)

        result = runner.invoke(app, ["list"])

        assert "API_KEY" in result.output
        assert "sk-live-123" not in result.output

    def test_list_falls_back_to_passphrase(self, stored: Path):
        """Without metadata, 'list' decrypts the payload."""
        (stored / ".guttercrypt" / "vault.meta").unlink()

        result = runner.invoke(app, ["list"], input=ONCE)

        assert result.exit_code == 0
        assert "- A" in result.output

    def test_list_empty_vault(self, initialized: Path):
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "empty" in result.output


class TestLockUnlockCommands:
    """Tests for inject, lock and unlock."""

    def test_lock_then_unlock(self, stored: Path, sample_env: str):
        """Sealing deletes the file and unsealing restores it exactly."""
        locked = runner.invoke(app, ["lock"])
        assert locked.exit_code == 0
        assert not (stored / ".env").exists()

        unlocked = runner.invoke(app, ["unlock"], input=ONCE)

        assert unlocked.exit_code == 0
        assert (stored / ".env").read_text() == sample_env

    def test_unlock_wrong_passphrase(self, stored: Path):
        runner.invoke(app, ["lock"])

        result = runner.invoke(app, ["unlock"], input="wrong\n")

        assert result.exit_code == 1
        assert "Wrong passphrase" in result.output
        assert not (stored / ".env").exists()

    def test_lock_missing_file(self, stored: Path):
        (stored / ".env").unlink()

        result = runner.invoke(app, ["lock"])

        assert result.exit_code == 1
        assert "already locked" in result.output

    def test_lock_without_payload_keeps_file(self, initialized: Path):
        """'lock' refuses to delete a file that was never stored."""
        (initialized / ".env").write_text("A=1\n")

        result = runner.invoke(app, ["lock"])

        assert result.exit_code == 1
        assert (initialized / ".env").exists()

    def test_inject_to_other_file(self, stored: Path, sample_env: str):
        result = runner.invoke(app, ["inject", "restored.env"], input=ONCE)

        assert result.exit_code == 0
        assert (stored / "restored.env").read_text() == sample_env

    def test_inject_empty_vault(self, initialized: Path):
        result = runner.invoke(app, ["inject"])

        assert result.exit_code == 1
        assert "empty" in result.output


class TestNukeCommand:
    """Tests for the nuke command."""

    def test_nuke_cancelled(self, stored: Path):
        result = runner.invoke(app, ["nuke"], input="no\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert (stored / ".guttercrypt" / "vault.enc").exists()

    def test_nuke_confirmed(self, stored: Path):
        """The exact phrase removes the vault directory."""
        result = runner.invoke(app, ["nuke"], input="burn it down\n")

        assert result.exit_code == 0
        assert not (stored / ".guttercrypt").exists()
        assert (stored / ".env").exists()


class TestNoteCommands:
    """Tests for note add/list/remove."""

    def test_note_add_and_list(self, initialized: Path):
        added = runner.invoke(app, ["note", "add", "prod db is read-only"], input=ONCE)
        assert added.exit_code == 0
        assert "Note saved" in added.output

        listed = runner.invoke(app, ["note", "list"], input=ONCE)

        assert listed.exit_code == 0
        assert "1. prod db is read-only" in listed.output

    def test_note_list_empty(self, initialized: Path):
        result = runner.invoke(app, ["note", "list"], input=ONCE)

        assert result.exit_code == 0
        assert "No notes yet" in result.output

    def test_note_remove_is_one_based(self, initialized: Path):
        runner.invoke(app, ["note", "add", "first"], input=ONCE)
        runner.invoke(app, ["note", "add", "second"], input=ONCE)

        result = runner.invoke(app, ["note", "remove", "1"], input=ONCE)

        assert result.exit_code == 0
        assert "Removed note: first" in result.output
        listed = runner.invoke(app, ["note", "list"], input=ONCE)
        assert "1. second" in listed.output

    def test_note_remove_out_of_range(self, initialized: Path):
        runner.invoke(app, ["note", "add", "only"], input=ONCE)

        result = runner.invoke(app, ["note", "remove", "5"], input=ONCE)

        assert result.exit_code == 1
        assert "Error" in result.output

    def test_note_wrong_passphrase(self, initialized: Path):
        runner.invoke(app, ["note", "add", "x"], input=ONCE)

        result = runner.invoke(app, ["note", "list"], input="wrong\n")

        assert result.exit_code == 1
        assert "Wrong passphrase" in result.output

    def test_note_without_vault(self, cli_project: Path):
        result = runner.invoke(app, ["note", "add", "x"], input=ONCE)

        assert result.exit_code == 1
        assert "guttercrypt init" in result.output


class TestAskCommand:
    """Tests for the ask command (no network)."""

    def test_ask_without_api_key(self, cli_project: Path):
        result = runner.invoke(app, ["ask", "--no-memory", "how", "do", "i", "rotate?"])

        assert result.exit_code == 1
        assert "No API key" in result.output


class TestConfigCommands:
    """Tests for config provider/api-key/show."""

    def test_set_provider(self, cli_project: Path):
        from guttercrypt.config.project import load_project_config

        result = runner.invoke(app, ["config", "provider", "Ollama"])

        assert result.exit_code == 0
        assert load_project_config(cli_project).ai_provider == "ollama"

    def test_unknown_provider(self, cli_project: Path):
        result = runner.invoke(app, ["config", "provider", "clippy"])

        assert result.exit_code == 1
        assert "Unknown provider" in result.output

    def test_api_key_is_masked(self, cli_project: Path):
        runner.invoke(app, ["config", "api-key", "AIza-secret"])

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "API key: set" in result.output
        assert "AIza-secret" not in result.output


class TestSyncCommands:
    """Tests for sync error reporting (no network)."""

    def test_push_without_token(self, stored: Path, monkeypatch):
        monkeypatch.setattr("guttercrypt.sync.gist.gh_cli_token", lambda: None)

        result = runner.invoke(app, ["sync", "push"])

        assert result.exit_code == 1
        assert "No GitHub token" in result.output


class TestVersionCommand:
    """Tests for the version command."""

    def test_version(self):
        from guttercrypt import __version__

        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert f"guttercrypt v{__version__}" in result.output
