"""Unit tests for project-local configuration and settings."""

import json


class TestProjectConfig:
    """Tests for the local config artifact."""

    def test_missing_config(self, project_dir, vault_config):
        from guttercrypt.config.project import load_project_config

        config = load_project_config(project_dir, vault_config)

        assert config.ai_provider is None
        assert config.gist_id is None

    def test_roundtrip(self, project_dir, vault_config):
        from guttercrypt.config.project import (
            ProjectConfig,
            load_project_config,
            save_project_config,
        )

        path = save_project_config(
            ProjectConfig(ai_provider="ollama", gist_id="abc123"),
            project_dir,
            vault_config,
        )

        assert path == project_dir / ".guttercrypt" / "config"
        config = load_project_config(project_dir, vault_config)
        assert config.ai_provider == "ollama"
        assert config.gist_id == "abc123"
        assert config.api_key is None

    def test_unknown_keys_preserved(self, project_dir, vault_config):
        from guttercrypt.config.project import load_project_config, save_project_config

        path = project_dir / ".guttercrypt" / "config"
        path.parent.mkdir()
        path.write_text(json.dumps({"gist_id": "g1", "theme": "neon"}))

        config = load_project_config(project_dir, vault_config)
        config.api_key = "k"
        save_project_config(config, project_dir, vault_config)

        data = json.loads(path.read_text())
        assert data == {"theme": "neon", "geminiApiKey": "k", "gistId": "g1"}

    def test_reads_camel_case_file(self, project_dir, vault_config):
        """Test a config written by another install keeps every field."""
        from guttercrypt.config.project import load_project_config

        path = project_dir / ".guttercrypt" / "config"
        path.parent.mkdir()
        path.write_text(
            json.dumps(
                {
                    "aiProvider": "ollama",
                    "geminiApiKey": "k",
                    "gistId": "g1",
                    "githubToken": "t",
                }
            )
        )

        config = load_project_config(project_dir, vault_config)

        assert (config.ai_provider, config.api_key, config.gist_id, config.github_token) == (
            "ollama",
            "k",
            "g1",
            "t",
        )
        assert config.extra == {}

    def test_unreadable_config(self, project_dir, vault_config):
        from guttercrypt.config.project import load_project_config

        path = project_dir / ".guttercrypt" / "config"
        path.parent.mkdir()
        path.write_text("{broken")

        assert load_project_config(project_dir, vault_config).to_dict() == {}


class TestSettings:
    """Tests for environment-driven settings."""

    def test_from_env(self, monkeypatch):
        from guttercrypt.config.settings import Settings

        monkeypatch.setenv("GUTTERCRYPT_AI_PROVIDER", "Ollama")
        monkeypatch.setenv("OLLAMA_MODEL", "mistral")
        monkeypatch.setenv("GEMINI_API_KEY", "env-key")

        settings = Settings.from_env()

        assert settings.ai.provider == "ollama"
        assert settings.ai.ollama.model == "mistral"
        assert settings.ai.gemini.api_key == "env-key"
        assert settings.vault.pbkdf2_iterations == 1_000  # set by conftest

    def test_get_settings_cached(self):
        from guttercrypt.config.settings import configure, get_settings

        first = get_settings()
        assert get_settings() is first

        configure(None)
        assert get_settings() is not first
