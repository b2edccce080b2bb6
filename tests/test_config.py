"""Tests for configuration loading."""

from pathlib import Path

import pytest

from gdrivesync.config import _ALIASES, Config, SyncSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove all gdrivesync variables from the environment."""
    for names in _ALIASES.values():
        for name in names:
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_config(tmp_path):
    def factory():
        return Config(config_dir=tmp_path / "cfg", dotenv_path=tmp_path / ".env")

    return factory


class TestConfig:
    """Tests for the Config class."""

    def test_defaults(self, make_config, tmp_path):
        config = make_config()
        assert config.api_key is None
        assert config.client_id is None
        assert not config.is_configured()
        assert not config.has_oauth_client()
        assert config.redirect_port == 8080
        assert config.token_file == tmp_path / "cfg" / "token.json"

    def test_reads_short_environment_names(self, make_config, monkeypatch):
        monkeypatch.setenv("CLIENT_ID", "cid")
        monkeypatch.setenv("CLIENT_SECRET", "secret")
        monkeypatch.setenv("API_KEY", "key")
        monkeypatch.setenv("SYNC_PATH", "/data")

        config = make_config()

        assert config.client_id == "cid"
        assert config.client_secret == "secret"
        assert config.api_key == "key"
        assert config.sync_path == "/data"
        assert config.has_oauth_client()
        assert config.is_configured()

    def test_prefixed_name_wins_over_alias(self, make_config, monkeypatch):
        monkeypatch.setenv("CLIENT_ID", "short")
        monkeypatch.setenv("GDRIVE_CLIENT_ID", "long")
        assert make_config().client_id == "long"

    def test_environment_beats_files(self, make_config, monkeypatch, tmp_path):
        (tmp_path / ".env").write_text("GDRIVE_FOLDER_ID=from-dotenv\n")
        monkeypatch.setenv("GDRIVE_FOLDER_ID", "from-env")
        assert make_config().folder_id == "from-env"

    def test_dotenv_beats_config_file(self, make_config, tmp_path):
        (tmp_path / "cfg").mkdir()
        (tmp_path / "cfg" / "config").write_text(
            "GDRIVE_FOLDER_ID=from-config\nSYNC_PATH=/from/config\n"
        )
        (tmp_path / ".env").write_text("GDRIVE_FOLDER_ID=from-dotenv\n")

        config = make_config()

        assert config.folder_id == "from-dotenv"
        assert config.sync_path == "/from/config"

    def test_save_settings(self, make_config):
        config = make_config()

        path = config.save_settings(
            GDRIVE_CLIENT_ID="cid", GDRIVE_CLIENT_SECRET="secret", SYNC_PATH=None
        )

        assert path == config.get_config_path()
        assert "GDRIVE_CLIENT_ID=cid" in path.read_text()
        assert "SYNC_PATH" not in path.read_text()
        assert config.client_id == "cid"
        assert make_config().client_secret == "secret"

    def test_save_settings_updates_existing_value(self, make_config):
        config = make_config()
        config.save_settings(GDRIVE_FOLDER_ID="first")
        config.save_settings(GDRIVE_FOLDER_ID="second")
        assert config.folder_id == "second"
        assert config.get_config_path().read_text().count("GDRIVE_FOLDER_ID") == 1

    def test_token_file_override(self, make_config, monkeypatch, tmp_path):
        monkeypatch.setenv("GDRIVE_TOKEN_FILE", str(tmp_path / "tok.json"))
        assert make_config().token_file == tmp_path / "tok.json"

    def test_invalid_redirect_port(self, make_config, monkeypatch):
        monkeypatch.setenv("GDRIVE_REDIRECT_PORT", "http")
        assert make_config().redirect_port == 8080

    def test_redirect_port(self, make_config, monkeypatch):
        monkeypatch.setenv("GDRIVE_REDIRECT_PORT", "9090")
        assert make_config().redirect_port == 9090


class TestSyncSettings:
    def test_defaults(self):
        settings = SyncSettings(local_path=Path("/data"), folder_id="f")
        assert settings.workers == 0
        assert not settings.dry_run
        assert settings.exclude_patterns == []
        assert not settings.exclude_dot_files
