"""Unit tests for settings, paths and credentials."""

import json
import pytest
from unittest.mock import patch

from keyring.errors import KeyringError, PasswordDeleteError

from downrelease.config import paths
from downrelease.config.credentials import CredentialManager
from downrelease.config.settings import AppSettings, SettingsError, SettingsManager


class TestAppSettings:
    """Tests for AppSettings dataclass."""

    def test_default_values(self):
        """Test default settings values."""
        settings = AppSettings()
        assert settings.host == "github.com"
        assert settings.timeout == 10
        assert settings.retries == 0
        assert settings.repositories == ["Guerrilla-Interactive/ngo"]
        assert settings.install_dir == ""
        assert settings.safe_paths is True
        assert settings.keep_going is False

    def test_default_repositories_not_shared(self):
        first = AppSettings()
        first.repositories.append("other/repo")
        assert AppSettings().repositories == ["Guerrilla-Interactive/ngo"]

    def test_from_dict_ignores_unknown_keys(self):
        settings = AppSettings.from_dict({
            "host": "ghe.example.com",
            "unknown_field": "should be ignored",
        })

        assert settings.host == "ghe.example.com"
        assert not hasattr(settings, "unknown_field")

    def test_from_dict_with_missing_keys(self):
        settings = AppSettings.from_dict({"retries": 3})

        assert settings.retries == 3
        assert settings.timeout == 10

    def test_from_dict_drops_invalid_values(self):
        """Test wrongly typed or out-of-range values fall back to defaults."""
        settings = AppSettings.from_dict({
            "timeout": "soon",
            "retries": 99,
            "safe_paths": 0,
            "repositories": ["ngo"],
            "keep_going": True,
        })

        assert settings.timeout == 10
        assert settings.retries == 0
        assert settings.safe_paths is True
        assert settings.repositories == ["Guerrilla-Interactive/ngo"]
        assert settings.keep_going is True

    def test_field_type(self):
        assert AppSettings.field_type("timeout") is float
        assert AppSettings.field_type("retries") is int
        assert AppSettings.field_type("safe_paths") is bool
        assert AppSettings.field_type("repositories") is list
        assert AppSettings.field_type("nope") is None

    def test_check_value_widens_int_timeout(self):
        assert AppSettings.check_value("timeout", 30) == 30.0

    @pytest.mark.parametrize("key,text,expected", [
        ("timeout", "30", 30.0),
        ("retries", "2", 2),
        ("keep_going", "yes", True),
        ("safe_paths", "OFF", False),
        ("repositories", "a/b, c/d,", ["a/b", "c/d"]),
        ("host", " ghe.example.com ", "ghe.example.com"),
        ("install_dir", "/usr/local/bin", "/usr/local/bin"),
    ])
    def test_parse_value(self, key, text, expected):
        assert AppSettings.parse_value(key, text) == expected

    @pytest.mark.parametrize("key,text", [
        ("colour", "blue"),
        ("timeout", "never"),
        ("timeout", "nan"),
        ("timeout", "900"),
        ("retries", "1.5"),
        ("safe_paths", "maybe"),
        ("repositories", "a/b,ngo"),
        ("host", "  "),
    ])
    def test_parse_value_rejects(self, key, text):
        with pytest.raises(SettingsError):
            AppSettings.parse_value(key, text)


class TestSettingsManager:
    """Tests for SettingsManager class."""

    @pytest.fixture
    def manager(self, temp_settings_file):
        """Create a SettingsManager with temp path."""
        return SettingsManager(config_path=temp_settings_file)

    def test_load_returns_defaults_when_file_missing(self, manager, temp_settings_file):
        assert not temp_settings_file.exists()
        assert manager.load() == AppSettings()

    def test_save_and_load_roundtrip(self, manager, temp_settings_file):
        manager.save(AppSettings(repositories=["a/b", "c/d"], keep_going=True))

        with open(temp_settings_file, "r") as f:
            assert json.load(f)["repositories"] == ["a/b", "c/d"]

        loaded = SettingsManager(config_path=temp_settings_file).load()
        assert loaded.repositories == ["a/b", "c/d"]
        assert loaded.keep_going is True

    def test_save_creates_parent_directories(self, tmp_path):
        nested_path = tmp_path / "deep" / "nested" / "settings.json"
        SettingsManager(config_path=nested_path).save(AppSettings())

        assert nested_path.exists()

    def test_load_handles_corrupted_file(self, manager, temp_settings_file):
        """Test loading settings from corrupted file returns defaults."""
        temp_settings_file.write_text("not valid json {{{")

        assert manager.load() == AppSettings()

    def test_load_handles_non_object_json(self, manager, temp_settings_file):
        temp_settings_file.write_text("[1, 2, 3]")

        assert manager.load() == AppSettings()

    def test_reset_removes_file(self, manager, temp_settings_file):
        manager.save(AppSettings(timeout=60))

        settings = manager.reset()

        assert settings.timeout == 10
        assert not temp_settings_file.exists()

    def test_update_persists(self, manager, temp_settings_file):
        updated = manager.update(timeout=42, install_dir="/opt/bin")

        assert updated.timeout == 42
        assert updated.host == "github.com"
        assert json.loads(temp_settings_file.read_text())["install_dir"] == "/opt/bin"

    def test_update_rejects_without_saving(self, manager, temp_settings_file):
        """Test an invalid change leaves the file untouched."""
        with pytest.raises(SettingsError):
            manager.update(timeout=42, nonexistent_field="x")

        assert not temp_settings_file.exists()
        assert manager.load().timeout == 10


class TestPaths:
    """Tests for configuration directory discovery."""

    def test_home_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOWNRELEASE_HOME", str(tmp_path / "state"))

        assert paths.get_app_data_dir() == tmp_path / "state"
        assert paths.get_settings_path() == tmp_path / "state" / "settings.json"
        assert paths.get_log_file_path() == tmp_path / "state" / "logs" / "downrelease.log"
        assert (tmp_path / "state" / "logs").is_dir()

    def test_settings_path_does_not_create_directory(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DOWNRELEASE_HOME", str(tmp_path / "fresh"))

        paths.get_settings_path()

        assert not (tmp_path / "fresh").exists()

    def test_xdg_config_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv("DOWNRELEASE_HOME", raising=False)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        monkeypatch.setattr(paths.sys, "platform", "linux")

        assert paths.get_app_data_dir(create=False) == tmp_path / "downrelease"


class TestCredentialManager:
    """Tests for CredentialManager class."""

    @pytest.fixture
    def credential_manager(self):
        """CredentialManager with an empty environment."""
        return CredentialManager(environ={})

    def test_make_key(self):
        assert CredentialManager._make_key("GitHub.com") == "token:github.com"

    @patch("keyring.set_password")
    def test_save_token_success(self, mock_set, credential_manager):
        assert credential_manager.save_token("github.com", "ghp_secret") is True
        mock_set.assert_called_once_with(
            CredentialManager.SERVICE_NAME, "token:github.com", "ghp_secret"
        )

    @patch("keyring.set_password")
    def test_save_token_failure(self, mock_set, credential_manager):
        mock_set.side_effect = KeyringError("Backend error")

        assert credential_manager.save_token("github.com", "x") is False

    @patch("keyring.get_password")
    def test_get_token_from_keyring(self, mock_get, credential_manager):
        mock_get.return_value = "ghp_secret"

        assert credential_manager.get_token("github.com") == "ghp_secret"
        assert credential_manager.token_source("github.com") == "keyring"

    @patch("keyring.get_password")
    def test_get_token_keyring_error(self, mock_get, credential_manager):
        """Test an unavailable keyring means anonymous access."""
        mock_get.side_effect = KeyringError("Backend error")

        assert credential_manager.get_token("github.com") is None
        assert credential_manager.token_source("github.com") is None

    @patch("keyring.get_password", return_value="ghp_keyring")
    def test_environment_takes_precedence(self, mock_get):
        manager = CredentialManager(environ={"DOWNRELEASE_TOKEN": "ghp_env"})

        assert manager.get_token("ghe.example.com") == "ghp_env"
        assert manager.token_source("ghe.example.com") == "environment"

    @patch("keyring.get_password", return_value=None)
    def test_github_token_only_for_github_com(self, mock_get):
        manager = CredentialManager(environ={"GITHUB_TOKEN": "ghp_actions"})

        assert manager.get_token("github.com") == "ghp_actions"
        assert manager.get_token("ghe.example.com") is None

    @patch("keyring.delete_password")
    def test_delete_token(self, mock_delete, credential_manager):
        assert credential_manager.delete_token("github.com") is True
        mock_delete.assert_called_once_with(CredentialManager.SERVICE_NAME, "token:github.com")

    @patch("keyring.delete_password")
    def test_delete_token_missing(self, mock_delete, credential_manager):
        mock_delete.side_effect = PasswordDeleteError("missing")

        assert credential_manager.delete_token("github.com") is False
