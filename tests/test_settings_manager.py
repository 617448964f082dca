"""Tests for settings precedence and persistence"""

import json

import pytest

from managers.settings_manager import SettingsManager


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "config" / "config.json"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SANITY_PROJECT_ID", "SANITY_DATASET", "SANITY_API_TOKEN", "CATALOG_SHARE_DIR"):
        monkeypatch.delenv(name, raising=False)


class TestPrecedence:
    """Tests for runtime > config > env > hardcoded"""

    def test_hardcoded_defaults(self, config_file):
        """Test defaults apply when nothing else is set"""
        settings = SettingsManager(config_file)

        assert settings.get("dataset") == "production"
        assert settings.get("display_width") == 800
        assert settings.get("share_dir") is None
        assert settings.get("folders")[0] == "Luxury Bus (Victor)"

    def test_env_overrides_hardcoded(self, config_file, monkeypatch):
        """Test environment variables override defaults"""
        monkeypatch.setenv("SANITY_DATASET", "staging")

        assert SettingsManager(config_file).get("dataset") == "staging"

    def test_config_overrides_env(self, config_file, monkeypatch):
        """Test the config file overrides environment variables"""
        monkeypatch.setenv("SANITY_DATASET", "staging")
        config_file.parent.mkdir(parents=True)
        config_file.write_text(json.dumps({"settings": {"dataset": "archive"}}))

        assert SettingsManager(config_file).get("dataset") == "archive"

    def test_runtime_overrides_config(self, config_file):
        """Test runtime settings win over everything"""
        config_file.parent.mkdir(parents=True)
        config_file.write_text(json.dumps({"settings": {"display_width": 400}}))
        settings = SettingsManager(config_file)

        settings.set_settings({"display_width": 1200})

        assert settings.get("display_width") == 1200

    def test_corrupt_config_is_ignored(self, config_file):
        """Test an unreadable config file falls back to defaults"""
        config_file.parent.mkdir(parents=True)
        config_file.write_text("{not json")

        assert SettingsManager(config_file).get("dataset") == "production"

    def test_token_is_masked(self, config_file, monkeypatch):
        """Test get_all hides the API token"""
        monkeypatch.setenv("SANITY_API_TOKEN", "secret")

        assert SettingsManager(config_file).get_all()["token"] == "***"


class TestValidation:
    """Tests for set_settings validation"""

    def test_unknown_key(self, config_file):
        """Test unknown settings are rejected"""
        result = SettingsManager(config_file).set_settings({"colour": "red"})

        assert result["errors"] == ["Unknown setting 'colour'"]

    def test_bad_width(self, config_file):
        """Test non-positive widths are rejected"""
        result = SettingsManager(config_file).set_settings({"display_width": 0})

        assert "errors" in result

    def test_bad_folders(self, config_file):
        """Test folders must be a non-empty list of names"""
        settings = SettingsManager(config_file)

        assert "errors" in settings.set_settings({"folders": []})
        assert "errors" in settings.set_settings({"folders": "Deluxe Buses"})


class TestPersistence:
    """Tests for persist_settings"""

    def test_persist_writes_config(self, config_file):
        """Test persisted settings land in the config file"""
        settings = SettingsManager(config_file)

        result = settings.persist_settings({"share_dir": "/srv/share"})

        assert result["success"] is True
        assert json.loads(config_file.read_text()) == {"settings": {"share_dir": "/srv/share"}}
        assert SettingsManager(config_file).get("share_dir") == "/srv/share"

    def test_token_never_persisted(self, config_file):
        """Test the API token is not written to disk"""
        SettingsManager(config_file).persist_settings({"token": "secret", "dataset": "x"})

        saved = json.loads(config_file.read_text())["settings"]
        assert "token" not in saved
        assert saved["dataset"] == "x"
