"""
Tests for configuration management
"""

import pytest
import yaml
from pydantic import ValidationError

from imagechain.config import APIConfig, Settings, SystemConfig, get_settings, reload_settings


class TestSettings:
    """Tests for Settings loading and validation"""

    def test_defaults(self):
        settings = Settings()

        assert settings.environment == "production"
        assert settings.engine.num_threads == -1
        assert settings.api.port == 8000
        assert settings.api.max_upload_bytes == 50 * 1024 * 1024
        assert settings.system.log_level == "INFO"

    def test_env_override(self, monkeypatch):
        """Test IC_ prefixed environment variables override defaults"""
        monkeypatch.setenv("IC_ENVIRONMENT", "development")
        monkeypatch.setenv("IC_API_PORT", "9000")
        monkeypatch.setenv("IC_ENGINE_NUM_THREADS", "2")

        settings = Settings()

        assert settings.environment == "development"
        assert settings.api.port == 9000
        assert settings.engine.num_threads == 2

    def test_log_level_normalized(self):
        assert SystemConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            SystemConfig(log_level="chatty")

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="moon")

    def test_invalid_port(self):
        with pytest.raises(ValidationError):
            APIConfig(port=0)

    def test_yaml_config_file(self, tmp_path):
        """Test values are read from a YAML config file"""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            yaml.dump({"environment": "staging", "api": {"port": 8123}})
        )

        settings = Settings(config_file=str(config_path))

        assert settings.environment == "staging"
        assert settings.api.port == 8123

    def test_missing_config_file_is_ignored(self, tmp_path):
        settings = Settings(config_file=str(tmp_path / "missing.yaml"))

        assert settings.environment == "production"

    def test_save_to_file(self, tmp_path):
        path = tmp_path / "saved.yaml"
        Settings(environment="test").save_to_file(str(path))

        saved = yaml.safe_load(path.read_text())

        assert saved["environment"] == "test"
        assert saved["api"]["port"] == 8000

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()
        assert reload_settings() is get_settings()
