"""Tests for configuration loading."""

import pytest

from authgate.config import load_config
from authgate.errors import ConfigurationError


@pytest.fixture
def env(monkeypatch, tmp_path):
    """Required settings in the environment, no .env file in reach."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AUTHGATE_DATABASE_URL", "mongodb://localhost:27017/authgate")
    monkeypatch.setenv("AUTHGATE_HOST", "0.0.0.0")
    monkeypatch.setenv("AUTHGATE_PORT", "3100")
    monkeypatch.delenv("AUTHGATE_JWT_SECRET", raising=False)
    monkeypatch.delenv("AUTHGATE_ENVIRONMENT", raising=False)
    return monkeypatch


class TestLoadConfig:
    def test_missing_secret_is_fatal(self, env):
        with pytest.raises(ConfigurationError, match="JWT_SECRET"):
            load_config()

    def test_short_secret_is_fatal(self, env):
        env.setenv("AUTHGATE_JWT_SECRET", "short")
        with pytest.raises(ConfigurationError, match="JWT_SECRET"):
            load_config()

    def test_other_invalid_setting_is_fatal(self, env):
        env.setenv("AUTHGATE_JWT_SECRET", "s" * 32)
        env.setenv("AUTHGATE_PORT", "not-a-port")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_defaults(self, env):
        env.setenv("AUTHGATE_JWT_SECRET", "s" * 32)
        config = load_config()
        assert config.port == 3100
        assert config.otp_length == 4
        assert config.redis_url == "redis://localhost:6379/0"
        assert config.is_production is False

    def test_production_environment(self, env):
        env.setenv("AUTHGATE_JWT_SECRET", "s" * 32)
        env.setenv("AUTHGATE_ENVIRONMENT", "production")
        assert load_config().is_production is True
