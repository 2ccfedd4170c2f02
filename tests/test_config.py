"""
Tests for Settings.from_env — environment parsing at startup.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from projectgen.core.config import Settings
from projectgen.core.errors import ConfigError


class TestSettingsFromEnv:
    def test_defaults(self, monkeypatch):
        for key in ("OPENAI_API_KEY", "OPENAI_MODEL", "OPENAI_TIMEOUT", "FLASK_PORT", "GENERATED_PROJECTS_DIR", "CORS_ORIGINS", "DEBUG"):
            monkeypatch.delenv(key, raising=False)
        settings = Settings.from_env(dotenv=False)
        assert settings.openai_api_key is None
        assert settings.openai_model == "gpt-4o-mini"
        assert settings.openai_temperature == 0.7
        assert settings.openai_max_tokens == 4000
        assert settings.port == 5000
        assert settings.debug is False
        assert settings.output_root == Path("generated_projects")
        assert settings.cors_origins == ("*",)

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("OPENAI_TIMEOUT", "12.5")
        monkeypatch.setenv("FLASK_PORT", "8080")
        monkeypatch.setenv("DEBUG", "yes")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
        settings = Settings.from_env(dotenv=False)
        assert settings.openai_api_key == "sk-test"
        assert settings.openai_timeout == 12.5
        assert settings.port == 8080
        assert settings.debug is True
        assert settings.cors_origins == ("http://a.test", "http://b.test")

    def test_bad_number(self, monkeypatch):
        monkeypatch.setenv("FLASK_PORT", "eighty")
        with pytest.raises(ConfigError):
            Settings.from_env(dotenv=False)

    def test_timeout_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("FLASK_PORT", "5000")
        monkeypatch.setenv("OPENAI_TIMEOUT", "0")
        with pytest.raises(ConfigError):
            Settings.from_env(dotenv=False)
