"""
Tests for configuration module.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from research_agents.config import Settings, clear_settings_cache, get_settings


class TestSettingsValidation:
    """Tests for Settings validation."""

    def test_settings_loads_from_env(self, mock_env_vars: dict[str, str]) -> None:
        """Test that settings correctly loads from environment variables."""
        settings = get_settings()

        assert settings.ANTHROPIC_API_KEY == "sk-ant-REDACTED"
        assert settings.MAX_WEB_SEARCHES == 3
        assert settings.LOG_LEVEL == "DEBUG"
        assert settings.OUTPUT_DIR == Path(mock_env_vars["OUTPUT_DIR"])

    def test_api_key_is_optional(self) -> None:
        """The SDK can run off a CLI login, so no key is required."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
            assert settings.anthropic_api_key is None

    def test_unknown_model_alias_rejected(self) -> None:
        with patch.dict(os.environ, {"SUBAGENT_MODEL": "gpt-4o"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_max_turns_must_be_positive(self) -> None:
        with patch.dict(os.environ, {"SINGLE_AGENT_MAX_TURNS": "0"}, clear=True):
            with pytest.raises(ValidationError):
                Settings(_env_file=None)

    def test_plugin_paths_parsed_from_json(self) -> None:
        env_vars = {"PLUGIN_PATHS": '["../../", " ", "./plugins/research"]'}
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)
            assert settings.PLUGIN_PATHS == ["../../", "./plugins/research"]


class TestSettingsDefaults:
    """Tests for Settings default values."""

    def test_defaults_match_research_flows(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        assert settings.SINGLE_AGENT_MODEL == "haiku"
        assert settings.SINGLE_AGENT_MAX_TURNS == 10
        assert settings.ORCHESTRATOR_MODEL == "sonnet"
        assert settings.ORCHESTRATOR_MAX_TURNS == 15
        assert settings.SUBAGENT_MODEL == "haiku"
        assert settings.MAX_WEB_SEARCHES == 3
        assert settings.PERMISSION_MODE == "bypassPermissions"
        assert settings.PLUGIN_PATHS == []
        assert settings.OUTPUT_DIR == Path(".")


class TestSettingsMethods:
    """Tests for Settings methods."""

    def test_ensure_directories_creates_output_dir(self, mock_settings: Settings) -> None:
        assert not mock_settings.OUTPUT_DIR.exists()
        mock_settings.ensure_directories()
        assert mock_settings.OUTPUT_DIR.is_dir()

    def test_redacted_display_hides_api_key(self, mock_settings: Settings) -> None:
        display = mock_settings.redacted_display()

        assert display["ANTHROPIC_API_KEY"] == "sk-ant-t...-key"
        assert "fake-anthropic" not in str(display["ANTHROPIC_API_KEY"])
        assert display["PLUGIN_PATHS"] is None

    def test_redacted_display_short_key(self) -> None:
        with patch.dict(os.environ, {"ANTHROPIC_API_KEY": "short"}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.redacted_display()["ANTHROPIC_API_KEY"] == "***"


class TestSettingsCache:
    """Tests for the cached settings singleton."""

    def test_get_settings_is_cached(self, mock_env_vars: dict[str, str]) -> None:
        assert get_settings() is get_settings()

    def test_clear_settings_cache(self, mock_env_vars: dict[str, str]) -> None:
        first = get_settings()
        clear_settings_cache()
        assert get_settings() is not first
