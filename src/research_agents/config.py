"""
Configuration management using pydantic-settings.

Loads configuration from environment variables and .env files.
Validates fields and provides typed access to settings.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ModelAlias = Literal["haiku", "sonnet", "opus", "inherit"]
PermissionMode = Literal["default", "acceptEdits", "plan", "bypassPermissions"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Optional:
        ANTHROPIC_API_KEY: Anthropic API key (the SDK can also use a CLI login)
        SINGLE_AGENT_MODEL: Model for the single-agent flow
        SINGLE_AGENT_MAX_TURNS: Turn limit for the single-agent flow
        ORCHESTRATOR_MODEL: Model for the multi-agent lead analyst
        ORCHESTRATOR_MAX_TURNS: Turn limit for the multi-agent flow
        SUBAGENT_MODEL: Model for the news and ratings researchers
        MAX_WEB_SEARCHES: WebSearch calls allowed per agent
        PERMISSION_MODE: SDK permission mode
        PLUGIN_PATHS: Local plugin directories to load (JSON list)
        OUTPUT_DIR: Working directory the agent writes the report into
        QUERY_TIMEOUT_SECONDS: Upper bound on a whole agent query
        LOG_LEVEL: Logging level
        LOG_FILE: Optional JSON-lines log file
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ANTHROPIC_API_KEY: str | None = Field(default=None, description="Anthropic API key")

    # Single-agent flow
    SINGLE_AGENT_MODEL: ModelAlias = Field(
        default="haiku", description="Model for the single research agent"
    )
    SINGLE_AGENT_MAX_TURNS: int = Field(
        default=10, ge=1, le=100, description="Maximum turns for the single agent"
    )

    # Multi-agent flow
    ORCHESTRATOR_MODEL: ModelAlias = Field(
        default="sonnet", description="Model for the lead orchestrator"
    )
    ORCHESTRATOR_MAX_TURNS: int = Field(
        default=15, ge=1, le=100, description="Maximum turns for the orchestrator"
    )
    SUBAGENT_MODEL: ModelAlias = Field(
        default="haiku", description="Model for the researcher sub-agents"
    )

    MAX_WEB_SEARCHES: int = Field(
        default=3, ge=1, le=20, description="WebSearch calls allowed per agent"
    )
    PERMISSION_MODE: PermissionMode = Field(
        default="bypassPermissions", description="SDK permission mode"
    )
    PLUGIN_PATHS: list[str] = Field(
        default_factory=list, description="Local plugin directories"
    )

    OUTPUT_DIR: Path = Field(default=Path("."), description="Report output directory")
    QUERY_TIMEOUT_SECONDS: float = Field(
        default=1800.0, gt=0, description="Timeout for a whole agent query"
    )

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    LOG_FILE: Path | None = Field(default=None, description="JSON-lines log file")

    @property
    def anthropic_api_key(self) -> str | None:
        """Get Anthropic API key (lowercase alias)."""
        return self.ANTHROPIC_API_KEY

    @field_validator("PLUGIN_PATHS")
    @classmethod
    def validate_plugin_paths(cls, v: list[str]) -> list[str]:
        """Drop blank plugin entries."""
        return [p.strip() for p in v if p and p.strip()]

    def ensure_directories(self) -> None:
        """Create the output directory if it doesn't exist."""
        self.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    def redacted_display(self) -> dict[str, str | int | float | None]:
        """Return settings with API keys redacted for display."""
        def redact(value: str | None) -> str | None:
            if value is None:
                return None
            return f"{value[:8]}...{value[-4:]}" if len(value) > 12 else "***"

        return {
            "ANTHROPIC_API_KEY": redact(self.ANTHROPIC_API_KEY),
            "SINGLE_AGENT_MODEL": self.SINGLE_AGENT_MODEL,
            "SINGLE_AGENT_MAX_TURNS": self.SINGLE_AGENT_MAX_TURNS,
            "ORCHESTRATOR_MODEL": self.ORCHESTRATOR_MODEL,
            "ORCHESTRATOR_MAX_TURNS": self.ORCHESTRATOR_MAX_TURNS,
            "SUBAGENT_MODEL": self.SUBAGENT_MODEL,
            "MAX_WEB_SEARCHES": self.MAX_WEB_SEARCHES,
            "PERMISSION_MODE": self.PERMISSION_MODE,
            "PLUGIN_PATHS": ",".join(self.PLUGIN_PATHS) or None,
            "OUTPUT_DIR": str(self.OUTPUT_DIR),
            "QUERY_TIMEOUT_SECONDS": self.QUERY_TIMEOUT_SECONDS,
            "LOG_LEVEL": self.LOG_LEVEL,
            "LOG_FILE": str(self.LOG_FILE) if self.LOG_FILE else None,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
