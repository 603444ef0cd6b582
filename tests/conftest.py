"""
Pytest configuration and fixtures for research agent tests.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Generator
from unittest.mock import patch

import pytest
from claude_agent_sdk import (
    AssistantMessage,
    ResultMessage,
    SystemMessage,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    UserMessage,
)

from research_agents.config import Settings, clear_settings_cache


@pytest.fixture
def mock_env_vars(tmp_path: Path) -> Generator[dict[str, str], None, None]:
    """Provide mock environment variables for testing."""
    env_vars = {
        "ANTHROPIC_API_KEY": "sk-ant-REDACTED",
        "SINGLE_AGENT_MODEL": "haiku",
        "ORCHESTRATOR_MODEL": "sonnet",
        "SUBAGENT_MODEL": "haiku",
        "MAX_WEB_SEARCHES": "3",
        "PLUGIN_PATHS": "[]",
        "OUTPUT_DIR": str(tmp_path / "reports"),
        "LOG_LEVEL": "DEBUG",
    }

    with patch.dict(os.environ, env_vars, clear=False):
        clear_settings_cache()
        yield env_vars


@pytest.fixture
def mock_settings(mock_env_vars: dict[str, str]) -> Settings:
    """Provide a Settings instance that ignores any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Automatically reset settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


def init_message(**overrides: Any) -> SystemMessage:
    data = {
        "session_id": "sess-123",
        "model": "claude-haiku-4-5",
        "tools": ["WebSearch", "Bash"],
        "plugins": [],
    }
    data.update(overrides)
    return SystemMessage(subtype="init", data=data)


def result_message(**overrides: Any) -> ResultMessage:
    fields: dict[str, Any] = {
        "subtype": "success",
        "duration_ms": 12345,
        "duration_api_ms": 11000,
        "is_error": False,
        "num_turns": 4,
        "session_id": "sess-123",
        "total_cost_usd": 0.01234,
        "usage": {"input_tokens": 1500, "output_tokens": 800},
        "result": "Saved the report.",
    }
    fields.update(overrides)
    return ResultMessage(**fields)


@pytest.fixture
def single_agent_stream() -> list[Any]:
    """A plausible single-agent message stream."""
    return [
        init_message(),
        AssistantMessage(
            content=[
                TextBlock(text="I'll research AAPL analyst ratings first."),
                ToolUseBlock(id="toolu_01", name="WebSearch", input={"query": "AAPL analyst ratings"}),
            ],
            model="claude-haiku-4-5",
        ),
        UserMessage(content=[ToolResultBlock(tool_use_id="toolu_01", content="results")]),
        AssistantMessage(
            content=[ToolUseBlock(id="toolu_02", name="Bash", input={"command": "cat > ..."})],
            model="claude-haiku-4-5",
        ),
        UserMessage(content=[ToolResultBlock(tool_use_id="toolu_02", content="")]),
        result_message(),
    ]


@pytest.fixture
def multi_agent_stream() -> list[Any]:
    """A plausible orchestrator message stream with two dispatches."""
    return [
        init_message(model="claude-sonnet-4-5", tools=["Bash", "Task"]),
        AssistantMessage(
            content=[
                ToolUseBlock(id="toolu_01", name="Task", input={"subagent_type": "news-researcher"}),
                ToolUseBlock(id="toolu_02", name="Task", input={"subagent_type": "ratings-researcher"}),
            ],
            model="claude-sonnet-4-5",
        ),
        UserMessage(
            content=[
                ToolResultBlock(tool_use_id="toolu_01", content="news"),
                ToolResultBlock(tool_use_id="toolu_02", content="ratings"),
            ]
        ),
        result_message(num_turns=7, total_cost_usd=0.2),
    ]


class FakeQuery:
    """Stand-in for claude_agent_sdk.query that replays canned messages."""

    def __init__(
        self,
        messages: list[Any],
        error: Exception | None = None,
        on_start: Any = None,
    ) -> None:
        self.messages = messages
        self.error = error
        self.on_start = on_start
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, *, prompt: str, options: Any):
        self.calls.append({"prompt": prompt, "options": options})
        if self.on_start is not None:
            self.on_start(options)
        for message in self.messages:
            yield message
        if self.error is not None:
            raise self.error


@pytest.fixture
def make_result():
    """Factory for ResultMessage instances."""
    return result_message


@pytest.fixture
def make_init():
    """Factory for system/init messages."""
    return init_message


@pytest.fixture
def fake_query():
    """Factory for FakeQuery instances."""
    return FakeQuery
