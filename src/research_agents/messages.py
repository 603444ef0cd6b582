"""
Progress-line formatting for SDK stream messages.

Every message coming out of ``claude_agent_sdk.query`` is reduced to one or
two short lines such as::

    [system:init] session=abc model=claude-haiku tools=WebSearch,Bash
    [assistant] text(Let me look up the latest ratings...), tool_use(WebSearch)
    [user] tool_result(toolu_01)

Result messages produce no progress line; they are rendered by
``format_summary`` once the run completes.
"""

from __future__ import annotations

import re
from typing import Any

from claude_agent_sdk import (
    AssistantMessage,
    ResultMessage,
    SystemMessage,
    TextBlock,
    ThinkingBlock,
    ToolResultBlock,
    ToolUseBlock,
    UserMessage,
)

from research_agents.types import RunSummary

# Tool names the SDK uses to dispatch a sub-agent.
SUBAGENT_TOOL_NAMES = frozenset({"Task", "Agent"})

ASSISTANT_TEXT_LIMIT = 80
USER_STRING_LIMIT = 100
USER_TEXT_LIMIT = 60
RULE = "=" * 40


def message_type(message: Any) -> str:
    """Wire-style type name of an SDK message."""
    if isinstance(message, SystemMessage):
        return "system"
    if isinstance(message, AssistantMessage):
        return "assistant"
    if isinstance(message, UserMessage):
        return "user"
    if isinstance(message, ResultMessage):
        return "result"
    name = type(message).__name__
    if name.endswith("Message") and name != "Message":
        name = name[: -len("Message")]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def block_type(block: Any) -> str:
    """Wire-style type name of a content block."""
    if isinstance(block, TextBlock):
        return "text"
    if isinstance(block, ToolUseBlock):
        return "tool_use"
    if isinstance(block, ToolResultBlock):
        return "tool_result"
    if isinstance(block, ThinkingBlock):
        return "thinking"
    if isinstance(block, dict):
        return str(block.get("type", "unknown"))
    return getattr(block, "type", type(block).__name__)


def message_prefix(message: Any) -> str:
    subtype = getattr(message, "subtype", None)
    suffix = f":{subtype}" if subtype else ""
    return f"[{message_type(message)}{suffix}]"


def subagent_name(block: ToolUseBlock) -> str:
    """Name of the sub-agent a Task tool use dispatches."""
    tool_input = block.input or {}
    return tool_input.get("subagent_type") or tool_input.get("name") or "unknown"


def _summarize_assistant_block(block: Any) -> str:
    if isinstance(block, TextBlock):
        return f"text({block.text[:ASSISTANT_TEXT_LIMIT]}...)"
    if isinstance(block, ToolUseBlock):
        if block.name in SUBAGENT_TOOL_NAMES:
            return f"Task({subagent_name(block)})"
        return f"tool_use({block.name})"
    return block_type(block)


def _summarize_user_block(block: Any) -> str:
    if isinstance(block, ToolResultBlock):
        return f"tool_result({block.tool_use_id})"
    if isinstance(block, TextBlock):
        return f"text({block.text[:USER_TEXT_LIMIT]})"
    return block_type(block)


def _format_system(prefix: str, message: SystemMessage) -> list[str]:
    if message.subtype != "init":
        return [prefix]

    data = message.data or {}
    tools = ",".join(data.get("tools") or [])
    lines = [
        f"{prefix} session={data.get('session_id')} model={data.get('model')} tools={tools}"
    ]
    plugins = data.get("plugins") or []
    if plugins:
        names = ",".join(
            p.get("name", "") if isinstance(p, dict) else str(p) for p in plugins
        )
        lines.append(f"{prefix} plugins={names}")
    return lines


def format_message(message: Any) -> list[str]:
    """Format one SDK message as progress lines.

    Args:
        message: Any message yielded by ``claude_agent_sdk.query``.

    Returns:
        Zero or more lines to print. Result messages return an empty list.
    """
    prefix = message_prefix(message)

    if isinstance(message, SystemMessage):
        return _format_system(prefix, message)

    if isinstance(message, AssistantMessage):
        blocks = [_summarize_assistant_block(b) for b in message.content]
        return [f"{prefix} {', '.join(blocks)}"]

    if isinstance(message, UserMessage):
        content = message.content
        if isinstance(content, str):
            return [f"{prefix} {content[:USER_STRING_LIMIT]}"]
        if isinstance(content, list):
            blocks = [_summarize_user_block(b) for b in content]
            return [f"{prefix} {', '.join(blocks)}"]
        return []

    if isinstance(message, ResultMessage):
        return []

    return [prefix]


def format_summary(summary: RunSummary) -> list[str]:
    """Format the end-of-run summary printed after the result message."""
    duration = f"{summary.duration_seconds:.1f}s"
    headline = (
        f"Research FAILED after {duration}"
        if summary.is_error
        else f"Research complete in {duration}"
    )

    lines = ["", RULE, headline, RULE]
    if summary.result:
        lines.append(summary.result)
    lines.append(f"Turns: {summary.num_turns}")
    lines.append(f"Cost: ${summary.total_cost_usd:.4f}")
    lines.append(f"Tokens: {summary.input_tokens} in / {summary.output_tokens} out")

    if summary.subagents_dispatched:
        lines.append(f"Subagents: {', '.join(summary.subagents_dispatched)}")
    if summary.report_path is not None:
        status = "saved" if summary.report_exists else "missing"
        lines.append(f"Report ({status}): {summary.report_path}")
    return lines
