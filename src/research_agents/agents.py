"""Sub-agent definitions for the multi-agent research flow."""

from __future__ import annotations

from claude_agent_sdk import AgentDefinition

from research_agents.config import Settings
from research_agents.prompts import (
    NEWS_RESEARCHER,
    NEWS_RESEARCHER_DESCRIPTION,
    NEWS_RESEARCHER_PROMPT,
    RATINGS_RESEARCHER,
    RATINGS_RESEARCHER_DESCRIPTION,
    RATINGS_RESEARCHER_PROMPT,
)

SUBAGENT_NAMES = (NEWS_RESEARCHER, RATINGS_RESEARCHER)
SUBAGENT_TOOLS = ["WebSearch"]


def build_subagents(settings: Settings) -> dict[str, AgentDefinition]:
    """Build the researcher sub-agents the orchestrator can dispatch.

    Both researchers only get WebSearch; writing the report is left to the
    orchestrator.
    """
    return {
        NEWS_RESEARCHER: AgentDefinition(
            description=NEWS_RESEARCHER_DESCRIPTION,
            prompt=NEWS_RESEARCHER_PROMPT.format(max_searches=settings.MAX_WEB_SEARCHES),
            tools=list(SUBAGENT_TOOLS),
            model=settings.SUBAGENT_MODEL,
        ),
        RATINGS_RESEARCHER: AgentDefinition(
            description=RATINGS_RESEARCHER_DESCRIPTION,
            prompt=RATINGS_RESEARCHER_PROMPT.format(max_searches=settings.MAX_WEB_SEARCHES),
            tools=list(SUBAGENT_TOOLS),
            model=settings.SUBAGENT_MODEL,
        ),
    }
