"""
Research runners built on the Claude Agent SDK.

Two flows share one streaming loop:

    SingleAgentRunner
        One agent with WebSearch + Bash researches the ticker and writes
        the report itself.

    MultiAgentRunner
        A lead orchestrator dispatches the news-researcher and
        ratings-researcher sub-agents through the Task tool, merges their
        findings and writes the report.

In both cases the SDK runs the tools and writes
``<TICKER>_research_report.md`` into the configured output directory. This
module only builds prompts and options, prints progress lines for each
streamed message and turns the final result message into a RunSummary.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import Counter
from pathlib import Path
from typing import Any

from claude_agent_sdk import (
    AssistantMessage,
    ClaudeAgentOptions,
    ResultMessage,
    ToolUseBlock,
    query,
)
from rich.console import Console

from research_agents.agents import build_subagents
from research_agents.config import Settings
from research_agents.exceptions import AgentError
from research_agents.logging import get_logger, log_context
from research_agents.messages import (
    SUBAGENT_TOOL_NAMES,
    format_message,
    format_summary,
    subagent_name,
)
from research_agents.prompts import (
    multi_agent_user_prompt,
    orchestrator_system_prompt,
    single_agent_system_prompt,
    single_agent_user_prompt,
)
from research_agents.types import ResearchMode, RunSummary, generate_id, report_filename

logger = get_logger(__name__)

SINGLE_AGENT_TOOLS = ["WebSearch", "Bash"]
# Task is required for sub-agent dispatch.
ORCHESTRATOR_TOOLS = ["Bash", "Task"]


class ResearchRunner(ABC):
    """Base class: stream an agent query and report progress."""

    mode: ResearchMode

    def __init__(
        self,
        settings: Settings,
        console: Console | None = None,
        model: str | None = None,
        max_turns: int | None = None,
        error_console: Console | None = None,
    ) -> None:
        """Initialize the runner.

        Args:
            settings: Loaded settings.
            console: Console that progress lines are printed to (stdout).
            model: Override for the top-level model.
            max_turns: Override for the turn limit.
            error_console: Console that result errors are printed to (stderr).
        """
        self.settings = settings
        self.console = console or Console()
        self.error_console = error_console or Console(stderr=True)
        self.model = model
        self.max_turns = max_turns

    @property
    def output_dir(self) -> Path:
        return self.settings.OUTPUT_DIR

    def report_path(self, ticker: str) -> Path:
        """Where the agent is asked to write the report."""
        return self.output_dir / report_filename(ticker)

    def _plugins(self) -> list[dict[str, str]]:
        return [{"type": "local", "path": path} for path in self.settings.PLUGIN_PATHS]

    @abstractmethod
    def system_prompt(self, ticker: str) -> str:
        """System prompt for the top-level agent."""

    @abstractmethod
    def build_prompt(self, ticker: str) -> str:
        """User prompt that starts the query."""

    @abstractmethod
    def build_options(self, ticker: str) -> ClaudeAgentOptions:
        """SDK options for the query."""

    def emit(self, line: str) -> None:
        """Print one progress line; brackets are not rich markup here."""
        self.console.print(line, markup=False, highlight=False, soft_wrap=True)

    async def run(self, ticker: str) -> RunSummary:
        """Run the research query for a ticker.

        Args:
            ticker: Normalized ticker symbol.

        Returns:
            RunSummary built from the SDK result message.

        Raises:
            AgentError: If the query fails, times out, or ends without a
                result message.
        """
        run_id = generate_id("run")
        with log_context(run_id=run_id, ticker=ticker, mode=self.mode.value):
            self.settings.ensure_directories()
            options = self.build_options(ticker)
            logger.info(
                f"Starting {self.mode.value}-agent research for {ticker}",
                model=options.model,
                max_turns=options.max_turns,
                cwd=str(options.cwd),
            )

            summary: RunSummary | None = None
            tool_uses: Counter[str] = Counter()
            subagents: list[str] = []

            try:
                async with asyncio.timeout(self.settings.QUERY_TIMEOUT_SECONDS):
                    async for message in query(prompt=self.build_prompt(ticker), options=options):
                        for line in format_message(message):
                            self.emit(line)
                            logger.debug(line, markup=False)

                        if isinstance(message, AssistantMessage):
                            self._track_tool_uses(message, tool_uses, subagents)

                        if isinstance(message, ResultMessage):
                            summary = RunSummary.from_result(message, ticker, self.mode)

            except TimeoutError as e:
                logger.error(
                    f"Research timed out after {self.settings.QUERY_TIMEOUT_SECONDS}s",
                    markup=False,
                )
                raise AgentError(
                    "Agent query timed out",
                    context={
                        "ticker": ticker,
                        "mode": self.mode.value,
                        "timeout_seconds": self.settings.QUERY_TIMEOUT_SECONDS,
                    },
                ) from e
            except Exception as e:
                logger.error(f"Research failed: {e}", markup=False)
                raise AgentError(
                    str(e) or "Agent query failed",
                    context={
                        "ticker": ticker,
                        "mode": self.mode.value,
                        "error_type": type(e).__name__,
                    },
                ) from e

            if summary is None:
                raise AgentError(
                    "Agent stream ended without a result message",
                    context={"ticker": ticker, "mode": self.mode.value},
                )

            summary.tool_uses = tool_uses
            summary.subagents_dispatched = subagents
            summary.report_path = self.report_path(ticker)
            summary.report_exists = summary.report_path.is_file()

            for line in format_summary(summary):
                self.emit(line)
            if summary.errors:
                self.error_console.print(
                    f"Errors: {'; '.join(summary.errors)}",
                    markup=False,
                    highlight=False,
                    soft_wrap=True,
                )

            if summary.is_error:
                logger.error(
                    "Research finished with an error result",
                    subtype=summary.subtype,
                    session_id=summary.session_id,
                    errors=summary.errors,
                )
            elif not summary.report_exists:
                logger.warning(f"Report was not written to {summary.report_path}", markup=False)
            else:
                logger.info(
                    f"Report saved to {summary.report_path}",
                    markup=False,
                    cost_usd=summary.total_cost_usd,
                    turns=summary.num_turns,
                )

            return summary

    @staticmethod
    def _track_tool_uses(
        message: AssistantMessage,
        tool_uses: Counter[str],
        subagents: list[str],
    ) -> None:
        for block in message.content:
            if not isinstance(block, ToolUseBlock):
                continue
            tool_uses[block.name] += 1
            if block.name in SUBAGENT_TOOL_NAMES:
                subagents.append(subagent_name(block))

    def describe(self, ticker: str) -> dict[str, Any]:
        """Prompts and options as plain data, for dry runs."""
        options = self.build_options(ticker)
        described: dict[str, Any] = {
            "mode": self.mode.value,
            "model": options.model,
            "max_turns": options.max_turns,
            "permission_mode": options.permission_mode,
            "cwd": str(options.cwd),
            "tools": options.tools,
            "allowed_tools": options.allowed_tools,
            "plugins": options.plugins,
            "report_path": str(self.report_path(ticker)),
            "prompt": self.build_prompt(ticker),
            "system_prompt": options.system_prompt,
        }
        if options.agents:
            described["agents"] = {
                name: {"model": agent.model, "tools": agent.tools, "description": agent.description}
                for name, agent in options.agents.items()
            }
        return described


class SingleAgentRunner(ResearchRunner):
    """One agent researches and writes the report."""

    mode = ResearchMode.SINGLE

    def system_prompt(self, ticker: str) -> str:
        return single_agent_system_prompt(ticker, self.settings.MAX_WEB_SEARCHES)

    def build_prompt(self, ticker: str) -> str:
        return single_agent_user_prompt(ticker)

    def build_options(self, ticker: str) -> ClaudeAgentOptions:
        return ClaudeAgentOptions(
            cwd=str(self.output_dir),
            tools=list(SINGLE_AGENT_TOOLS),
            permission_mode=self.settings.PERMISSION_MODE,
            max_turns=self.max_turns or self.settings.SINGLE_AGENT_MAX_TURNS,
            model=self.model or self.settings.SINGLE_AGENT_MODEL,
            system_prompt=self.system_prompt(ticker),
            plugins=self._plugins(),
        )


class MultiAgentRunner(ResearchRunner):
    """Lead orchestrator dispatching the news and ratings researchers."""

    mode = ResearchMode.MULTI

    def system_prompt(self, ticker: str) -> str:
        return orchestrator_system_prompt(ticker)

    def build_prompt(self, ticker: str) -> str:
        return multi_agent_user_prompt(ticker)

    def build_options(self, ticker: str) -> ClaudeAgentOptions:
        return ClaudeAgentOptions(
            cwd=str(self.output_dir),
            permission_mode=self.settings.PERMISSION_MODE,
            max_turns=self.max_turns or self.settings.ORCHESTRATOR_MAX_TURNS,
            model=self.model or self.settings.ORCHESTRATOR_MODEL,
            system_prompt=self.system_prompt(ticker),
            allowed_tools=list(ORCHESTRATOR_TOOLS),
            agents=build_subagents(self.settings),
            plugins=self._plugins(),
        )


RUNNERS: dict[ResearchMode, type[ResearchRunner]] = {
    ResearchMode.SINGLE: SingleAgentRunner,
    ResearchMode.MULTI: MultiAgentRunner,
}


def create_runner(
    mode: ResearchMode,
    settings: Settings,
    console: Console | None = None,
    model: str | None = None,
    max_turns: int | None = None,
    error_console: Console | None = None,
) -> ResearchRunner:
    """Create the runner for a research mode."""
    return RUNNERS[mode](
        settings,
        console=console,
        model=model,
        max_turns=max_turns,
        error_console=error_console,
    )
