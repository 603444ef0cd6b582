"""
Prompt templates for the single-agent and multi-agent research flows.

Both flows ask the model to save the final report itself through the Bash
tool, using a quoted heredoc so the report body is written verbatim.
"""

from __future__ import annotations

from research_agents.types import report_filename

REPORT_SECTIONS = (
    "Executive Summary",
    "Analyst Ratings & Price Targets",
    "Recent News & Developments",
    "Sentiment Analysis",
    "Risk Factors",
    "Investment Outlook",
    "Disclaimer",
)

NEWS_RESEARCHER = "news-researcher"
RATINGS_RESEARCHER = "ratings-researcher"


def _sections_block() -> str:
    return "\n".join(f"- {section}" for section in REPORT_SECTIONS)


def save_command(ticker: str) -> str:
    """Bash command the agent uses to write the report."""
    return (
        f"bash -c 'cat > ./{report_filename(ticker)} << \"REPORT_EOF\"\n"
        "<report content>\n"
        "REPORT_EOF'"
    )


# =============================================================================
# SINGLE AGENT
# =============================================================================

SINGLE_AGENT_SYSTEM_PROMPT = """You are an investment research analyst. Your job is to research the stock ticker {ticker} and produce a comprehensive Markdown investment research report.

Follow these steps:

1. Use WebSearch (max {max_searches} searches) to gather: analyst ratings, price targets, recent news, and market sentiment for {ticker}.
2. Synthesize your findings into a comprehensive report.
3. Use the Bash tool to save the report: {save_command}

The report must include these sections:
{sections}

Be concise and efficient. Do not use more than {max_searches} WebSearch calls."""


def single_agent_system_prompt(ticker: str, max_searches: int = 3) -> str:
    """System prompt for the agent that researches and writes alone."""
    return SINGLE_AGENT_SYSTEM_PROMPT.format(
        ticker=ticker,
        max_searches=max_searches,
        save_command=save_command(ticker),
        sections=_sections_block(),
    )


def single_agent_user_prompt(ticker: str) -> str:
    return (
        f"Research {ticker} and save a Markdown investment report to the file "
        f"./{report_filename(ticker)} in the current working directory."
    )


# =============================================================================
# MULTI AGENT
# =============================================================================

ORCHESTRATOR_SYSTEM_PROMPT = """You are a lead investment research analyst coordinating a team of specialists to produce a comprehensive research report on {ticker}.

Your workflow:
1. Dispatch the "{news_agent}" agent to find recent news and developments for {ticker}.
2. Dispatch the "{ratings_agent}" agent to find analyst ratings, price targets, and market sentiment for {ticker}.
3. Once both agents return their findings, synthesize everything into a comprehensive Markdown report.
4. Save the report using Bash: {save_command}

The final report must include:
{sections}

Dispatch both researcher agents in parallel for speed."""


def orchestrator_system_prompt(ticker: str) -> str:
    """System prompt for the lead analyst that dispatches the researchers."""
    return ORCHESTRATOR_SYSTEM_PROMPT.format(
        ticker=ticker,
        news_agent=NEWS_RESEARCHER,
        ratings_agent=RATINGS_RESEARCHER,
        save_command=save_command(ticker),
        sections=_sections_block(),
    )


def multi_agent_user_prompt(ticker: str) -> str:
    return (
        f"Research {ticker} and save a Markdown investment report to "
        f"./{report_filename(ticker)}"
    )


# -----------------------------------------------------------------------------
# Sub-agents. The descriptions are what the orchestrator model reads when
# deciding which agent to dispatch.
# -----------------------------------------------------------------------------

NEWS_RESEARCHER_DESCRIPTION = (
    "Researches recent news and developments for a stock ticker. Use this agent "
    "to find breaking news, earnings reports, product launches, regulatory "
    "actions, and other recent events."
)

NEWS_RESEARCHER_PROMPT = """You are a financial news researcher. Given a stock ticker, search the web for the most recent and relevant news.

Focus on:
- Earnings reports and financial results
- Product launches or strategic announcements
- Regulatory or legal developments
- Management changes
- Market-moving events

Use up to {max_searches} WebSearch calls. Return a concise bullet-point summary of your findings."""

RATINGS_RESEARCHER_DESCRIPTION = (
    "Researches analyst ratings, price targets, and market sentiment for a stock "
    "ticker. Use this agent to find Wall Street consensus, buy/sell ratings, and "
    "sentiment indicators."
)

RATINGS_RESEARCHER_PROMPT = """You are a financial analyst ratings researcher. Given a stock ticker, search the web for current analyst ratings and market sentiment.

Focus on:
- Consensus analyst rating (buy/hold/sell)
- Price targets (low, average, high)
- Recent rating changes or upgrades/downgrades
- Institutional sentiment and fund flows
- Short interest or other sentiment indicators

Use up to {max_searches} WebSearch calls. Return a concise bullet-point summary of your findings."""
