"""
Core types for the research agents.

- ResearchMode enum for the two research flows
- Ticker normalization and report file naming
- RunSummary dataclass capturing the SDK result of a run
- Helper functions for ID generation and timestamps
"""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from uuid6 import uuid7

from research_agents.exceptions import TickerValidationError

# Tickers end up inside a shell heredoc filename, so keep them boring.
TICKER_PATTERN = re.compile(r"^[A-Z0-9][A-Z0-9.\-]{0,9}$")


def generate_id(prefix: str = "") -> str:
    """Generate a time-ordered unique ID using UUID7.

    Args:
        prefix: Optional prefix for the ID (e.g., "run")

    Returns:
        A unique ID string, optionally prefixed.
    """
    uid = str(uuid7())
    return f"{prefix}_{uid}" if prefix else uid


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


class ResearchMode(str, Enum):
    """Which research flow to run."""

    SINGLE = "single"
    MULTI = "multi"


def normalize_ticker(raw: str | None) -> str:
    """Normalize a ticker symbol from user input.

    Args:
        raw: Ticker as typed on the command line.

    Returns:
        Upper-cased, stripped ticker.

    Raises:
        TickerValidationError: If the ticker is empty or contains
            characters outside letters, digits, '.' and '-'.
    """
    if raw is None or not raw.strip():
        raise TickerValidationError("Ticker is required", context={"ticker": raw})

    ticker = raw.strip().upper()
    if not TICKER_PATTERN.match(ticker):
        raise TickerValidationError(
            "Ticker must be 1-10 letters, digits, '.' or '-'",
            context={"ticker": raw},
        )
    return ticker


def report_filename(ticker: str) -> str:
    """Name of the Markdown report the agent writes for a ticker."""
    return f"{ticker}_research_report.md"


@dataclass
class RunSummary:
    """Outcome of one research run, built from the SDK result message."""

    ticker: str
    mode: ResearchMode
    session_id: str
    subtype: str
    is_error: bool
    duration_ms: int
    num_turns: int
    total_cost_usd: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0
    result: str | None = None
    errors: list[str] = field(default_factory=list)
    subagents_dispatched: list[str] = field(default_factory=list)
    tool_uses: Counter[str] = field(default_factory=Counter)
    report_path: Path | None = None
    report_exists: bool = False
    completed_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_result(
        cls,
        message: Any,
        ticker: str,
        mode: ResearchMode,
    ) -> RunSummary:
        """Build a summary from a claude_agent_sdk ResultMessage.

        Cost and usage are optional on the SDK side; missing values become 0.
        Older SDK releases have no ``errors`` field on the result.
        """
        usage = message.usage or {}
        return cls(
            ticker=ticker,
            mode=mode,
            session_id=message.session_id,
            subtype=message.subtype,
            is_error=bool(message.is_error),
            duration_ms=int(message.duration_ms or 0),
            num_turns=int(message.num_turns or 0),
            total_cost_usd=float(message.total_cost_usd or 0.0),
            input_tokens=int(usage.get("input_tokens") or 0),
            output_tokens=int(usage.get("output_tokens") or 0),
            result=message.result,
            errors=[str(e) for e in (getattr(message, "errors", None) or [])],
        )

    @property
    def duration_seconds(self) -> float:
        """Duration of the run in seconds."""
        return self.duration_ms / 1000

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "ticker": self.ticker,
            "mode": self.mode.value,
            "session_id": self.session_id,
            "subtype": self.subtype,
            "is_error": self.is_error,
            "duration_ms": self.duration_ms,
            "num_turns": self.num_turns,
            "total_cost_usd": self.total_cost_usd,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "result": self.result,
            "errors": list(self.errors),
            "subagents_dispatched": list(self.subagents_dispatched),
            "tool_uses": dict(self.tool_uses),
            "report_path": str(self.report_path) if self.report_path else None,
            "report_exists": self.report_exists,
            "completed_at": self.completed_at.isoformat(),
        }
