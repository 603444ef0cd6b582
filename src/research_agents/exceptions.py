"""
Custom exception hierarchy for the research agents.

All exceptions inherit from ResearchError, which provides optional context
for structured error handling and logging.
"""

from __future__ import annotations

from typing import Any


class ResearchError(Exception):
    """Base exception for all research agent errors.

    Attributes:
        message: Human-readable error message.
        context: Optional structured context for logging/debugging.
    """

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context!r})"


class ConfigurationError(ResearchError):
    """Raised when configuration is invalid or missing.

    Examples:
        - Unknown model alias
        - Output directory that cannot be created
    """

    pass


class TickerValidationError(ResearchError):
    """Raised when a ticker argument is missing or malformed.

    Context should include:
        - ticker: The raw value that was rejected
    """

    pass


class AgentError(ResearchError):
    """Raised when the agent query fails or is rejected.

    Context should include:
        - ticker: The ticker being researched
        - mode: single or multi
        - error_type: The underlying exception class name
    """

    pass
