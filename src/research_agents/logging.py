"""
Structured logging for the research agents.

Provides:
- Context variables for run_id, ticker, mode (using contextvars)
- JSONFormatter for machine-readable logs to file
- RichHandler for pretty console output
- ContextLogger wrapper that attaches context to all log calls
- setup_logging() that configures both file and console handlers
- Context manager log_context() for scoped context
- get_logger() factory
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

ROOT_LOGGER = "research_agents"

_run_id_var: ContextVar[str | None] = ContextVar("run_id", default=None)
_ticker_var: ContextVar[str | None] = ContextVar("ticker", default=None)
_mode_var: ContextVar[str | None] = ContextVar("mode", default=None)


def get_run_id() -> str | None:
    """Get the current run ID from context."""
    return _run_id_var.get()


def get_ticker() -> str | None:
    """Get the current ticker from context."""
    return _ticker_var.get()


def get_mode() -> str | None:
    """Get the current research mode from context."""
    return _mode_var.get()


def _context_fields() -> dict[str, str]:
    fields: dict[str, str] = {}
    for key, value in (
        ("run_id", get_run_id()),
        ("ticker", get_ticker()),
        ("mode", get_mode()),
    ):
        if value:
            fields[key] = value
    return fields


@contextmanager
def log_context(
    run_id: str | None = None,
    ticker: str | None = None,
    mode: str | None = None,
) -> Generator[None, None, None]:
    """Context manager for scoped logging context.

    Args:
        run_id: Run ID to set in context.
        ticker: Ticker being researched.
        mode: Research mode (single or multi).

    Yields:
        None. Context variables are set for the duration of the context.
    """
    old_run_id = _run_id_var.get()
    old_ticker = _ticker_var.get()
    old_mode = _mode_var.get()

    try:
        if run_id is not None:
            _run_id_var.set(run_id)
        if ticker is not None:
            _ticker_var.set(ticker)
        if mode is not None:
            _mode_var.set(mode)
        yield
    finally:
        _run_id_var.set(old_run_id)
        _ticker_var.set(old_ticker)
        _mode_var.set(old_mode)


class JSONFormatter(logging.Formatter):
    """JSON formatter for machine-readable log files.

    Produces JSON Lines format with structured context.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_obj.update(_context_fields())

        if hasattr(record, "extra"):
            log_obj["extra"] = record.extra

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, default=str)


class ContextRichHandler(RichHandler):
    """Rich handler that includes context in console output."""

    def get_level_text(self, record: logging.LogRecord) -> Text:
        """Override to add context prefix."""
        level_text = super().get_level_text(record)

        parts: list[str] = []
        run_id = get_run_id()
        ticker = get_ticker()
        mode = get_mode()

        if run_id:
            short_id = run_id.split("_")[-1][:8] if "_" in run_id else run_id[:8]
            parts.append(f"[dim]{short_id}[/dim]")
        if ticker:
            parts.append(f"[cyan]{ticker}[/cyan]")
        if mode:
            parts.append(f"[magenta]{mode}[/magenta]")

        if parts:
            prefix = " ".join(parts)
            return Text.from_markup(f"{level_text} {prefix}")

        return level_text


class ContextLogger:
    """Logger wrapper that automatically attaches context to log calls.

    Keyword arguments other than the standard logging ones are collected
    into the record's ``extra`` payload. Pass ``markup=False`` for text that
    comes from the model or the SDK so the console handler prints it as-is.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _log(
        self,
        level: int,
        msg: str,
        *args: Any,
        exc_info: bool = False,
        markup: bool = True,
        **kwargs: Any,
    ) -> None:
        extra = kwargs.pop("extra", {})
        extra.update(_context_fields())

        for key in list(kwargs.keys()):
            if key not in ("exc_info", "stack_info", "stacklevel"):
                extra[key] = kwargs.pop(key)

        self._logger.log(
            level, msg, *args, exc_info=exc_info, extra={"extra": extra, "markup": markup}
        )

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log debug message."""
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log info message."""
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log warning message."""
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, exc_info: bool = False, **kwargs: Any) -> None:
        """Log error message."""
        self._log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)


_console: Console | None = None
_setup_done: bool = False


def get_console() -> Console:
    """Get the global rich console used for log output (stderr)."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def setup_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    console_output: bool = True,
) -> None:
    """Set up logging with JSON file handler and rich console handler.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Path to log file. If None, only console logging is enabled.
        console_output: Whether to enable console output.
    """
    global _setup_done

    root_logger = logging.getLogger(ROOT_LOGGER)
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.handlers.clear()

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setFormatter(JSONFormatter())
        file_handler.setLevel(logging.DEBUG)  # everything goes to the file
        root_logger.addHandler(file_handler)

    if console_output:
        rich_handler = ContextRichHandler(
            console=get_console(),
            show_time=True,
            show_path=False,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=True,
        )
        rich_handler.setLevel(getattr(logging, log_level.upper()))
        root_logger.addHandler(rich_handler)

    root_logger.propagate = False

    for noisy_logger in ["httpx", "httpcore", "asyncio"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    _setup_done = True


def get_logger(name: str) -> ContextLogger:
    """Get a context-aware logger.

    Args:
        name: Logger name (usually __name__).

    Returns:
        ContextLogger wrapper around the standard logger.
    """
    if not _setup_done:
        setup_logging()

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return ContextLogger(logging.getLogger(name))
