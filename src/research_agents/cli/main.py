"""
CLI for the research agents.

Commands:
    research single TICKER - One agent researches and writes the report
    research multi TICKER - Orchestrator with news and ratings sub-agents
    research config - Show current configuration
    research version - Print version
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from research_agents import __version__
from research_agents.config import Settings, clear_settings_cache, get_settings
from research_agents.exceptions import ResearchError
from research_agents.logging import setup_logging
from research_agents.runner import create_runner
from research_agents.types import ResearchMode, normalize_ticker

app = typer.Typer(
    name="research",
    help="Investment research reports from Claude agents",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

BANNERS = {
    ResearchMode.SINGLE: "Researching {ticker} with a single agent...\n",
    ResearchMode.MULTI: "Researching {ticker} with multi-agent pipeline...\n",
}

TickerArg = Annotated[str, typer.Argument(help="Stock ticker symbol (e.g., AAPL)")]
OutputDirOpt = Annotated[
    Optional[Path],
    typer.Option("--output-dir", "-o", help="Directory the report is written to"),
]
ModelOpt = Annotated[
    Optional[str],
    typer.Option("--model", "-m", help="Model for the top-level agent"),
]
MaxTurnsOpt = Annotated[
    Optional[int],
    typer.Option("--max-turns", "-t", min=1, help="Maximum agent turns"),
]
DryRunOpt = Annotated[
    bool,
    typer.Option("--dry-run", "-n", help="Print prompts and options without calling the API"),
]
SaveSummaryOpt = Annotated[
    bool,
    typer.Option("--save-summary", help="Write <TICKER>_run_summary.json next to the report"),
]


def _load_settings(output_dir: Path | None) -> Settings:
    """Load settings from .env/environment, applying CLI overrides."""
    load_dotenv()  # the SDK subprocess reads ANTHROPIC_API_KEY from os.environ
    clear_settings_cache()
    try:
        settings = get_settings()
    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] Configuration is invalid.\n{escape(str(e))}")
        raise typer.Exit(1)

    if output_dir is not None:
        settings = settings.model_copy(update={"OUTPUT_DIR": output_dir})
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    return settings


def _run(
    mode: ResearchMode,
    ticker: str,
    output_dir: Path | None,
    model: str | None,
    max_turns: int | None,
    dry_run: bool,
    save_summary: bool,
) -> None:
    settings = _load_settings(output_dir)

    try:
        ticker = normalize_ticker(ticker)
    except ResearchError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    runner = create_runner(
        mode,
        settings,
        console=console,
        model=model,
        max_turns=max_turns,
        error_console=error_console,
    )

    if dry_run:
        typer.echo(json.dumps(runner.describe(ticker), indent=2))
        return

    console.print(BANNERS[mode].format(ticker=ticker), markup=False)

    try:
        summary = asyncio.run(runner.run(ticker))
    except ResearchError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if save_summary:
        summary_path = settings.OUTPUT_DIR / f"{ticker}_run_summary.json"
        summary_path.write_text(json.dumps(summary.to_dict(), indent=2))
        console.print(f"[dim]Summary:[/dim] {summary_path}")

    if summary.is_error:
        raise typer.Exit(1)


@app.command()
def single(
    ticker: TickerArg,
    output_dir: OutputDirOpt = None,
    model: ModelOpt = None,
    max_turns: MaxTurnsOpt = None,
    dry_run: DryRunOpt = False,
    save_summary: SaveSummaryOpt = False,
) -> None:
    """Research a ticker with a single agent (WebSearch + Bash)."""
    _run(ResearchMode.SINGLE, ticker, output_dir, model, max_turns, dry_run, save_summary)


@app.command()
def multi(
    ticker: TickerArg,
    output_dir: OutputDirOpt = None,
    model: ModelOpt = None,
    max_turns: MaxTurnsOpt = None,
    dry_run: DryRunOpt = False,
    save_summary: SaveSummaryOpt = False,
) -> None:
    """Research a ticker with an orchestrator and two researcher sub-agents.

    The orchestrator dispatches news-researcher and ratings-researcher,
    then merges their findings into the report.
    """
    _run(ResearchMode.MULTI, ticker, output_dir, model, max_turns, dry_run, save_summary)


@app.command()
def config() -> None:
    """Show current configuration with API keys redacted."""
    load_dotenv()
    clear_settings_cache()
    try:
        settings = get_settings()
    except ValidationError as e:
        error_console.print("[red]Configuration is invalid or incomplete.[/red]")
        error_console.print(str(e), markup=False)
        raise typer.Exit(1)

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key, value in settings.redacted_display().items():
        display_value = str(value) if value is not None else "[dim]not set[/dim]"
        table.add_row(key, display_value)

    console.print()
    console.print(table)
    if not settings.anthropic_api_key:
        console.print(
            Panel(
                "ANTHROPIC_API_KEY is not set. The agent SDK will fall back to "
                "an existing Claude CLI login.",
                border_style="yellow",
            )
        )
    console.print()


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"research-agents version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
