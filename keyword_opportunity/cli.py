"""Typer CLI application for Keyword Opportunity Research.

Provides commands to research a seed keyword, list provider long-tail
suggestions, show search trends, check component status, and inspect or
edit configuration.
"""

import asyncio
import logging
import os
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from keyword_opportunity.exceptions import KeywordResearchError

console = Console()
app = typer.Typer(
    name="kwresearch",
    help="Keyword Opportunity Research -- expand a seed keyword, enrich with metrics, rank opportunities.",
    add_completion=False,
    no_args_is_help=True,
)
config_app = typer.Typer(help="Inspect and edit configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")

SCORE_STYLES = {"high": "green", "medium": "yellow", "low": "red"}


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging level and format."""
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context."""
    return asyncio.run(coro)


def _get_app(config_path: str = "config/settings.yaml"):
    """Lazy-import, initialise and return the application."""
    from keyword_opportunity.app import KeywordOpportunityApp
    kw_app = KeywordOpportunityApp(config_path=config_path)
    kw_app.initialize()
    return kw_app


def _fail(exc: Exception) -> None:
    """Print one clear error line and exit with status 1."""
    if isinstance(exc, KeywordResearchError):
        console.print("[red]✘[/red] " + str(exc))
    else:
        console.print("[red]✘[/red] Invalid input: " + str(exc))
    raise typer.Exit(code=1)


def _keyword_table(title: str, keywords: list) -> Table:
    """Rich table of scored keywords."""
    from keyword_opportunity.utils.helpers import (
        competition_label,
        format_cpc,
        format_volume,
        score_band,
    )

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Keyword", style="cyan", min_width=25)
    table.add_column("Volume", justify="right")
    table.add_column("CPC", justify="right")
    table.add_column("Competition")
    table.add_column("Score", justify="right")
    table.add_column("Why", max_width=50)

    for kw in keywords:
        style = SCORE_STYLES[score_band(kw.score)]
        table.add_row(
            kw.phrase,
            format_volume(kw.volume),
            format_cpc(kw.cpc),
            competition_label(kw.competition),
            "[" + style + "]" + str(kw.score) + "[/" + style + "]",
            kw.rationale,
        )
    return table


# ------------------------------------------------------------------
# research
# ------------------------------------------------------------------
@app.command()
def research(
    seed: str = typer.Argument(..., help="Seed keyword (e.g. 'content marketing')."),
    country: Optional[str] = typer.Option(None, "--country", "-c", help="Two-letter market code."),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Max related keywords to show."),
    no_ai: bool = typer.Option(False, "--no-ai", help="Rule-based candidates only."),
    sort_by: str = typer.Option("score", "--sort-by", help="score, volume or competition."),
    filter_by: str = typer.Option("all", "--filter-by", help="all, low_competition or high_volume."),
    csv_path: Optional[str] = typer.Option(None, "--csv", help="Export results to this CSV file."),
    json_path: Optional[str] = typer.Option(None, "--json", help="Export results to this JSON file."),
    config_path: str = typer.Option("config/settings.yaml", "--config", help="Settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Research keyword opportunities for a seed keyword."""
    _setup_logging(verbose)
    console.print(Panel("[bold cyan]Keyword Research: " + seed + "[/bold cyan]"))
    kw_app = _get_app(config_path)

    with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
        progress.add_task(description="Expanding, enriching and scoring keywords...", total=None)
        try:
            result = _run_async(kw_app.research(
                seed,
                country=country,
                limit=limit,
                use_ai=False if no_ai else None,
                sort_by=sort_by,
                filter_by=filter_by,
            ))
        except (KeywordResearchError, ValueError) as exc:
            progress.stop()
            _fail(exc)

    if result.keywords:
        console.print(_keyword_table("Seed Keyword", result.keywords))
    else:
        console.print("[yellow]⚠[/yellow] No metrics returned for the seed keyword.")
    if result.related_keywords:
        console.print(_keyword_table("Related Keywords", result.related_keywords))
    if result.question_keywords:
        console.print(_keyword_table("Question Keywords", result.question_keywords))

    console.print(
        "\n[bold]" + str(result.total_results) + " keywords with data[/bold] ("
        + str(len(result.related_keywords)) + " related, "
        + str(len(result.question_keywords)) + " questions shown)"
    )

    if csv_path or json_path:
        from keyword_opportunity.modules.keyword_research.kw_analyzer import KeywordAnalyzer
        analyzer = KeywordAnalyzer()
        if csv_path:
            path = _run_async(analyzer.export_to_csv(result, csv_path))
            console.print("[green]✔[/green] CSV saved: " + path)
        if json_path:
            path = _run_async(analyzer.export_to_json(result, json_path))
            console.print("[green]✔[/green] JSON saved: " + path)

    console.print("[green]✔[/green] Keyword research complete.")


# ------------------------------------------------------------------
# long-tail
# ------------------------------------------------------------------
@app.command("long-tail")
def long_tail(
    seed: str = typer.Argument(..., help="Seed keyword."),
    country: str = typer.Option("US", "--country", "-c", help="Two-letter market code."),
    limit: int = typer.Option(20, "--limit", "-l", help="Max suggestions to show."),
    config_path: str = typer.Option("config/settings.yaml", "--config", help="Settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Show the provider's long-tail suggestions for a seed keyword."""
    _setup_logging(verbose)
    kw_app = _get_app(config_path)
    try:
        suggestions = _run_async(kw_app.get_researcher().suggest_long_tail(
            seed, kw_app.provider_config(), country=country, limit=limit,
        ))
    except (KeywordResearchError, ValueError) as exc:
        _fail(exc)

    if not suggestions:
        console.print("[yellow]⚠[/yellow] No long-tail suggestions with data.")
        return
    console.print(_keyword_table("Long-tail Suggestions: " + seed, suggestions))


# ------------------------------------------------------------------
# trends
# ------------------------------------------------------------------
@app.command()
def trends(
    phrases: list[str] = typer.Argument(..., help="One or more keyword phrases."),
    country: str = typer.Option("US", "--country", "-c", help="Two-letter market code."),
    config_path: str = typer.Option("config/settings.yaml", "--config", help="Settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Show 12-month search trends for keyword phrases."""
    from keyword_opportunity.utils.helpers import format_number

    _setup_logging(verbose)
    kw_app = _get_app(config_path)
    try:
        rows = _run_async(kw_app.get_researcher().keyword_trends(
            phrases, kw_app.provider_config(), country=country,
        ))
    except (KeywordResearchError, ValueError) as exc:
        _fail(exc)

    table = Table(title="Search Trends", show_header=True, header_style="bold magenta")
    table.add_column("Keyword", style="cyan", min_width=25)
    table.add_column("Last 12 months")
    for row in rows:
        months = ", ".join(format_number(int(v)) for v in row.trend) if row.trend else "No data"
        table.add_row(row.phrase, months)
    console.print(table)


# ------------------------------------------------------------------
# status
# ------------------------------------------------------------------
@app.command()
def status(
    config_path: str = typer.Option("config/settings.yaml", "--config", help="Settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Show component status: metrics provider, LLM providers, configuration."""
    _setup_logging(verbose)
    console.print(Panel("[bold cyan]System Status[/bold cyan]"))

    table = Table(title="Component Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", min_width=20)
    table.add_column("Status", min_width=10)
    table.add_column("Details", max_width=50)

    labels = {
        "ok": "[green]✔ OK[/green]",
        "warning": "[yellow]⚠ Warning[/yellow]",
        "error": "[red]✘ Error[/red]",
    }
    for component, info in _get_app(config_path).get_status().items():
        table.add_row(
            component.replace("_", " ").title(),
            labels.get(info["status"], info["status"]),
            info["details"],
        )
    console.print(table)


# ------------------------------------------------------------------
# config
# ------------------------------------------------------------------
@config_app.command("show")
def config_show(
    env_path: Optional[str] = typer.Option(None, "--env", help="Path to the .env file."),
) -> None:
    """List registered environment keys and whether they are set."""
    from keyword_opportunity.utils.env_manager import EnvManager

    manager = EnvManager(env_path)
    table = Table(title="Environment (" + str(manager.env_path) + ")", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Category")
    table.add_column("Set", min_width=5)
    table.add_column("Value", max_width=40)

    for key, info in manager.get_status().items():
        if info["configured"]:
            mark = "[green]✔[/green]"
        elif info["required"]:
            mark = "[red]✘[/red]"
        else:
            mark = "[dim]-[/dim]"
        table.add_row(key, info["category"], mark, info["masked_value"])
    console.print(table)

    missing = manager.missing_required()
    if missing:
        console.print("[yellow]⚠[/yellow] Missing required: " + ", ".join(missing))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Environment key, e.g. KEYWORDS_EVERYWHERE_API_KEY."),
    value: str = typer.Argument(..., help="Value to store."),
    env_path: Optional[str] = typer.Option(None, "--env", help="Path to the .env file."),
) -> None:
    """Write one key to the .env file."""
    from keyword_opportunity.utils.env_manager import EnvManager

    manager = EnvManager(env_path)
    if key not in manager.API_KEY_REGISTRY:
        console.print("[yellow]⚠[/yellow] " + key + " is not a registered key; saving anyway.")
    manager.set_key(key, value)
    console.print("[green]✔[/green] " + key + " saved to " + str(manager.env_path))


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
