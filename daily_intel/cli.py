"""
Command-line interface for the Daily Intel service.

Uses Typer to expose the service loop and its control surface: status,
forced report generation, and access to archived reports. Loads .env files
for API key configuration.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
import typer

from .config import AppConfig, load_config
from .runner import IntelRunner
from .scheduler import Scheduler
from .utils.logging import setup_logging

app = typer.Typer(add_completion=False, help="Feed monitor and daily intelligence report generator.")
console = Console()

ConfigOption = typer.Option(Path("config.yaml"), "--config", "-c", help="YAML config file.")
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")


def _load(config: Path | None, log_level: str | None) -> AppConfig:
    load_dotenv()
    cfg = load_config(str(config) if config and config.exists() else None)
    if log_level:
        cfg.logging.level = log_level
    setup_logging(cfg.logging)
    return cfg


@app.command()
def run(config: Path = ConfigOption, log_level: str | None = LogLevelOption):
    """Start the poll and daily report timers and run until interrupted."""
    cfg = _load(config, log_level)
    scheduler = Scheduler(IntelRunner(cfg), cfg.schedule)
    try:
        asyncio.run(scheduler.run_forever())
    except KeyboardInterrupt:
        console.print("Stopped.")


@app.command()
def poll(config: Path = ConfigOption, log_level: str | None = LogLevelOption):
    """Run a single poll cycle."""
    cfg = _load(config, log_level)
    runner = IntelRunner(cfg)

    async def _poll():
        outcome = await runner.poll_once()
        await runner.drain()
        return outcome

    outcome = asyncio.run(_poll())
    if outcome.aborted:
        console.print("[red]Poll aborted: sources file could not be loaded[/red]")
        raise typer.Exit(code=1)
    console.print(
        f"[bold]Poll summary[/bold]: sources={outcome.sources_polled}, "
        f"new={len(outcome.items)}, alerts={len(outcome.alerts)}"
    )


@app.command()
def report(
    config: Path = ConfigOption,
    force: bool = typer.Option(False, "--force", help="Generate even if today's report exists."),
    log_level: str | None = LogLevelOption,
):
    """Generate the daily report now."""
    cfg = _load(config, log_level)
    runner = IntelRunner(cfg)
    path = asyncio.run(runner.run_daily_report(force=force))
    if path is None:
        console.print(f"Report already generated for {runner.today()} (use --force to regenerate).")
        return
    console.print(f"Report generated: {path}")


@app.command()
def status(config: Path = ConfigOption):
    """Print the service status as JSON."""
    cfg = _load(config, "WARNING")
    console.print_json(json.dumps(IntelRunner(cfg).status()))


@app.command()
def latest(config: Path = ConfigOption):
    """Print the most recent archived report."""
    cfg = _load(config, "WARNING")
    text = IntelRunner(cfg).latest_report()
    if text is None:
        console.print("No reports generated yet")
        raise typer.Exit(code=1)
    console.print(text, markup=False, highlight=False)


@app.command("list-reports")
def list_reports(config: Path = ConfigOption):
    """List archived reports, newest first."""
    cfg = _load(config, "WARNING")
    for name in IntelRunner(cfg).list_reports():
        console.print(name)


if __name__ == "__main__":
    app()
