"""Main CLI application."""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.panel import Panel

from activity_clock import __version__
from activity_clock.analysis.reports import ReportGenerator, format_clock
from activity_clock.cli.config_commands import config
from activity_clock.core.aggregator import Aggregator
from activity_clock.core.config import ConfigManager
from activity_clock.core.exceptions import ActivityClockError
from activity_clock.core.storage import StorageManager
from activity_clock.core.tracker import TimeTracker
from activity_clock.logging_setup import setup_logging

console = Console()
error_console = Console(stderr=True)


class AppContext:
    """Objects shared by the commands of one invocation."""

    def __init__(self, config: ConfigManager, data_dir: Optional[str], user: Optional[str]):
        self.config = config
        self.data_dir = Path(data_dir) if data_dir else config.data_dir
        self.user_id: str = user or config.get("general.default_user", "local")
        self._storage: Optional[StorageManager] = None

    @property
    def storage(self) -> StorageManager:
        if self._storage is None:
            self._storage = StorageManager(self.data_dir)
        return self._storage

    @property
    def categories(self) -> list[str]:
        return self.config.categories

    def tracker(self) -> TimeTracker:
        return TimeTracker(self.storage, categories=self.categories)

    def aggregator(self) -> Aggregator:
        return Aggregator(
            self.storage,
            categories=self.categories,
            max_days=self.config.get("tracking.max_history_days", 30),
        )


def format_datetime(dt: datetime) -> str:
    """Format datetime for display."""
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {message}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_path", type=click.Path(), help="Path to config file")
@click.option("--data-dir", help="Custom data directory", type=click.Path())
@click.option("-u", "--user", help="User id to track for (default: general.default_user)")
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[str],
    data_dir: Optional[str],
    user: Optional[str],
    verbose: bool,
    no_color: bool,
) -> None:
    """Activity Clock - track time across a fixed set of categories.

    Start a category to switch to it; whatever was running stops at the
    same instant.
    """
    try:
        config_mgr = ConfigManager(Path(config_path) if config_path else None)
    except ValueError as e:
        fail(str(e))

    setup_logging(config_mgr, level="DEBUG" if verbose else "WARNING")
    ctx.obj = AppContext(config_mgr, data_dir, user)

    if no_color:
        console.no_color = True


@cli.command()
@click.argument("category")
@click.option("-d", "--description", default="", help="What you are working on")
@click.pass_obj
def start(app: AppContext, category: str, description: str) -> None:
    """Start tracking CATEGORY, stopping the running activity.

    Example:
        activity-clock start Python -d "pandas exercises"
    """
    tracker = app.tracker()

    try:
        stopped, entry = tracker.switch(app.user_id, category, description)
    except ActivityClockError as e:
        fail(str(e))

    if stopped is not None:
        console.print(
            f"[yellow]⏹[/yellow]  Stopped: {stopped.category} ({format_clock(stopped.duration_seconds)})"
        )
    console.print(f"[green]▶[/green]  Started: {entry.category}")
    if entry.description:
        console.print(f"  Description: {entry.description}")
    console.print(f"  Started: {format_datetime(entry.start_time)}")


@cli.command()
@click.pass_obj
def stop(app: AppContext) -> None:
    """Stop the running activity.

    Example:
        activity-clock stop
    """
    try:
        entry = app.tracker().stop(app.user_id)
    except ActivityClockError as e:
        fail(str(e))

    if entry is None:
        console.print("[yellow]No activity running[/yellow]")
        return

    console.print(f"[green]✓[/green] Stopped: {entry.category}")
    console.print(f"  Duration: {format_clock(entry.duration_seconds)}")


@cli.command()
@click.pass_obj
def status(app: AppContext) -> None:
    """Show the running activity and its elapsed time."""
    try:
        entry = app.tracker().status(app.user_id)
    except ActivityClockError as e:
        fail(str(e))

    if entry is None:
        console.print("[yellow]No activity running[/yellow]")
        console.print("\nStart one with: [cyan]activity-clock start CATEGORY[/cyan]")
        return

    content = f"""[bold]{entry.category}[/bold]

[dim]Started:[/dim] {format_datetime(entry.start_time)}
[dim]Elapsed:[/dim] {format_clock(entry.elapsed_seconds(datetime.now()))}"""
    if entry.description:
        content += f"\n[dim]Description:[/dim] {entry.description}"

    console.print(Panel(content, title="Current Activity", border_style="green"))


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def today(app: AppContext, as_json: bool) -> None:
    """Show today's totals per category."""
    try:
        summary = app.aggregator().today(app.user_id)
    except ActivityClockError as e:
        fail(str(e))

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return

    ReportGenerator(app.categories, console).today_report(summary)


@cli.command()
@click.option("-n", "--days", type=int, default=None, help="Number of days (default: tracking.history_days)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def history(app: AppContext, days: Optional[int], as_json: bool) -> None:
    """Show daily totals and entries for recent days.

    Example:
        activity-clock history -n 7
    """
    if days is None:
        days = app.config.get("tracking.history_days", 30)

    try:
        summaries = app.aggregator().history(app.user_id, days)
    except ActivityClockError as e:
        fail(str(e))

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in summaries], indent=2))
        return

    ReportGenerator(app.categories, console).history_report(summaries)


@cli.command()
@click.pass_obj
def categories(app: AppContext) -> None:
    """List the configured categories in display order."""
    for category in app.categories:
        console.print(category)


@cli.command()
@click.option("--host", default=None, help="Host address (default: from config)")
@click.option("--port", type=int, default=None, help="Port number (default: from config)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.pass_obj
def serve(app: AppContext, host: Optional[str], port: Optional[int], reload: bool) -> None:
    """Start the API server.

    Examples:
        activity-clock serve
        activity-clock serve --host 0.0.0.0 --port 8080
    """
    from activity_clock.api.server import run_server

    if not app.config.get("api.enabled", True):
        fail("API is not enabled. Run: activity-clock config set api.enabled true")

    setup_logging(app.config)

    final_host = host or app.config.get("api.host", "localhost")
    final_port = port or app.config.get("api.port", 5000)

    console.print("Starting Activity Clock API server...")
    console.print(f"   URL: http://{final_host}:{final_port}")
    console.print(f"   Docs: http://{final_host}:{final_port}/docs")

    try:
        run_server(
            host=final_host,
            port=final_port,
            reload=reload,
            workers=app.config.get("api.workers", 1),
            config=app.config,
            data_dir=app.data_dir,
        )
    except KeyboardInterrupt:
        console.print("\nShutting down API server...")


cli.add_command(config)


def main() -> None:
    """Entry point for the console script."""
    cli()


if __name__ == "__main__":
    main()
