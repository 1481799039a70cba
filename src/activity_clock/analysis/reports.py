"""Terminal reports for today's totals and multi-day history."""

from datetime import date, datetime, timedelta
from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from activity_clock.core.models import DailySummary, TodaySummary


def format_clock(seconds: Optional[int]) -> str:
    """Format seconds as ``HH:MM:SS``."""
    if seconds is None:
        return "running"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_day(day: date, today: date) -> str:
    """Label a day as Today, Yesterday, or e.g. ``Mon, Nov 10``."""
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    if day.year != today.year:
        return day.strftime("%a, %b %d %Y")
    return day.strftime("%a, %b %d")


class ReportGenerator:
    """Render summaries with rich tables."""

    def __init__(self, categories: list[str], console: Optional[Console] = None):
        """Initialize report generator.

        Args:
            categories: Categories in display order
            console: Rich console for output. Creates default if None.
        """
        self.categories = categories
        self.console = console or Console()

    def today_report(self, summary: TodaySummary, now: Optional[datetime] = None) -> None:
        """Display today's totals, including the running entry's elapsed time.

        Args:
            summary: Today's summary from the aggregator
            now: Current time used for the live figure
        """
        now = now or datetime.now()
        totals = summary.live_totals(now)
        running = summary.running_entry

        table = Table(title=f"Today's Totals ({summary.date.isoformat()})")
        table.add_column("Category", style="cyan")
        table.add_column("Time", style="magenta", justify="right")
        table.add_column("Bar", style="blue")

        grand_total = sum(totals.values())
        for category in self.categories:
            seconds = totals.get(category, 0)
            label = f"▶ {category}" if running and running.category == category else category
            pct = (seconds / grand_total) * 100 if grand_total > 0 else 0
            table.add_row(label, format_clock(seconds), self._create_bar(pct))

        table.add_section()
        table.add_row("[bold]Total[/bold]", f"[bold]{format_clock(grand_total)}[/bold]", "")

        self.console.print(table)

    def history_report(self, summaries: list[DailySummary], today: Optional[date] = None) -> None:
        """Display one block per day with totals and individual entries.

        Args:
            summaries: Daily summaries, most recent first
            today: Reference day for relative labels
        """
        if not summaries:
            self.console.print("[yellow]No history data available[/yellow]")
            return

        today = today or datetime.now().date()

        for summary in summaries:
            self.console.print(
                f"\n[bold cyan]{format_day(summary.date, today)}[/bold cyan]  "
                f"[bold]{format_clock(summary.total_seconds)}[/bold]"
            )

            totals_table = Table(show_header=False, box=None, padding=(0, 2))
            for _ in self.categories:
                totals_table.add_column(style="dim")
            totals_table.add_row(
                *[
                    f"{category} {format_clock(summary.totals.get(category, 0))}"
                    for category in self.categories
                ]
            )
            self.console.print(totals_table)

            entries_table = Table()
            entries_table.add_column("Time", style="cyan")
            entries_table.add_column("Category", style="green")
            entries_table.add_column("Description")
            entries_table.add_column("Duration", style="magenta", justify="right")

            for entry in summary.entries:
                end = entry.end_time.strftime("%H:%M") if entry.end_time else "..."
                entries_table.add_row(
                    f"{entry.start_time.strftime('%H:%M')} - {end}",
                    entry.category,
                    entry.description or "-",
                    format_clock(entry.duration_seconds),
                )

            self.console.print(entries_table)

    def _create_bar(self, percentage: float, width: int = 20) -> Text:
        """Create a visual bar for percentage display."""
        filled = int((percentage / 100) * width)
        empty = width - filled

        bar = Text()
        bar.append("█" * filled, style="blue")
        bar.append("░" * empty, style="dim")

        return bar
