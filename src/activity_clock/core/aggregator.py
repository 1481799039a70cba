"""Daily and per-category aggregation of time entries."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from activity_clock.core.models import DailySummary, TimeEntry, TodaySummary
from activity_clock.core.storage import StorageManager
from activity_clock.core.tracker import DEFAULT_CATEGORIES

DEFAULT_MAX_DAYS = 30


class Aggregator:
    """Read-only summaries over a user's entries.

    Entries are attributed to the local calendar day of their start time.
    Only closed entries contribute to totals.
    """

    def __init__(
        self,
        storage: StorageManager,
        categories: Optional[Iterable[str]] = None,
        clock: Callable[[], datetime] = datetime.now,
        max_days: int = DEFAULT_MAX_DAYS,
    ):
        """Initialize aggregator.

        Args:
            storage: Storage manager to read from
            categories: Configured categories in display order
            clock: Source of the current timestamp
            max_days: Upper bound for history requests
        """
        self.storage = storage
        self.categories = list(categories) if categories is not None else list(DEFAULT_CATEGORIES)
        self.clock = clock
        self.max_days = max_days

    def clamp_days(self, days: int) -> int:
        """Clamp a requested history length to ``1..max_days``."""
        return max(1, min(int(days), self.max_days))

    def _totals(self, entries: Iterable[TimeEntry]) -> dict[str, int]:
        totals: dict[str, int] = {category: 0 for category in self.categories}
        for entry in entries:
            if entry.duration_seconds is not None:
                totals[entry.category] = totals.get(entry.category, 0) + entry.duration_seconds
        return totals

    def today(self, user_id: str) -> TodaySummary:
        """Summarize the current calendar day.

        Args:
            user_id: User identity

        Totals and the running entry come from a single read of the store.

        Returns:
            Closed-entry totals per category plus the running entry (if any)
        """
        today = self.clock().date()
        entries = self.storage.load_entries(user_id)
        running = [e for e in entries if e.is_running]
        return TodaySummary(
            date=today,
            totals=self._totals(e for e in entries if e.day == today),
            running_entry=running[-1] if running else None,
        )

    def history(self, user_id: str, days: int = DEFAULT_MAX_DAYS) -> list[DailySummary]:
        """Summarize the last ``days`` calendar days, most recent first.

        Days without closed entries are omitted.

        Args:
            user_id: User identity
            days: Number of days including today (clamped to ``1..max_days``)

        Returns:
            One DailySummary per day with entries
        """
        days = self.clamp_days(days)
        today = self.clock().date()
        first_day = today - timedelta(days=days - 1)

        by_day: dict[date, list[TimeEntry]] = defaultdict(list)
        for entry in self.storage.entries_in_range(user_id, first_day, today):
            if not entry.is_running:
                by_day[entry.day].append(entry)

        return [
            DailySummary(date=day, entries=by_day[day], totals=self._totals(by_day[day]))
            for day in sorted(by_day, reverse=True)
        ]
