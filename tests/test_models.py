"""Tests for core data models."""

from datetime import date, datetime, timedelta
from uuid import UUID

from activity_clock.core.models import DailySummary, TimeEntry, TodaySummary, User


class TestTimeEntry:
    """Test TimeEntry model."""

    def test_entry_creation(self) -> None:
        """Test basic entry creation."""
        entry = TimeEntry(
            user_id="u1",
            category="Python",
            start_time=datetime(2025, 11, 16, 10, 0, 0),
        )

        assert entry.user_id == "u1"
        assert entry.category == "Python"
        assert entry.end_time is None
        assert entry.description == ""
        assert isinstance(entry.id, UUID)
        assert entry.is_running is True

    def test_duration_is_none_while_running(self) -> None:
        """Test that duration is undefined before the entry is closed."""
        entry = TimeEntry(user_id="u1", category="SQL", start_time=datetime(2025, 11, 16, 10, 0))
        assert entry.duration_seconds is None

    def test_duration_whole_seconds(self) -> None:
        """Test duration truncates to whole seconds."""
        start = datetime(2025, 11, 16, 10, 0, 0)
        entry = TimeEntry(
            user_id="u1",
            category="SQL",
            start_time=start,
            end_time=start + timedelta(seconds=600, microseconds=900000),
        )

        assert entry.duration_seconds == 600
        assert entry.is_running is False

    def test_duration_never_negative(self) -> None:
        """Test that a malformed interval reports zero, not a negative duration."""
        start = datetime(2025, 11, 16, 10, 0, 0)
        entry = TimeEntry(
            user_id="u1", category="SQL", start_time=start, end_time=start - timedelta(seconds=5)
        )
        assert entry.duration_seconds == 0

    def test_day_is_start_day(self) -> None:
        """Test that an entry belongs to the day it started."""
        entry = TimeEntry(
            user_id="u1",
            category="TT",
            start_time=datetime(2025, 11, 16, 23, 30),
            end_time=datetime(2025, 11, 17, 0, 30),
        )
        assert entry.day == date(2025, 11, 16)

    def test_elapsed_seconds(self) -> None:
        """Test live elapsed time for a running entry."""
        start = datetime(2025, 11, 16, 10, 0, 0)
        entry = TimeEntry(user_id="u1", category="Break", start_time=start)
        assert entry.elapsed_seconds(start + timedelta(minutes=2)) == 120

    def test_to_dict_and_from_dict(self) -> None:
        """Test CSV serialization keeps every field."""
        entry = TimeEntry(
            user_id="u1",
            category="Python",
            start_time=datetime(2025, 11, 16, 10, 0, 0),
            end_time=datetime(2025, 11, 16, 10, 10, 0),
            description="pandas, groupby",
        )

        data = entry.to_dict()
        assert data["duration_seconds"] == 600
        assert data["id"] == str(entry.id)

        restored = TimeEntry.from_dict(data)
        assert restored == entry

    def test_running_entry_serializes_empty_end_time(self) -> None:
        """Test that a running entry has empty end time and duration."""
        entry = TimeEntry(user_id="u1", category="Python", start_time=datetime(2025, 11, 16, 10))

        data = entry.to_dict()
        assert data["end_time"] == ""
        assert data["duration_seconds"] == ""
        assert TimeEntry.from_dict(data).end_time is None


class TestSummaries:
    """Test derived summary models."""

    def test_daily_summary_total(self) -> None:
        """Test grand total sums category totals."""
        summary = DailySummary(
            date=date(2025, 11, 16), totals={"Python": 600, "SQL": 300, "Break": 0}
        )
        assert summary.total_seconds == 900
        assert summary.to_dict()["total_seconds"] == 900

    def test_live_totals_add_running_elapsed(self) -> None:
        """Test live totals add elapsed time without touching stored totals."""
        start = datetime(2025, 11, 16, 10, 0, 0)
        running = TimeEntry(user_id="u1", category="Python", start_time=start)
        summary = TodaySummary(
            date=start.date(), totals={"Python": 600, "SQL": 0}, running_entry=running
        )

        live = summary.live_totals(start + timedelta(seconds=30))

        assert live == {"Python": 630, "SQL": 0}
        assert summary.totals == {"Python": 600, "SQL": 0}
        assert summary.total_seconds == 600

    def test_live_totals_without_running_entry(self) -> None:
        """Test live totals equal stored totals when nothing runs."""
        summary = TodaySummary(date=date(2025, 11, 16), totals={"Python": 5})
        assert summary.live_totals(datetime(2025, 11, 16, 12)) == {"Python": 5}
        assert summary.to_dict()["running_entry"] is None


class TestUser:
    """Test User model."""

    def test_user_round_trip(self) -> None:
        """Test user CSV serialization."""
        user = User(name="asha", password_hash="$2b$12$hash")
        restored = User.from_dict(user.to_dict())

        assert restored == user
        assert isinstance(UUID(restored.id), UUID)
