"""Tests for storage manager."""

import gc
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest  # type: ignore[import-not-found]

from activity_clock.core.exceptions import StoreUnavailable
from activity_clock.core.models import TimeEntry, User
from activity_clock.core.storage import StorageManager


def make_entry(
    user_id: str = "u1",
    category: str = "Python",
    start: datetime = datetime(2025, 11, 16, 10, 0, 0),
    minutes: int = 0,
) -> TimeEntry:
    """Build an entry, closed after ``minutes`` if positive."""
    end = start + timedelta(minutes=minutes) if minutes else None
    return TimeEntry(user_id=user_id, category=category, start_time=start, end_time=end)


class TestStorageManager:
    """Test StorageManager."""

    def test_initialization_creates_csv_files(self, temp_storage: StorageManager) -> None:
        """Test that initialization creates CSV files with headers."""
        assert temp_storage.entries_file.exists()
        assert temp_storage.users_file.exists()

        with open(temp_storage.entries_file) as f:
            header = f.readline().strip()
            assert "user_id" in header
            assert "category" in header

    def test_unavailable_data_dir_raises(self, temp_dir: Path) -> None:
        """Test that an unusable data directory raises StoreUnavailable."""
        blocker = temp_dir / "not-a-dir"
        blocker.write_text("x")

        with pytest.raises(StoreUnavailable):
            StorageManager(blocker / "data")

    def test_append_and_load(self, temp_storage: StorageManager) -> None:
        """Test appending and loading an entry."""
        entry = make_entry(minutes=30)
        entry_id = temp_storage.append(entry)

        entries = temp_storage.load_entries("u1")

        assert entry_id == entry.id
        assert entries == [entry]

    def test_load_entries_filters_by_user(self, temp_storage: StorageManager) -> None:
        """Test that entries of other users are not returned."""
        temp_storage.append(make_entry(user_id="u1", minutes=5))
        temp_storage.append(make_entry(user_id="u2", minutes=5))

        assert [e.user_id for e in temp_storage.load_entries("u1")] == ["u1"]
        assert len(temp_storage.load_entries()) == 2

    def test_find_running(self, temp_storage: StorageManager) -> None:
        """Test finding the running entry."""
        temp_storage.append(make_entry(minutes=10))
        running = make_entry(start=datetime(2025, 11, 16, 11, 0, 0))
        temp_storage.append(running)

        found = temp_storage.find_running("u1")

        assert found is not None
        assert found.id == running.id

    def test_find_running_unknown_user(self, temp_storage: StorageManager) -> None:
        """Test that an unknown user simply has nothing running."""
        assert temp_storage.find_running("nobody") is None
        assert temp_storage.entries_in_range("nobody", date(2025, 1, 1), date(2025, 12, 31)) == []

    def test_close_running(self, temp_storage: StorageManager) -> None:
        """Test closing the running entry."""
        running = make_entry()
        temp_storage.append(running)
        end = running.start_time + timedelta(minutes=15)

        closed = temp_storage.close_running("u1", end)

        assert closed is not None
        assert closed.id == running.id
        assert closed.end_time == end
        assert closed.duration_seconds == 900
        assert temp_storage.find_running("u1") is None

    def test_close_running_is_noop_when_nothing_runs(self, temp_storage: StorageManager) -> None:
        """Test that closing with nothing running changes nothing."""
        closed_entry = make_entry(minutes=10)
        temp_storage.append(closed_entry)

        assert temp_storage.close_running("u1", datetime(2025, 11, 16, 12, 0)) is None
        assert temp_storage.load_entries("u1") == [closed_entry]

    def test_close_running_leaves_other_users_alone(self, temp_storage: StorageManager) -> None:
        """Test that closing one user's entry leaves another user's running entry."""
        temp_storage.append(make_entry(user_id="u1"))
        temp_storage.append(make_entry(user_id="u2"))

        temp_storage.close_running("u1", datetime(2025, 11, 16, 10, 30))

        assert temp_storage.find_running("u1") is None
        assert temp_storage.find_running("u2") is not None

    def test_close_and_append_zero_gap(self, temp_storage: StorageManager) -> None:
        """Test that switching closes the old entry exactly at the new start."""
        first = make_entry(category="Python")
        temp_storage.append(first)
        switch_at = first.start_time + timedelta(minutes=10)
        second = make_entry(category="SQL", start=switch_at)

        closed = temp_storage.close_and_append(second)

        assert closed is not None
        assert closed.id == first.id
        assert closed.end_time == switch_at
        running = temp_storage.find_running("u1")
        assert running is not None
        assert running.id == second.id

    def test_close_and_append_without_running(self, temp_storage: StorageManager) -> None:
        """Test that appending with nothing running returns None."""
        assert temp_storage.close_and_append(make_entry()) is None
        assert len(temp_storage.load_entries("u1")) == 1

    def test_close_and_append_never_starts_before_running_entry(
        self, temp_storage: StorageManager
    ) -> None:
        """Test that a stale start time is moved up to the running entry's start."""
        first = make_entry(start=datetime(2025, 11, 16, 10, 0, 0))
        temp_storage.append(first)
        stale = make_entry(category="SQL", start=datetime(2025, 11, 16, 9, 59, 0))

        closed = temp_storage.close_and_append(stale)

        assert closed is not None
        assert closed.duration_seconds == 0
        assert stale.start_time == first.start_time

    def test_entries_in_range(self, temp_storage: StorageManager) -> None:
        """Test range query bounds and ordering."""
        day1 = make_entry(start=datetime(2025, 11, 14, 10, 0), minutes=5)
        day2_late = make_entry(start=datetime(2025, 11, 15, 18, 0), minutes=5)
        day2_early = make_entry(start=datetime(2025, 11, 15, 8, 0), minutes=5)
        day3 = make_entry(start=datetime(2025, 11, 16, 10, 0), minutes=5)
        for entry in (day3, day2_late, day1, day2_early):
            temp_storage.append(entry)

        entries = temp_storage.entries_in_range("u1", date(2025, 11, 15), date(2025, 11, 16))

        assert [e.id for e in entries] == [day2_early.id, day2_late.id, day3.id]

    def test_description_survives_csv(self, temp_storage: StorageManager) -> None:
        """Test that commas, quotes and newlines in descriptions are preserved."""
        entry = make_entry(minutes=1)
        entry.description = 'joins, "window" functions\nand CTEs'
        temp_storage.append(entry)

        assert temp_storage.load_entries("u1")[0].description == entry.description

    def test_user_lock_per_user(self, temp_storage: StorageManager) -> None:
        """Test that each user gets one stable lock of their own."""
        assert temp_storage.user_lock("u1") is temp_storage.user_lock("u1")
        assert temp_storage.user_lock("u1") is not temp_storage.user_lock("u2")

    def test_unused_user_locks_are_released(self, temp_storage: StorageManager) -> None:
        """Test that the lock registry does not grow with every user seen."""
        for i in range(100):
            with temp_storage.user_lock(f"user-{i}"):
                pass
        gc.collect()

        assert len(temp_storage._user_locks) == 0

    def test_account_locks_separate_from_user_locks(self, temp_storage: StorageManager) -> None:
        """Test that a login name and an equal user id get different locks."""
        user = temp_storage.user_lock("bob")
        account = temp_storage.account_lock("bob")

        assert user is not account
        assert temp_storage.account_lock("bob") is account

    def test_data_persists_across_instances(self, temp_dir: Path) -> None:
        """Test that a new storage manager sees existing entries."""
        StorageManager(temp_dir / "data").append(make_entry(minutes=3))

        assert len(StorageManager(temp_dir / "data").load_entries("u1")) == 1


class TestUserStorage:
    """Test user account storage."""

    def test_save_and_get_user(self, temp_storage: StorageManager) -> None:
        """Test saving and fetching users by id and name."""
        user = User(name="asha", password_hash="hash")
        temp_storage.save_user(user)

        assert temp_storage.get_user(user.id) == user
        assert temp_storage.get_user_by_name("asha") == user
        assert temp_storage.get_user_by_name("ravi") is None

    def test_update_user(self, temp_storage: StorageManager) -> None:
        """Test that saving an existing user replaces it."""
        user = User(name="asha", password_hash="old")
        temp_storage.save_user(user)
        user.password_hash = "new"
        temp_storage.save_user(user)

        users = temp_storage.load_users()
        assert len(users) == 1
        assert users[0].password_hash == "new"
