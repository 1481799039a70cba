"""CSV entry store with atomic writes and per-user write serialization."""

import csv
import logging
import os
import sys
import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar
from uuid import UUID

from activity_clock.core.exceptions import StoreUnavailable
from activity_clock.core.models import TimeEntry, User

logger = logging.getLogger(__name__)

T = TypeVar("T")

ENTRY_FIELDS = [
    "id",
    "user_id",
    "category",
    "start_time",
    "end_time",
    "duration_seconds",
    "description",
    "created_at",
]

USER_FIELDS = ["id", "name", "password_hash", "created_at"]


def _lock_file(file_obj: Any) -> None:
    """Acquire an exclusive advisory lock in a cross-platform way.

    Args:
        file_obj: File object to lock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_LOCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_EX)


def _unlock_file(file_obj: Any) -> None:
    """Release a lock taken with :func:`_lock_file`.

    Args:
        file_obj: File object to unlock
    """
    if sys.platform == "win32":
        import msvcrt  # type: ignore[import-not-found]

        msvcrt.locking(file_obj.fileno(), msvcrt.LK_UNLCK, 1)
    else:
        import fcntl  # type: ignore[import-not-found]

        fcntl.flock(file_obj.fileno(), fcntl.LOCK_UN)


class StorageManager:
    """Durable record of all time entries, keyed by user.

    Every write is a read-modify-write of the whole CSV file followed by an
    atomic rename, so readers always see a complete file. Writes are
    serialized within the process by an I/O lock and across processes by an
    advisory lock on ``entries.lock``. State transitions for a single user
    are additionally serialized by :meth:`user_lock`.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize storage manager.

        Args:
            data_dir: Custom data directory. Defaults to ~/.activity-clock/data

        Raises:
            StoreUnavailable: If the data directory cannot be created
        """
        if data_dir is None:
            data_dir = Path.home() / ".activity-clock" / "data"

        self.data_dir = data_dir
        self.entries_file = self.data_dir / "entries.csv"
        self.users_file = self.data_dir / "users.csv"
        self.lock_file = self.data_dir / "entries.lock"

        self._io_lock = threading.RLock()
        self._registry_lock = threading.Lock()
        # Entries disappear once no caller references the lock
        self._user_locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._account_locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Cannot create data directory {self.data_dir}: {e}")
            raise StoreUnavailable(f"Cannot create data directory {self.data_dir}: {e}") from e

        self._initialize_files()

    def _initialize_files(self) -> None:
        """Create CSV files with headers if they don't exist."""
        with self._exclusive():
            if not self.entries_file.exists():
                self._write_csv_atomic(self.entries_file, ENTRY_FIELDS, [])
            if not self.users_file.exists():
                self._write_csv_atomic(self.users_file, USER_FIELDS, [])

    # Locking

    def user_lock(self, user_id: str) -> threading.Lock:
        """Get the lock that serializes state transitions for one user.

        Locks are created lazily; different users never share a lock.

        Args:
            user_id: User identity

        Returns:
            Lock for this user (use as a context manager)
        """
        return self._get_lock(self._user_locks, user_id)

    def account_lock(self, name: str) -> threading.Lock:
        """Get the lock that serializes registration of one login name.

        Kept apart from :meth:`user_lock` so login names and user ids never
        contend.
        """
        return self._get_lock(self._account_locks, name)

    def _get_lock(
        self, registry: "weakref.WeakValueDictionary[str, threading.Lock]", key: str
    ) -> threading.Lock:
        with self._registry_lock:
            lock = registry.get(key)
            if lock is None:
                lock = threading.Lock()
                registry[key] = lock
            return lock

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Hold the in-process I/O lock and the cross-process file lock."""
        with self._io_lock:
            try:
                handle = open(self.lock_file, "a+", encoding="utf-8")
                _lock_file(handle)
            except OSError as e:
                logger.error(f"Cannot lock {self.lock_file}: {e}")
                raise StoreUnavailable(f"Cannot lock {self.lock_file}: {e}") from e
            try:
                yield
            finally:
                _unlock_file(handle)
                handle.close()

    # Raw file access

    def _write_csv_atomic(
        self, file_path: Path, fieldnames: list[str], rows: list[dict[str, Any]]
    ) -> None:
        """Write CSV file atomically using temporary file and rename.

        Args:
            file_path: Target file path
            fieldnames: CSV field names
            rows: List of row dictionaries

        Raises:
            StoreUnavailable: If the file cannot be written
        """
        temp_file = file_path.with_suffix(".tmp")

        try:
            with open(temp_file, "w", newline="", encoding="utf-8") as f:
                writer = csv.DictWriter(f, fieldnames=fieldnames)
                writer.writeheader()
                writer.writerows(rows)

                f.flush()
                os.fsync(f.fileno())

            temp_file.replace(file_path)

        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            logger.error(f"Failed to write {file_path}: {e}")
            raise StoreUnavailable(f"Failed to write {file_path}: {e}") from e

    def _read_csv(self, file_path: Path) -> list[dict[str, Any]]:
        """Read CSV file.

        Args:
            file_path: CSV file to read

        Returns:
            List of row dictionaries

        Raises:
            StoreUnavailable: If the file exists but cannot be read
        """
        if not file_path.exists():
            return []

        try:
            with open(file_path, newline="", encoding="utf-8") as f:
                return list(csv.DictReader(f))
        except OSError as e:
            logger.error(f"Failed to read {file_path}: {e}")
            raise StoreUnavailable(f"Failed to read {file_path}: {e}") from e

    def _mutate_entries(self, mutate: Callable[[list[dict[str, Any]]], T]) -> T:
        """Apply ``mutate`` to the entry rows and persist them in one write.

        Args:
            mutate: Callback that edits the row list in place

        Returns:
            Whatever ``mutate`` returns
        """
        with self._exclusive():
            rows = self._read_csv(self.entries_file)
            result = mutate(rows)
            self._write_csv_atomic(self.entries_file, ENTRY_FIELDS, rows)
            return result

    # Entry operations

    def append(self, entry: TimeEntry) -> UUID:
        """Persist a new entry.

        Args:
            entry: Entry to append

        Returns:
            ID of the stored entry
        """
        self._mutate_entries(lambda rows: rows.append(entry.to_dict()))
        return entry.id

    def load_entries(self, user_id: Optional[str] = None) -> list[TimeEntry]:
        """Load entries ordered by start time ascending.

        Args:
            user_id: Only return entries owned by this user

        Returns:
            List of TimeEntry objects
        """
        rows = self._read_csv(self.entries_file)
        entries = [
            TimeEntry.from_dict(row)
            for row in rows
            if user_id is None or row["user_id"] == user_id
        ]
        entries.sort(key=lambda e: e.start_time)
        return entries

    def find_running(self, user_id: str) -> Optional[TimeEntry]:
        """Get the user's running entry (if any).

        Args:
            user_id: User identity

        Returns:
            Most recent entry without an end time, or None
        """
        running = [e for e in self.load_entries(user_id) if e.is_running]
        if not running:
            return None
        return running[-1]

    def close_running(self, user_id: str, end_time: datetime) -> Optional[TimeEntry]:
        """Close the user's running entry.

        A no-op when nothing is running, which makes stopping idempotent.

        Args:
            user_id: User identity
            end_time: Timestamp to close the entry with

        Returns:
            The closed entry, or None if nothing was running
        """
        return self._mutate_entries(lambda rows: self._close_in_rows(rows, user_id, end_time))

    def close_and_append(self, entry: TimeEntry) -> Optional[TimeEntry]:
        """Close the owner's running entry and append ``entry`` in one write.

        The running entry is closed at ``entry.start_time`` so there is no gap
        or overlap between the two. A start time earlier than the running
        entry's (possible with writers in other processes) is moved up to it.

        Args:
            entry: New running entry

        Returns:
            The entry that was closed, or None if nothing was running
        """

        def mutate(rows: list[dict[str, Any]]) -> Optional[TimeEntry]:
            closed = self._close_in_rows(rows, entry.user_id, entry.start_time)
            if closed is not None and closed.end_time is not None:
                entry.start_time = closed.end_time
            rows.append(entry.to_dict())
            return closed

        return self._mutate_entries(mutate)

    def _close_in_rows(
        self, rows: list[dict[str, Any]], user_id: str, end_time: datetime
    ) -> Optional[TimeEntry]:
        """Close the latest running row for ``user_id`` in place."""
        candidates = [
            i for i, row in enumerate(rows) if row["user_id"] == user_id and not row["end_time"]
        ]
        if not candidates:
            return None

        index = max(candidates, key=lambda i: rows[i]["start_time"])
        entry = TimeEntry.from_dict(rows[index])
        entry.end_time = max(end_time, entry.start_time)
        rows[index] = entry.to_dict()
        return entry

    def entries_in_range(self, user_id: str, from_day: date, to_day: date) -> list[TimeEntry]:
        """Get entries whose start time falls within a range of calendar days.

        Args:
            user_id: User identity
            from_day: First day (inclusive)
            to_day: Last day (inclusive)

        Returns:
            Entries ordered by start time ascending
        """
        return [e for e in self.load_entries(user_id) if from_day <= e.day <= to_day]

    # User operations

    def save_user(self, user: User) -> None:
        """Save or update a user account.

        Args:
            user: User to save
        """
        with self._exclusive():
            users = self._read_csv(self.users_file)
            user_dict = user.to_dict()

            for i, row in enumerate(users):
                if row["id"] == user.id:
                    users[i] = user_dict
                    break
            else:
                users.append(user_dict)

            self._write_csv_atomic(self.users_file, USER_FIELDS, users)

    def load_users(self) -> list[User]:
        """Load all user accounts.

        Returns:
            List of User objects
        """
        return [User.from_dict(row) for row in self._read_csv(self.users_file)]

    def get_user(self, user_id: str) -> Optional[User]:
        """Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User or None if not found
        """
        for user in self.load_users():
            if user.id == user_id:
                return user
        return None

    def get_user_by_name(self, name: str) -> Optional[User]:
        """Get user by login name.

        Args:
            name: Login name

        Returns:
            User or None if not found
        """
        for user in self.load_users():
            if user.name == name:
                return user
        return None
