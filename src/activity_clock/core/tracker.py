"""Core time tracking engine."""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Callable, Optional

from activity_clock.core.exceptions import InvalidCategory
from activity_clock.core.models import TimeEntry
from activity_clock.core.storage import StorageManager

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = ["Python", "SQL", "Datasetu", "Break", "TT"]


class TimeTracker:
    """Start/stop transitions keeping at most one running entry per user."""

    def __init__(
        self,
        storage: Optional[StorageManager] = None,
        categories: Optional[Iterable[str]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize time tracker.

        Args:
            storage: Storage manager instance. Creates default if None.
            categories: Allowed categories in display order
            clock: Source of the current timestamp
        """
        self.storage = storage or StorageManager()
        self.categories = list(categories) if categories is not None else list(DEFAULT_CATEGORIES)
        self.clock = clock

    def validate_category(self, category: str) -> None:
        """Check that a category belongs to the configured set.

        Raises:
            InvalidCategory: If it does not
        """
        if category not in self.categories:
            raise InvalidCategory(category, self.categories)

    def start(self, user_id: str, category: str, description: str = "") -> TimeEntry:
        """Start tracking a category, stopping whatever was running.

        Args:
            user_id: User identity
            category: Category to track
            description: Optional free-text description

        Returns:
            Created entry

        Raises:
            InvalidCategory: If the category is not configured
            StoreUnavailable: If the store cannot be written
        """
        return self.switch(user_id, category, description)[1]

    def switch(
        self, user_id: str, category: str, description: str = ""
    ) -> tuple[Optional[TimeEntry], TimeEntry]:
        """Close the running entry (if any) and open a new one.

        The previous running entry is closed at exactly the new entry's start
        time, in the same store write that creates the new entry.

        Args:
            user_id: User identity
            category: Category to track
            description: Optional free-text description

        Returns:
            Tuple of (stopped entry or None, new entry)

        Raises:
            InvalidCategory: If the category is not configured
            StoreUnavailable: If the store cannot be written
        """
        self.validate_category(category)

        with self.storage.user_lock(user_id):
            entry = TimeEntry(
                user_id=user_id,
                category=category,
                start_time=self.clock(),
                description=description or "",
            )
            stopped = self.storage.close_and_append(entry)

        if stopped:
            logger.info(
                f"Stopped {stopped.category} for {user_id} after {stopped.duration_seconds}s"
            )
        logger.info(f"Started {category} for {user_id} (entry {entry.id})")
        return stopped, entry

    def stop(self, user_id: str) -> Optional[TimeEntry]:
        """Stop the user's running entry.

        Stopping when nothing is running is a no-op, so repeated calls are safe.

        Args:
            user_id: User identity

        Returns:
            Closed entry or None if nothing was running
        """
        with self.storage.user_lock(user_id):
            closed = self.storage.close_running(user_id, self.clock())

        if closed is None:
            logger.debug(f"Stop requested for {user_id} with nothing running")
        else:
            logger.info(
                f"Stopped {closed.category} for {user_id} after {closed.duration_seconds}s"
            )
        return closed

    def status(self, user_id: str) -> Optional[TimeEntry]:
        """Get the user's running entry.

        Returns:
            Running entry or None if not tracking
        """
        return self.storage.find_running(user_id)
