"""Exceptions raised by the tracking core."""

from typing import Iterable


class ActivityClockError(Exception):
    """Base exception for Activity Clock errors."""

    pass


class InvalidCategory(ActivityClockError, ValueError):
    """Raised when an entry is started with a category outside the configured set."""

    def __init__(self, category: str, allowed: Iterable[str]):
        self.category = category
        self.allowed = list(allowed)
        super().__init__(
            f"Invalid category: {category!r}. Expected one of: {', '.join(self.allowed)}"
        )


class StoreUnavailable(ActivityClockError):
    """Raised when the entry store cannot be read or written."""

    pass


class AuthenticationError(ActivityClockError):
    """Raised when credentials do not match an existing account."""

    pass
