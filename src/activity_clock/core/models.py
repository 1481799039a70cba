"""Core data models for category time tracking."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID, uuid4


@dataclass
class TimeEntry:
    """One interval of activity in a single category.

    Attributes:
        user_id: Owner identity (opaque)
        category: Category name from the configured set
        start_time: When the entry started
        id: Unique identifier (UUID)
        end_time: When the entry ended (None while running)
        description: Free-text note set when the entry is started
        created_at: When this record was created
    """

    user_id: str
    category: str
    start_time: datetime
    id: UUID = field(default_factory=uuid4)
    end_time: Optional[datetime] = None
    description: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def duration_seconds(self) -> Optional[int]:
        """Calculate duration in whole seconds. Returns None if entry is running."""
        if self.end_time is None:
            return None
        delta = self.end_time - self.start_time
        return max(0, int(delta.total_seconds()))

    @property
    def is_running(self) -> bool:
        """Check if this entry is currently running."""
        return self.end_time is None

    @property
    def day(self) -> date:
        """Calendar day the entry is attributed to (day of its start time)."""
        return self.start_time.date()

    def elapsed_seconds(self, now: datetime) -> int:
        """Seconds elapsed since start, for live display of a running entry."""
        if self.end_time is not None:
            return self.duration_seconds or 0
        return max(0, int((now - self.start_time).total_seconds()))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV/JSON serialization."""
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "category": self.category,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else "",
            "duration_seconds": "" if self.duration_seconds is None else self.duration_seconds,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeEntry":
        """Create TimeEntry from dictionary (CSV/JSON deserialization)."""
        return cls(
            id=UUID(data["id"]),
            user_id=data["user_id"],
            category=data["category"],
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=datetime.fromisoformat(data["end_time"]) if data.get("end_time") else None,
            description=data.get("description") or "",
            created_at=datetime.fromisoformat(data["created_at"]),
        )


@dataclass
class DailySummary:
    """Per-category and grand totals for one calendar day.

    Derived on demand, never stored. Only closed entries contribute.

    Attributes:
        date: Calendar day
        entries: Closed entries started that day, ordered by start time
        totals: Seconds per category (every configured category present)
        total_seconds: Sum over all categories
    """

    date: date
    entries: list[TimeEntry] = field(default_factory=list)
    totals: dict[str, int] = field(default_factory=dict)

    @property
    def total_seconds(self) -> int:
        return sum(self.totals.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "entries": [e.to_dict() for e in self.entries],
            "totals": dict(self.totals),
            "total_seconds": self.total_seconds,
        }


@dataclass
class TodaySummary:
    """Closed-entry totals for the current day plus the running entry.

    The running entry's elapsed time is not part of ``totals``; use
    :meth:`live_totals` to add it for display.
    """

    date: date
    totals: dict[str, int] = field(default_factory=dict)
    running_entry: Optional[TimeEntry] = None

    @property
    def total_seconds(self) -> int:
        return sum(self.totals.values())

    def live_totals(self, now: datetime) -> dict[str, int]:
        """Totals with the running entry's elapsed time added to its category."""
        totals = dict(self.totals)
        if self.running_entry is not None:
            category = self.running_entry.category
            totals[category] = totals.get(category, 0) + self.running_entry.elapsed_seconds(now)
        return totals

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "totals": dict(self.totals),
            "total_seconds": self.total_seconds,
            "running_entry": self.running_entry.to_dict() if self.running_entry else None,
        }


@dataclass
class User:
    """Account mapping a login name to a stable user identity.

    Attributes:
        name: Login name (unique)
        password_hash: bcrypt hash of the password
        id: Stable user identifier
        created_at: Account creation time
    """

    name: str
    password_hash: str
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for CSV serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "password_hash": self.password_hash,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        """Create User from dictionary (CSV deserialization)."""
        return cls(
            id=data["id"],
            name=data["name"],
            password_hash=data["password_hash"],
            created_at=datetime.fromisoformat(data["created_at"]),
        )
