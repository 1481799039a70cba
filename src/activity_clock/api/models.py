"""Pydantic models for API requests and responses.

Field names are snake_case in Python and camelCase on the wire, which is
what the browser client sends and expects.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field  # type: ignore[import-untyped]
from pydantic.alias_generators import to_camel  # type: ignore[import-untyped]

from activity_clock.core.models import DailySummary, TimeEntry, TodaySummary


class ApiModel(BaseModel):
    """Base model serializing to camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Response Models
# ============================================================================


class EntryResponse(ApiModel):
    """Response model for a time entry."""

    id: str
    category: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    description: str = ""

    @classmethod
    def from_entry(cls, entry: TimeEntry) -> "EntryResponse":
        """Create response from a TimeEntry."""
        return cls(
            id=str(entry.id),
            category=entry.category,
            start_time=entry.start_time,
            end_time=entry.end_time,
            duration_seconds=entry.duration_seconds,
            description=entry.description,
        )


class RunningEntryResponse(ApiModel):
    """The running entry as reported with today's totals."""

    id: str
    category: str
    start_time: datetime
    description: str = ""

    @classmethod
    def from_entry(cls, entry: TimeEntry) -> "RunningEntryResponse":
        return cls(
            id=str(entry.id),
            category=entry.category,
            start_time=entry.start_time,
            description=entry.description,
        )


class StartResponse(ApiModel):
    """Response for a started entry."""

    success: bool = True
    entry_id: str
    start_time: datetime


class StopResponse(ApiModel):
    """Response for a stop request; ``closed_entry`` is null if nothing ran."""

    success: bool = True
    closed_entry: Optional[EntryResponse] = None


class TodayResponse(ApiModel):
    """Closed-entry totals for today plus the running entry."""

    success: bool = True
    day: date = Field(..., alias="date")
    totals: dict[str, int]
    total_seconds: int
    running_entry: Optional[RunningEntryResponse] = None

    @classmethod
    def from_summary(cls, summary: TodaySummary) -> "TodayResponse":
        return cls(
            day=summary.date,
            totals=summary.totals,
            total_seconds=summary.total_seconds,
            running_entry=(
                RunningEntryResponse.from_entry(summary.running_entry)
                if summary.running_entry
                else None
            ),
        )


class DailySummaryResponse(ApiModel):
    """One day of history."""

    day: date = Field(..., alias="date")
    entries: list[EntryResponse]
    totals: dict[str, int]
    total_seconds: int

    @classmethod
    def from_summary(cls, summary: DailySummary) -> "DailySummaryResponse":
        return cls(
            day=summary.date,
            entries=[EntryResponse.from_entry(e) for e in summary.entries],
            totals=summary.totals,
            total_seconds=summary.total_seconds,
        )


class HistoryResponse(ApiModel):
    """Multi-day history, most recent day first."""

    success: bool = True
    history: list[DailySummaryResponse]


class CategoriesResponse(ApiModel):
    """Configured categories in display order."""

    categories: list[str]
    poll_interval_seconds: int


class UserResponse(ApiModel):
    """Public user identity."""

    id: str
    name: str


class LoginResponse(ApiModel):
    """Response for a successful login."""

    success: bool = True
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class HealthResponse(ApiModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    timestamp: datetime = Field(..., description="Current server time")
    version: str = Field(..., description="API version")


class ErrorResponse(ApiModel):
    """Response model for errors."""

    detail: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Machine-readable error code")


# ============================================================================
# Request Models
# ============================================================================


class LoginRequest(ApiModel):
    """Login credentials; an unknown name registers a new account."""

    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=200)


class StartRequest(ApiModel):
    """Request model for starting a category."""

    category: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=5000)
    user_id: Optional[str] = Field(None, max_length=100)


class StopRequest(ApiModel):
    """Request model for stopping the running entry."""

    user_id: Optional[str] = Field(None, max_length=100)
