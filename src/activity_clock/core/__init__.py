"""Core functionality for category time tracking."""

from activity_clock.core.aggregator import Aggregator
from activity_clock.core.exceptions import InvalidCategory, StoreUnavailable
from activity_clock.core.models import DailySummary, TimeEntry, TodaySummary
from activity_clock.core.tracker import TimeTracker

__all__ = [
    "Aggregator",
    "DailySummary",
    "InvalidCategory",
    "StoreUnavailable",
    "TimeEntry",
    "TimeTracker",
    "TodaySummary",
]
