"""Tracking endpoints: start, stop, today's totals and history.

Endpoints are plain functions so FastAPI runs them in its thread pool; the
per-user locks in the store then serialize concurrent requests for the same
user (for example two open browser tabs).
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query  # type: ignore[import-untyped]

from activity_clock.api.auth import resolve_user_id, verify_token
from activity_clock.api.dependencies import get_aggregator, get_tracker
from activity_clock.api.models import (
    DailySummaryResponse,
    EntryResponse,
    HistoryResponse,
    StartRequest,
    StartResponse,
    StopRequest,
    StopResponse,
    TodayResponse,
)
from activity_clock.core.aggregator import Aggregator
from activity_clock.core.tracker import TimeTracker

router = APIRouter()


@router.post("/start", response_model=StartResponse)
def start_tracking(
    request: StartRequest,
    tracker: TimeTracker = Depends(get_tracker),
    token: dict[str, Any] = Depends(verify_token),
) -> StartResponse:
    """Start a category, implicitly stopping whatever was running.

    Example:
        >>> POST /api/track/start
        {"category": "Python", "description": "pandas exercises"}
        {"success": true, "entryId": "uuid", "startTime": "2025-11-16T10:00:00"}
    """
    user_id = resolve_user_id(token, request.user_id)
    entry = tracker.start(user_id, request.category, request.description)
    return StartResponse(entry_id=str(entry.id), start_time=entry.start_time)


@router.post("/stop", response_model=StopResponse)
def stop_tracking(
    request: Optional[StopRequest] = None,
    tracker: TimeTracker = Depends(get_tracker),
    token: dict[str, Any] = Depends(verify_token),
) -> StopResponse:
    """Stop the running entry. Succeeds with ``closedEntry: null`` if nothing runs."""
    user_id = resolve_user_id(token, request.user_id if request else None)
    closed = tracker.stop(user_id)
    return StopResponse(closed_entry=EntryResponse.from_entry(closed) if closed else None)


@router.get("/today", response_model=TodayResponse)
def today(
    user_id: Optional[str] = Query(None, alias="userId"),
    aggregator: Aggregator = Depends(get_aggregator),
    token: dict[str, Any] = Depends(verify_token),
) -> TodayResponse:
    """Closed-entry totals per category for today plus the running entry.

    The running entry's elapsed time is not included in ``totals``; clients
    add ``now - runningEntry.startTime`` for a live figure.
    """
    summary = aggregator.today(resolve_user_id(token, user_id))
    return TodayResponse.from_summary(summary)


@router.get("/history", response_model=HistoryResponse)
def history(
    user_id: Optional[str] = Query(None, alias="userId"),
    days: int = Query(30, description="Days including today (clamped to the configured maximum)"),
    aggregator: Aggregator = Depends(get_aggregator),
    token: dict[str, Any] = Depends(verify_token),
) -> HistoryResponse:
    """Daily summaries for the last ``days`` days, most recent first."""
    summaries = aggregator.history(resolve_user_id(token, user_id), days)
    return HistoryResponse(history=[DailySummaryResponse.from_summary(s) for s in summaries])
