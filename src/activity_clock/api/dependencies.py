"""Dependency injection for FastAPI endpoints.

The configuration and storage live on ``app.state`` so that every request
shares one store, and with it the per-user locks that serialize start/stop.
"""

from fastapi import Request  # type: ignore[import-untyped]

from activity_clock.core.accounts import AccountManager
from activity_clock.core.aggregator import Aggregator
from activity_clock.core.config import ConfigManager
from activity_clock.core.storage import StorageManager
from activity_clock.core.tracker import TimeTracker


def get_config(request: Request) -> ConfigManager:
    """Get the application's configuration manager."""
    config: ConfigManager = request.app.state.config
    return config


def get_storage(request: Request) -> StorageManager:
    """Get the application's shared storage manager."""
    storage: StorageManager = request.app.state.storage
    return storage


def get_tracker(request: Request) -> TimeTracker:
    """Get a tracker bound to the shared storage and configured categories."""
    config = get_config(request)
    return TimeTracker(get_storage(request), categories=config.categories)


def get_aggregator(request: Request) -> Aggregator:
    """Get an aggregator bound to the shared storage and configured categories."""
    config = get_config(request)
    return Aggregator(
        get_storage(request),
        categories=config.categories,
        max_days=config.get("tracking.max_history_days", 30),
    )


def get_accounts(request: Request) -> AccountManager:
    """Get the account manager for login."""
    return AccountManager(get_storage(request))
