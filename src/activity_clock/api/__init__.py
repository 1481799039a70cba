"""REST API for Activity Clock.

Usage:
    # Start server
    activity-clock serve

    # Access API docs
    http://localhost:5000/docs
"""

__all__ = ["create_app", "run_server"]

from activity_clock.api.server import create_app, run_server  # noqa: F401
