"""API endpoints.

Available routers:
- system: Health check and category configuration
- account: Login
- tracking: Start/stop, today's totals and history
"""

__all__ = ["account", "system", "tracking"]

from activity_clock.api.endpoints import account, system, tracking  # noqa: F401
