"""System endpoints: health check and category configuration."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends  # type: ignore[import-untyped]

from activity_clock import __version__
from activity_clock.api.dependencies import get_config
from activity_clock.api.models import CategoriesResponse, HealthResponse
from activity_clock.core.config import ConfigManager

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Health check endpoint (public)."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
    )


@router.get("/categories", response_model=CategoriesResponse)
def list_categories(config: ConfigManager = Depends(get_config)) -> CategoriesResponse:
    """Configured categories in display order plus the suggested poll interval (public)."""
    return CategoriesResponse(
        categories=config.categories,
        poll_interval_seconds=config.get("tracking.poll_interval_seconds", 5),
    )
