"""FastAPI application server."""

import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from fastapi import FastAPI, Request, status  # type: ignore[import-untyped]
from fastapi.responses import JSONResponse  # type: ignore[import-untyped]

from activity_clock import __version__
from activity_clock.api.middleware import setup_middleware
from activity_clock.api.models import ErrorResponse
from activity_clock.core.config import ConfigManager
from activity_clock.core.exceptions import AuthenticationError, InvalidCategory, StoreUnavailable
from activity_clock.core.storage import StorageManager

logger = logging.getLogger(__name__)

# Read by create_app when uvicorn builds the app from an import string
CONFIG_PATH_ENV = "ACTIVITY_CLOCK_CONFIG"
DATA_DIR_ENV = "ACTIVITY_CLOCK_DATA_DIR"

ERROR_RESPONSES: dict[Union[int, str], dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid category or request"},
    401: {"model": ErrorResponse, "description": "Missing or invalid credentials"},
    503: {"model": ErrorResponse, "description": "Storage unavailable"},
}


def error_body(detail: str, error_code: str) -> dict[str, Any]:
    """Serialize an error in the same camelCase shape as other responses."""
    return ErrorResponse(detail=detail, error_code=error_code).model_dump(by_alias=True)


def register_exception_handlers(app: FastAPI) -> None:
    """Map core exceptions to HTTP responses."""

    @app.exception_handler(InvalidCategory)
    async def invalid_category_handler(request: Request, exc: InvalidCategory) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(str(exc), "invalid_category"),
        )

    @app.exception_handler(AuthenticationError)
    async def authentication_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=error_body(str(exc), "authentication_failed"),
        )

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
        logger.error(f"Store unavailable during {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=error_body("Storage is temporarily unavailable", "store_unavailable"),
        )


def create_app(
    config: Optional[ConfigManager] = None, storage: Optional[StorageManager] = None
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        config: Optional configuration manager. Loaded from ``$ACTIVITY_CLOCK_CONFIG``
            or the default path if None.
        storage: Optional storage manager. Created in ``$ACTIVITY_CLOCK_DATA_DIR``
            or ``general.data_dir`` if None.

    Returns:
        Configured FastAPI application instance
    """
    if config is None:
        config_path = os.environ.get(CONFIG_PATH_ENV)
        config = ConfigManager(Path(config_path) if config_path else None)
    if storage is None:
        data_dir = os.environ.get(DATA_DIR_ENV)
        storage = StorageManager(Path(data_dir) if data_dir else config.data_dir)

    if config.get("api.authentication.enabled", True):
        config.ensure_api_secret_key()

    app = FastAPI(
        title="Activity Clock API",
        description="Category time tracking: start/stop, daily totals and history",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.config = config
    app.state.storage = storage

    setup_middleware(app, config)
    register_exception_handlers(app)

    from activity_clock.api.endpoints import account, system, tracking

    app.include_router(system.router, prefix="/api", tags=["system"])
    app.include_router(
        account.router, prefix="/api/auth", tags=["auth"], responses=ERROR_RESPONSES
    )
    app.include_router(
        tracking.router, prefix="/api/track", tags=["tracking"], responses=ERROR_RESPONSES
    )

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Root endpoint."""
        return JSONResponse(
            {
                "message": "Activity Clock API",
                "version": __version__,
                "docs": "/docs",
                "health": "/api/health",
            }
        )

    return app


def run_server(
    host: str = "localhost",
    port: int = 5000,
    reload: bool = False,
    workers: int = 1,
    config: Optional[ConfigManager] = None,
    data_dir: Optional[Path] = None,
) -> None:
    """Run the API server using Uvicorn.

    Args:
        host: Host address
        port: Port number
        reload: Enable auto-reload
        workers: Number of worker processes
        config: Configuration manager (default config file if None)
        data_dir: Data directory (``general.data_dir`` if None)

    Note:
        This function blocks until the server is stopped.
    """
    import uvicorn  # type: ignore[import-untyped]

    if config is None:
        config = ConfigManager()
    if data_dir is None:
        data_dir = config.data_dir

    uvicorn_config: dict[str, Any] = {
        "host": host,
        "port": port,
        "reload": reload,
        "workers": workers if not reload else 1,
        "log_level": config.get("api.advanced.log_level", "info"),
        "access_log": config.get("api.advanced.access_log", True),
    }

    # reload and multiple workers need an import string; the factory reads these back
    if reload or workers > 1:
        os.environ[CONFIG_PATH_ENV] = str(config.config_path)
        os.environ[DATA_DIR_ENV] = str(data_dir)
        uvicorn_config.update({"app": "activity_clock.api.server:create_app", "factory": True})
    else:
        uvicorn_config["app"] = create_app(config, StorageManager(data_dir))

    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run(**uvicorn_config)
