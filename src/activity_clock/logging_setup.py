"""Logging configuration shared by the CLI and the API server."""

import logging
from pathlib import Path
from typing import Optional

from activity_clock.core.config import ConfigManager

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(config: ConfigManager, level: Optional[str] = None) -> None:
    """Configure the root logger from ``advanced.log_level`` and ``advanced.log_file``.

    Args:
        config: Configuration manager
        level: Level name overriding the configured one
    """
    level_name = (level or config.get("advanced.log_level", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    formatter = logging.Formatter(LOG_FORMAT)

    for handler in list(root_logger.handlers):
        if getattr(handler, "_activity_clock", False):
            root_logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    log_file = config.get("advanced.log_file")
    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path))

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        handler._activity_clock = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)
