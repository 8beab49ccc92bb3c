"""Application log for todoledger.

Modules log through ``logging.getLogger(__name__)``. Their records reach the
``todoledger`` logger set up here, which writes to a rotating file under
platformdirs' user_log_dir. Level, file name and rotation come from the
``log`` section of the profile's config.
"""

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from platformdirs import user_log_dir

from todoledger.config import LogConfig, get_config_manager

_APP_NAME = "todoledger"

_logger: logging.Logger | None = None


def log_file_path(settings: LogConfig) -> Path:
    return Path(user_log_dir(_APP_NAME)) / settings.file


def _file_handler(settings: LogConfig) -> logging.Handler:
    path = log_file_path(settings)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=settings.max_bytes,
        backupCount=settings.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def get_logger(profile: str = "default") -> logging.Logger:
    """Return the application logger, configuring it on first call.

    Args:
        profile: Config profile whose ``log`` settings are applied

    Returns:
        The ``todoledger`` logger; later calls return it unchanged
    """
    global _logger
    if _logger is not None:
        return _logger

    settings = get_config_manager(profile).config.log
    logger = logging.getLogger(_APP_NAME)
    logger.setLevel(settings.level)
    if not logger.handlers:
        logger.addHandler(_file_handler(settings))
    logger.propagate = False

    _logger = logger
    return _logger
