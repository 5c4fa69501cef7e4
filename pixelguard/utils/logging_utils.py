"""
Logging setup for the application.

Records from every ``pixelguard.*`` module go to a rotating log file in the
per-user data directory; ``--debug`` also echoes them to stderr.
"""
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from .resource_loader import get_app_data_dir

APP_LOGGER = "pixelguard"
LOG_FILE = "pixelguard.log"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

MAX_LOG_BYTES = 1_000_000
LOG_BACKUPS = 3


def default_log_path() -> str:
    log_dir = get_app_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return str(log_dir / LOG_FILE)


def _file_handler_for(logger: logging.Logger, path: str) -> Optional[RotatingFileHandler]:
    target = os.path.abspath(path)
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and handler.baseFilename == target:
            return handler
    return None


def configure_logging(debug: bool = False, log_path: Optional[str] = None) -> logging.Logger:
    """
    Attach the log file (and in debug mode the console) to the app logger.

    Calling it again only updates the level; handlers are never duplicated.

    Args:
        debug: Log at DEBUG level and echo to stderr
        log_path: Log file to use instead of the one in the data directory

    Returns:
        The application's top-level logger
    """
    level = logging.DEBUG if debug else logging.INFO
    path = log_path or default_log_path()

    logger = logging.getLogger(APP_LOGGER)
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    handler = _file_handler_for(logger, path)
    if handler is None:
        handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS,
                                      encoding="utf-8")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    handler.setLevel(level)

    has_console = any(type(h) is logging.StreamHandler for h in logger.handlers)
    if debug and not has_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    return logger
