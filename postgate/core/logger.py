"""Logging setup for PostGate.

Modules log through ``logging.getLogger(__name__)``; everything below the
``postgate`` package propagates to the logger configured here at startup.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import List

from postgate.core.config import Settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

ROTATE_BYTES = 10 * 1024 * 1024
ROTATE_KEEP = 5

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore")


def parse_level(level: str) -> int:
    """Map a level name to its numeric value."""
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Invalid log level: {level}")
    return value


def build_handlers(settings: Settings, app_logger: str) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if settings.log_to_file:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                log_dir / f"{app_logger}.log",
                maxBytes=ROTATE_BYTES,
                backupCount=ROTATE_KEEP,
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(settings: Settings, app_logger: str = "postgate") -> logging.Logger:
    """
    Attach console (and optionally rotating file) handlers to the app logger.

    Safe to call more than once; handlers are only added the first time.

    Raises:
        ValueError: If ``settings.log_level`` is not a logging level name
    """
    logger = logging.getLogger(app_logger)
    logger.setLevel(parse_level(settings.log_level))

    if not logger.handlers:
        for handler in build_handlers(settings, app_logger):
            logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
