"""Logging setup for the roster service.

``configure_logging`` attaches handlers to the ``roster`` package logger once
at startup. Modules log through ``logging.getLogger(__name__)`` and inherit
those handlers.
"""

import logging
import logging.handlers
import os

from roster.core.config import Settings

LOGGER_NAME = "roster"
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"  # ISO 8601

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5


def parse_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(
            f"Invalid log level: {level}. Must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL"
        )
    return value


def configure_logging(settings: Settings, name: str = LOGGER_NAME, console: bool = True) -> logging.Logger:
    """
    Configure the service logger from settings.

    Handlers are only added on the first call for a logger name; later calls
    just update the level. SQL statement logging follows ``settings.debug``.

    Raises:
        ValueError: If ``settings.log_level`` is not a logging level name
    """
    logger = logging.getLogger(name)
    logger.setLevel(parse_level(settings.log_level))
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.debug else logging.WARNING)

    if logger.handlers:
        return logger

    handlers = []
    if settings.log_to_file:
        os.makedirs(settings.log_dir, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                os.path.join(settings.log_dir, f"{name}.log"),
                maxBytes=MAX_LOG_BYTES,
                backupCount=LOG_BACKUPS,
            )
        )
    if console:
        handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
