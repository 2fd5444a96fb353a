"""Logging configuration for the package."""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME = "gallery_crawler"


def configure_logging(level: int | str = "INFO", log_format: str = LOG_FORMAT) -> logging.Logger:
    """(Re)configure the package logger with a single stdout handler."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level.upper() if isinstance(level, str) else level)
    lg.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(log_format))
    lg.addHandler(handler)

    lg.propagate = False
    return lg
