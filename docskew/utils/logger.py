"""Logging setup for the rotation engine.

Every module obtains its logger through :func:`get_logger`; applications
(the CLI, or a host service) call :func:`setup_logging` once.
"""

import logging
import sys
from typing import TextIO

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Pillow's plugin modules emit chunk-level DEBUG records for every decode.
_NOISY_LOGGERS = ("PIL",)


def setup_logging(level: str = "INFO", stream: TextIO | None = None) -> None:
    """Attach a single formatted handler to the root logger.

    Calling this again is a no-op once the root logger has a handler, so a
    host application that configured logging itself keeps its setup.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        stream: Destination stream, stdout by default.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    root = logging.getLogger()

    if root.handlers:
        return

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    root.addHandler(handler)
    root.setLevel(numeric_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.INFO))


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module, usually called with ``__name__``."""
    return logging.getLogger(name)
