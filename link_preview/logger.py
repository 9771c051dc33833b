# link_preview/logger.py
"""Logging setup for LinkPreview.

Modules take a child of the ``LinkPreview`` logger via :func:`get_logger` at
import time. Nothing is configured on import: until :func:`init_logging` runs
(the CLI calls it once options are parsed) records propagate to the root
logger, so an embedding application keeps control of its own handlers.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

__all__ = ("DEFAULT_FORMAT", "LOGGER_NAME", "init_logging", "get_logger")

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "LinkPreview"

LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3


def get_logger(name: str | None = None) -> logging.Logger:
    """``LinkPreview`` itself, or ``LinkPreview.<name>`` for a component."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Send service logs to stdout and, if *log_file* is given, a rotating file.

    Calling it again swaps out the handlers installed by the previous call.
    """
    root = get_logger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        handlers.append(
            RotatingFileHandler(
                str(log_file),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # handlers are ours now; keep records out of the root logger
    root.propagate = False
    return root
