"""
Logging configuration for the engine and its command-line front end.

Handlers are attached to the ``gasguard`` package logger only, so an
application embedding the engine keeps control of the root logger.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "gasguard"

CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"

# Multi-analyzer dispatch runs on pool threads
FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the engine's package logger.

    Calling it again replaces the handlers installed by a previous call.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional file receiving a timestamped copy of the log.
        format_string: Console format, defaults to a compact one-line format.

    Returns:
        The configured package logger.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper()))

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    # Reports go to stdout, so logs stay on stderr
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(format_string or CONSOLE_FORMAT))
    package_logger.addHandler(console)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        package_logger.addHandler(file_handler)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name, normally ``__name__`` of a ``gasguard`` module.

    Returns:
        Logger inheriting the package configuration.
    """
    return logging.getLogger(name)
