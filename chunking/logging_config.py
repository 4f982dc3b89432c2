"""
Logging Configuration

One setup for every entry point (CLI, HTTP app). Modules log through
``logging.getLogger(__name__)``; setup_logging attaches handlers to the
top-level package loggers so their records share one format.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PACKAGE_LOGGERS = ("chunking", "layout", "vector_store")


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
    packages: Iterable[str] = PACKAGE_LOGGERS,
) -> list[logging.Logger]:
    """
    Configure logging for the chunking packages.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to log file
        format_string: Optional custom format string
        packages: Top-level logger names to configure

    Returns:
        The configured package loggers
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    loggers = []
    for name in packages:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        # Remove existing handlers to avoid duplicates
        logger.handlers.clear()
        for handler in handlers:
            logger.addHandler(handler)
        logger.propagate = False
        loggers.append(logger)

    return loggers
