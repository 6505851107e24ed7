"""
Logging configuration for the query layer.

Library modules only create module loggers (``logging.getLogger(__name__)``);
hosts call ``setup_logging`` (or ``setup_logging_from_config``) once to attach
a console handler, and optionally a log file, to the ``src`` logger hierarchy.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from src.query.config import QueryConfig

ROOT_LOGGER_NAME = "src"


def setup_logging(
    log_level: int | str = logging.WARNING,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """Set up console (and optional file) logging for the package.

    Calling it again replaces the previously installed handlers, so it is
    safe to call from tests and from long-running hosts alike.

    Args:
        log_level: Level number or name (e.g. "DEBUG").
        log_file:  Optional path of a file that receives the same records.

    Returns:
        logging.Logger: The configured package logger.
    """
    if isinstance(log_level, str):
        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {log_level!r}")
        log_level = level

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S',
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_config(
    config: QueryConfig,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """Set up package logging at ``config.log_level`` (see load_config)."""
    return setup_logging(config.log_level, log_file=log_file)


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Return a logger under the package hierarchy."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
