"""
Logging configuration and utilities.

Configures the package logger once per process; modules log through
``logging.getLogger(__name__)``.
"""

import logging
import sys
from pathlib import Path

from bp_importer.utils.parameters import LoggingConfig


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(config: LoggingConfig, logger_name: str | None = "bp_importer") -> logging.Logger:
    """
    Set up logging for the application.

    Existing handlers on the target logger are replaced, so calling this
    twice does not duplicate output.

    Args:
        config: Logging configuration.
        logger_name: Logger to configure. None configures the root logger.

    Returns:
        Configured logger instance.
    """
    level = _resolve_level(config.level)
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    if config.console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance by name (typically ``__name__``)."""
    return logging.getLogger(name)
