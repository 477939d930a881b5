"""Centralized logging configuration for the indexed-merkle project."""

import logging
import sys
from typing import Optional


def setup_logging(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler_type: str = "stream",
    log_file: str = "indexed_merkle.log",
) -> logging.Logger:
    """
    Set up centralized logging configuration for the project.

    Args:
        level: Logging level (default: INFO)
        format_string: Custom format string (optional)
        handler_type: Type of handler - "stream", "file", or "both"
        log_file: Path written by the file handler

    Returns:
        Configured logger instance
    """
    if handler_type not in ("stream", "file", "both"):
        raise ValueError(f"Unknown handler type: {handler_type!r}")

    if format_string is None:
        format_string = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

    logger = logging.getLogger("indexed_merkle")

    # Avoid duplicate configuration
    if logger.hasHandlers():
        return logger

    formatter = logging.Formatter(format_string)

    if handler_type in ("stream", "both"):
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if handler_type in ("file", "both"):
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(level)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a specific module.

    Args:
        name: Module name (usually __name__)

    Returns:
        Logger instance
    """
    if not logging.getLogger("indexed_merkle").hasHandlers():
        setup_logging()

    if name == "indexed_merkle" or name.startswith("indexed_merkle."):
        return logging.getLogger(name)
    return logging.getLogger(f"indexed_merkle.{name}")


def get_test_logger(name: str) -> logging.Logger:
    """
    Get a logger for tests with appropriate configuration.

    Args:
        name: Test module name

    Returns:
        Logger instance for tests
    """
    logger = logging.getLogger(f"Tests.{name}")

    if not logger.hasHandlers():
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

    return logger
