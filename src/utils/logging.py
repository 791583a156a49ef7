"""
Logging configuration utilities for the IRC line client.
"""

import logging
import sys
from typing import Optional


CLIENT_LOGGERS = ["src.irc"]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
PLAIN_FORMAT = "%(name)s - %(levelname)s - %(message)s"
DEBUG_FORMAT = "%(asctime)s - %(name)s:%(lineno)d - %(levelname)s - %(message)s"


def setup_logger(
    name: str,
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    include_timestamp: bool = True
) -> logging.Logger:
    """
    Set up a logger with consistent formatting.

    Log output goes to stderr so it never interleaves with the messages
    the client prints on stdout.

    Args:
        name: Logger name
        level: Logging level
        format_string: Custom format string
        include_timestamp: Whether to include timestamp in logs

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if format_string is None:
        format_string = DEFAULT_FORMAT if include_timestamp else PLAIN_FORMAT
    handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(handler)

    return logger


def set_global_log_level(level: int) -> None:
    """
    Set the logging level for the root logger and the client loggers.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO)
    """
    logging.getLogger().setLevel(level)

    for logger_name in CLIENT_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def configure_debug_logging() -> None:
    """Log every wire line, with source line numbers."""
    set_global_log_level(logging.DEBUG)

    for logger_name in [""] + CLIENT_LOGGERS:
        for handler in logging.getLogger(logger_name).handlers:
            handler.setFormatter(logging.Formatter(DEBUG_FORMAT))


def silence_external_loggers() -> None:
    """Silence noisy library loggers."""
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("rich").setLevel(logging.WARNING)
