"""
Logging configuration for the RedLine voice assistant.

All components log under the ``redline`` namespace. The level comes from the
LOG_LEVEL environment variable and can be changed at runtime (the demo's
--verbose flag does this).
"""
import logging
import os
import sys
from typing import Union

ROOT_LOGGER_NAME = "redline"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure(package_logger: logging.Logger) -> logging.Logger:
    package_logger.setLevel(LOG_LEVEL)
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        package_logger.addHandler(handler)
    package_logger.propagate = False
    return package_logger


logger = _configure(logging.getLogger(ROOT_LOGGER_NAME))


def get_logger(name: str = None) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Optional component name, e.g. "parsing.command_parser"

    Returns:
        ``redline.<name>`` child logger, or the package logger
    """
    if not name:
        return logger
    if name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def set_log_level(level: Union[int, str]) -> None:
    """Change the level of the package logger (child loggers inherit it)."""
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
