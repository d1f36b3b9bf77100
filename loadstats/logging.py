"""Centralized logging configuration for loadstats.

Importing the package only attaches a ``NullHandler`` to the ``loadstats``
logger. Applications that want the package's own log output call
:func:`setup_root_logger` once, typically at startup.
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "loadstats"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Set once an application has opted into the package handler
_ROOT_LOGGER_CONFIGURED = False


def _install_null_handler() -> None:
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in root_logger.handlers):
        root_logger.addHandler(logging.NullHandler())


def setup_root_logger(
    level: int = logging.INFO,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Attach a single formatted handler to the loadstats logger.

    Calling this more than once is a no-op until :func:`reset_logging` runs.

    Args:
        level: Logging level (default: INFO).
        format_string: Custom format string (optional).
        handler: Custom handler (optional, defaults to a stderr StreamHandler).
    """
    global _ROOT_LOGGER_CONFIGURED

    if _ROOT_LOGGER_CONFIGURED:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # stdout is left to the renderer that consumes aggregation results
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))
    root_logger.addHandler(handler)
    root_logger.propagate = True

    _ROOT_LOGGER_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger that inherits the loadstats package configuration.

    Args:
        name: Logger name (typically ``__name__`` of the calling module).

    Returns:
        Logger instance with level NOTSET so it follows the package logger.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Set the log level for all loadstats loggers.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def reset_logging() -> None:
    """Drop any configured handler and return to the import-time state."""
    global _ROOT_LOGGER_CONFIGURED
    _ROOT_LOGGER_CONFIGURED = False

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    _install_null_handler()


_install_null_handler()
