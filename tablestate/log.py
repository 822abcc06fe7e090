"""Logging utilities for tablestate.

User operations that cannot be applied are logged at debug level and
ignored instead of raising. Turn them on with ``enable_debug()`` or
``TABLESTATE_LOG__LEVEL=DEBUG``.
"""

from __future__ import annotations

import logging
import sys

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from .config import LogSettings


DEFAULT_FORMAT = "%(name)s - %(levelname)s - %(message)s"


class _LoggerHolder:
    """Holder for the shared logger instance."""

    instance: logging.Logger | None = None


def get_logger() -> logging.Logger:
    """Get the ``tablestate`` logger, creating it on first use.

    The logger starts at WARNING with a single stderr handler, so ignored
    requests stay silent until debug logging is enabled.

    Returns
    -------
    logging.Logger
        The shared tablestate logger.
    """
    if _LoggerHolder.instance is None:
        logger = logging.getLogger("tablestate")
        logger.setLevel(logging.WARNING)

        # Host applications may have attached their own handler already
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(logging.DEBUG)
            handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            logger.addHandler(handler)

        _LoggerHolder.instance = logger

    return _LoggerHolder.instance


def debug(msg: str) -> None:
    """Log an ignored request or a state transition."""
    get_logger().debug(msg)


def info(msg: str) -> None:
    """Log an informational message."""
    get_logger().info(msg)


def warn(msg: str) -> None:
    """Log a caller mistake the engine tolerates, such as duplicate row keys.

    Parameters
    ----------
    msg : str
        The warning message to log.
    """
    get_logger().warning(msg)


def error(msg: str) -> None:
    """Log an error message."""
    get_logger().error(msg)


def exception(msg: str) -> None:
    """Log ``msg`` with the traceback of the exception being handled."""
    get_logger().exception(msg)


def set_level(level: int | str) -> None:
    """Set the logging level.

    Parameters
    ----------
    level : int or str
        A ``logging`` constant or its name, in any case ("debug", "WARNING").
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    get_logger().setLevel(level)


def enable_debug() -> None:
    """Show every ignored request and state transition."""
    set_level(logging.DEBUG)


def configure_from_settings(settings: LogSettings) -> None:
    """Apply level and format from the logging settings section.

    Parameters
    ----------
    settings : LogSettings
        The ``log`` section of the tablestate settings.
    """
    logger = get_logger()
    set_level(settings.level)
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(settings.format))
