"""Logging setup for SemTreeLib.

The library logs through the standard ``logging`` module under the
``semtreelib`` logger hierarchy and only installs a NullHandler, so
nothing is printed unless the application configures logging.

Levels used across the library:
    DEBUG   - traversal/stage start and finish, config and metadata changes
    WARNING - visitor errors swallowed by a continue-on-errors policy
    ERROR   - failed stages, adapters and validations
"""

import logging
import sys
from enum import Enum
from typing import Optional, TextIO, Union

PACKAGE_LOGGER_NAME = "semtreelib"

LOG_FORMAT = "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s"

_package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
_package_logger.addHandler(logging.NullHandler())


class LogLevel(Enum):
    """Log levels understood by set_log_level()."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    NONE = "NONE"


_LEVEL_MAP = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


def _parse_level(level: Union[LogLevel, str]) -> LogLevel:
    if isinstance(level, LogLevel):
        return level
    try:
        return LogLevel(level.upper())
    except ValueError:
        raise ValueError(
            f"Unknown log level: {level}. "
            f"Choose from: {', '.join(member.value for member in LogLevel)}"
        ) from None


def get_logger(name: str = "") -> logging.Logger:
    """Return a logger inside the semtreelib hierarchy.

    Args:
        name: Dotted suffix (e.g. "adapters.json"); empty for the package logger
    """
    if not name or name == PACKAGE_LOGGER_NAME:
        return _package_logger
    if name.startswith(PACKAGE_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER_NAME}.{name}")


def set_log_level(level: Union[LogLevel, str]) -> None:
    """Set the minimum level for all semtreelib loggers.

    LogLevel.NONE disables library logging entirely.
    """
    parsed = _parse_level(level)
    if parsed is LogLevel.NONE:
        _package_logger.disabled = True
        return
    _package_logger.disabled = False
    _package_logger.setLevel(_LEVEL_MAP[parsed])


def get_log_level() -> LogLevel:
    """Return the current library log level."""
    if _package_logger.disabled:
        return LogLevel.NONE
    effective = _package_logger.getEffectiveLevel()
    for member, value in _LEVEL_MAP.items():
        if value == effective:
            return member
    # Levels set directly through logging (e.g. CRITICAL) round down to ERROR
    return LogLevel.ERROR if effective > logging.ERROR else LogLevel.DEBUG


def configure_logging(level: Union[LogLevel, str] = LogLevel.ERROR,
                      stream: Optional[TextIO] = None) -> logging.Handler:
    """Attach a formatted stream handler to the package logger.

    Intended for applications and scripts. Calling it again replaces the
    handler installed by the previous call instead of adding another one.

    Args:
        level: Minimum level to emit
        stream: Target stream (defaults to stderr)

    Returns:
        The installed handler
    """
    for handler in list(_package_logger.handlers):
        if getattr(handler, "_semtreelib_handler", False):
            _package_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._semtreelib_handler = True
    _package_logger.addHandler(handler)
    set_log_level(level)
    return handler
