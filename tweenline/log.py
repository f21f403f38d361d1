"""
tweenline.log - Logging module with proper Python exception handling.

Usage:
    from tweenline import log

    log.info("Hello")
    log.warn("Something wrong")

    try:
        animator.set_state(State.OPEN)
    except TransitionError as e:
        log.error(e, "Failed to open panel")  # includes traceback

All messages go to the standard ``logging`` logger named "tweenline", so
applications configure handlers and levels the usual way, or through
set_level() / set_callback() below.
"""

from __future__ import annotations

import logging
import traceback
from enum import IntEnum
from typing import Callable

_logger = logging.getLogger("tweenline")
_logger.addHandler(logging.NullHandler())


class Level(IntEnum):
    """Log levels, ordered by severity."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR


def debug(msg_or_exc, context: str = ""):
    """Log debug message or exception with context."""
    if isinstance(msg_or_exc, BaseException):
        _log_exception(Level.DEBUG, msg_or_exc, context)
    else:
        _logger.debug(str(msg_or_exc))


def info(msg_or_exc, context: str = ""):
    """Log info message or exception with context."""
    if isinstance(msg_or_exc, BaseException):
        _log_exception(Level.INFO, msg_or_exc, context)
    else:
        _logger.info(str(msg_or_exc))


def warn(msg_or_exc, context: str = ""):
    """Log warning message or exception with context."""
    if isinstance(msg_or_exc, BaseException):
        _log_exception(Level.WARN, msg_or_exc, context)
    else:
        _logger.warning(str(msg_or_exc))


def warning(msg_or_exc, context: str = ""):
    """Alias for warn()."""
    warn(msg_or_exc, context)


def error(msg_or_exc, context: str = ""):
    """Log error message or exception with context."""
    if isinstance(msg_or_exc, BaseException):
        _log_exception(Level.ERROR, msg_or_exc, context)
    else:
        _logger.error(str(msg_or_exc))


def exception(msg: str = ""):
    """Log error with current exception traceback."""
    _logger.exception(msg)


def is_enabled(level: Level) -> bool:
    """True if messages of this level would be emitted."""
    return _logger.isEnabledFor(level)


def set_level(level: Level) -> None:
    """Set minimal level of messages emitted by tweenline."""
    _logger.setLevel(int(level))


def set_callback(callback: Callable[[Level, str], None] | None) -> None:
    """
    Route every tweenline message to callback(level, message).

    Passing None removes a previously installed callback.
    """
    for handler in list(_logger.handlers):
        if isinstance(handler, _CallbackHandler):
            _logger.removeHandler(handler)
    if callback is not None:
        _logger.addHandler(_CallbackHandler(callback))


class _CallbackHandler(logging.Handler):
    def __init__(self, callback: Callable[[Level, str], None]):
        super().__init__()
        self._callback = callback

    def emit(self, record: logging.LogRecord) -> None:
        level = _level_for(record.levelno)
        self._callback(level, record.getMessage())


def _level_for(levelno: int) -> Level:
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


def _log_exception(level: Level, exc: BaseException, context: str):
    """Format and log exception with traceback."""
    exc_type = type(exc).__name__
    exc_msg = str(exc)

    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))

    if context:
        full_msg = f"{context}: {exc_type}: {exc_msg}\n{tb}"
    else:
        full_msg = f"{exc_type}: {exc_msg}\n{tb}"

    _logger.log(int(level), full_msg)
