"""Structured JSON log entries for writer events."""

import json
import logging
from datetime import UTC, datetime
from typing import Any, Protocol


class LeveledLogger(Protocol):
    """Minimal logger exposing leveled methods."""

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> Any: ...


LoggerLike = logging.Logger | logging.LoggerAdapter[Any] | LeveledLogger

_LEVEL_METHODS = {
    logging.DEBUG: ("debug",),
    logging.INFO: ("info",),
    logging.WARNING: ("warning", "warn"),
    logging.ERROR: ("error",),
}


def log_event(
    logger: LoggerLike | None,
    level: int,
    event: str,
    message: str,
    **context: Any,
) -> None:
    """Emit one structured log entry, or nothing when ``logger`` is None.

    Stdlib loggers are checked with ``isEnabledFor`` before the entry is
    built. Other loggers receive the entry through their leveled method
    (``debug``, ``info``, ``warning`` or ``warn``); a logger lacking the
    method for ``level`` is skipped.

    Args:
        logger: Destination logger. ``None`` disables logging.
        level: A ``logging`` level constant.
        event: Machine-readable event name.
        message: Human-readable summary.
        **context: Extra fields serialized alongside the message.
    """
    if logger is None:
        return

    if isinstance(logger, logging.Logger | logging.LoggerAdapter):
        if not logger.isEnabledFor(level):
            return
        stdlib_logger = logger

        def emit(entry: str) -> None:
            stdlib_logger.log(level, entry)

    else:
        method = None
        for name in _LEVEL_METHODS.get(level, ()):
            method = getattr(logger, name, None)
            if callable(method):
                break
        if not callable(method):
            return
        emit = method

    log_entry = {
        "event": event,
        "message": message,
        "timestamp": datetime.now(UTC).isoformat(),
        **context,
    }
    emit(json.dumps(log_entry, default=str))
