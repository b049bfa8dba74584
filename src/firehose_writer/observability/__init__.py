"""Observability module for structured writer logging."""

from firehose_writer.observability.events import LeveledLogger, LoggerLike, log_event

__all__ = [
    "LeveledLogger",
    "LoggerLike",
    "log_event",
]
