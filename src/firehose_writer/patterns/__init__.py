"""Resilience patterns module."""

from firehose_writer.patterns.retry import (
    DelaySchedule,
    RetryExecutionResult,
    RetryExecutor,
    RetryState,
    exponential_delay,
    fibonacci_delay,
)

__all__ = [
    "DelaySchedule",
    "RetryExecutionResult",
    "RetryExecutor",
    "RetryState",
    "exponential_delay",
    "fibonacci_delay",
]
