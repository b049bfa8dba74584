"""Bounded retry with a deterministic, non-decreasing backoff schedule."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

DelaySchedule = Callable[[int], float]


@dataclass(frozen=True, slots=True)
class RetryExecutionResult(Generic[T]):
    """Result of a retry execution with per-call attempt count."""

    value: T
    attempt_count: int
    total_delay_s: float


@dataclass
class RetryState:
    """Bookkeeping for a single ``execute`` call.

    Attributes:
        max_retries: Attempts allowed beyond the first one.
        attempt: Index of the attempt currently running (0-based).
        total_delay_s: Seconds spent waiting between attempts so far.
    """

    max_retries: int
    attempt: int = 0
    total_delay_s: float = 0.0

    @property
    def exhausted(self) -> bool:
        """True once the running attempt is the last one allowed."""
        return self.attempt >= self.max_retries


def fibonacci_delay(timeout: float) -> DelaySchedule:
    """Build a Fibonacci-scaled schedule: ``t, t, 2t, 3t, 5t, ...``.

    Args:
        timeout: Base delay in seconds.

    Returns:
        DelaySchedule: Maps a 0-based failed attempt index to a delay in seconds.
    """
    if timeout < 0:
        raise ValueError("timeout must be non-negative")

    def delay(attempt: int) -> float:
        prev, current = 0, 1
        for _ in range(attempt):
            prev, current = current, prev + current
        return timeout * current

    return delay


def exponential_delay(base_delay: float, max_delay: float | None = None) -> DelaySchedule:
    """Build an exponential schedule: ``min(base_delay × 2^attempt, max_delay)``.

    No jitter is applied, so the schedule stays deterministic.

    Args:
        base_delay: Delay before the first retry, in seconds.
        max_delay: Optional cap in seconds.

    Returns:
        DelaySchedule: Maps a 0-based failed attempt index to a delay in seconds.
    """
    if base_delay < 0:
        raise ValueError("base_delay must be non-negative")

    def delay(attempt: int) -> float:
        value = base_delay * (2**attempt)
        if max_delay is not None:
            value = min(value, max_delay)
        return float(value)

    return delay


class RetryExecutor:
    """
    Run an async operation until it succeeds or the attempt budget is spent.

    ``max_retries`` counts the attempts made *after* the first one, so an
    operation is invoked at most ``max_retries + 1`` times. The first attempt
    runs immediately; after failed attempt ``k`` the executor waits
    ``delay(k)`` seconds before trying again.

    Errors are not classified: any exception raised by the operation is a
    failed attempt, and once the budget is spent the last exception is
    re-raised unchanged.

    Args:
        max_retries: Attempts beyond the first. Default 3.
        delay: Delay schedule. Defaults to ``fibonacci_delay(0.1)``.
        sleep: Awaitable used to wait between attempts.

    Example:
        ```python
        executor = RetryExecutor(max_retries=3, delay=fibonacci_delay(0.1))
        response = await executor.execute(send_batch)
        ```
    """

    def __init__(
        self,
        max_retries: int = 3,
        delay: DelaySchedule | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")

        self._max_retries = int(max_retries)
        self._delay = delay or fibonacci_delay(0.1)
        self._sleep = sleep

    @property
    def max_retries(self) -> int:
        """Number of attempts allowed beyond the first."""
        return self._max_retries

    @property
    def max_attempts(self) -> int:
        """Total number of attempts including the initial one."""
        return self._max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """Delay in seconds that follows failed attempt ``attempt``."""
        return self._delay(attempt)

    async def execute(self, func: Callable[[], Awaitable[T]]) -> T:
        """Execute ``func`` with retries and return its result.

        Args:
            func: Zero-argument callable returning an awaitable.

        Returns:
            T: Result of the first successful attempt.

        Raises:
            Exception: The exception from the last attempt, once exhausted.
        """
        result = await self.execute_with_metrics(func)
        return result.value

    async def execute_with_metrics(
        self,
        func: Callable[[], Awaitable[T]],
    ) -> RetryExecutionResult[T]:
        """Execute ``func`` with retries and report how many attempts it took.

        Args:
            func: Zero-argument callable returning an awaitable.

        Returns:
            RetryExecutionResult[T]: Result value, attempt count and time slept.
        """
        state = RetryState(max_retries=self._max_retries)

        while True:
            try:
                value = await func()
            except Exception:
                if state.exhausted:
                    raise

                delay = self._delay(state.attempt)
                state.total_delay_s += delay
                await self._sleep(delay)
                state.attempt += 1
                continue

            return RetryExecutionResult(
                value=value,
                attempt_count=state.attempt + 1,
                total_delay_s=state.total_delay_s,
            )


__all__ = [
    "DelaySchedule",
    "RetryExecutionResult",
    "RetryExecutor",
    "RetryState",
    "exponential_delay",
    "fibonacci_delay",
]
