"""Tests for RetryExecutor and delay schedules."""

import asyncio

import pytest

from firehose_writer.patterns.retry import (
    RetryExecutor,
    RetryState,
    exponential_delay,
    fibonacci_delay,
)


class TestDelaySchedules:
    """Tests for delay schedule builders."""

    def test_fibonacci_delay_sequence(self) -> None:
        """Fibonacci schedule scales t, t, 2t, 3t, 5t, 8t."""
        delay = fibonacci_delay(0.1)
        assert [delay(k) for k in range(6)] == pytest.approx([0.1, 0.1, 0.2, 0.3, 0.5, 0.8])

    def test_fibonacci_delay_is_non_decreasing(self) -> None:
        delay = fibonacci_delay(0.05)
        values = [delay(k) for k in range(20)]
        assert values == sorted(values)

    def test_exponential_delay_sequence(self) -> None:
        """Exponential schedule doubles and respects the cap."""
        delay = exponential_delay(0.5, max_delay=3.0)
        assert [delay(k) for k in range(5)] == [0.5, 1.0, 2.0, 3.0, 3.0]

    def test_negative_base_rejected(self) -> None:
        with pytest.raises(ValueError):
            fibonacci_delay(-1.0)
        with pytest.raises(ValueError):
            exponential_delay(-1.0)


class TestRetryState:
    """Tests for RetryState bookkeeping."""

    def test_exhausted_after_max_retries(self) -> None:
        state = RetryState(max_retries=2)
        assert not state.exhausted
        state.attempt = 2
        assert state.exhausted

    def test_zero_retries_is_exhausted_immediately(self) -> None:
        assert RetryState(max_retries=0).exhausted


class TestRetryExecutorAttempts:
    """Tests for attempt counting."""

    @pytest.mark.asyncio
    async def test_first_success_runs_once(self, fake_sleep, sleeps) -> None:
        """A successful first attempt returns without waiting."""
        executor = RetryExecutor(max_retries=3, sleep=fake_sleep)

        async def succeed():
            return "ok"

        result = await executor.execute_with_metrics(succeed)

        assert result.value == "ok"
        assert result.attempt_count == 1
        assert result.total_delay_s == 0.0
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_max_retries_counts_attempts_after_first(self, fake_sleep) -> None:
        """max_retries=3 allows exactly four attempts."""
        executor = RetryExecutor(max_retries=3, sleep=fake_sleep)
        call_count = 0

        async def always_fail():
            nonlocal call_count
            call_count += 1
            raise ConnectionError("Failed")

        with pytest.raises(ConnectionError):
            await executor.execute(always_fail)

        assert call_count == 4
        assert executor.max_attempts == 4

    @pytest.mark.asyncio
    async def test_zero_retries_single_attempt(self, fake_sleep, sleeps) -> None:
        executor = RetryExecutor(max_retries=0, sleep=fake_sleep)
        call_count = 0

        async def always_fail():
            nonlocal call_count
            call_count += 1
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            await executor.execute(always_fail)

        assert call_count == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_recovers_after_failures(self, fake_sleep) -> None:
        """The first successful attempt stops the loop."""
        executor = RetryExecutor(max_retries=5, sleep=fake_sleep)
        call_count = 0

        async def flaky():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise ConnectionError("Connection refused")
            return "success"

        result = await executor.execute_with_metrics(flaky)

        assert result.value == "success"
        assert result.attempt_count == 3
        assert call_count == 3

    def test_negative_max_retries_rejected(self) -> None:
        with pytest.raises(ValueError):
            RetryExecutor(max_retries=-1)


class TestRetryExecutorDelays:
    """Tests for waits between attempts."""

    @pytest.mark.asyncio
    async def test_waits_follow_schedule(self, fake_sleep, sleeps) -> None:
        """delay(k) is awaited after failed attempt k, never after the last."""
        executor = RetryExecutor(max_retries=3, delay=fibonacci_delay(0.1), sleep=fake_sleep)

        async def always_fail():
            raise ConnectionError("Failed")

        with pytest.raises(ConnectionError):
            await executor.execute(always_fail)

        assert sleeps == pytest.approx([0.1, 0.1, 0.2])

    @pytest.mark.asyncio
    async def test_total_delay_reported(self, fake_sleep) -> None:
        executor = RetryExecutor(max_retries=3, delay=exponential_delay(0.01), sleep=fake_sleep)
        call_count = 0

        async def fail_twice():
            nonlocal call_count
            call_count += 1
            if call_count <= 2:
                raise TimeoutError("timeout")
            return call_count

        result = await executor.execute_with_metrics(fail_twice)

        assert result.total_delay_s == pytest.approx(0.03)

    @pytest.mark.asyncio
    async def test_real_sleep_delay_elapses(self) -> None:
        """With the default sleep the executor really waits between attempts."""
        executor = RetryExecutor(max_retries=2, delay=fibonacci_delay(0.01))

        async def always_fail():
            raise ConnectionError("Failed")

        start = asyncio.get_running_loop().time()
        with pytest.raises(ConnectionError):
            await executor.execute(always_fail)
        elapsed = asyncio.get_running_loop().time() - start

        # Expected: 10 + 10 = 20ms minimum
        assert elapsed >= 0.015


class TestRetryExecutorFailurePassthrough:
    """Tests that errors are not classified or wrapped."""

    @pytest.mark.asyncio
    async def test_last_error_reraised_unchanged(self, fake_sleep) -> None:
        executor = RetryExecutor(max_retries=2, sleep=fake_sleep)
        errors = [ValueError("first"), KeyError("second"), RuntimeError("last")]
        raised = iter(errors)

        async def fail():
            raise next(raised)

        with pytest.raises(RuntimeError) as exc_info:
            await executor.execute(fail)

        assert exc_info.value is errors[-1]

    @pytest.mark.asyncio
    async def test_non_transient_errors_still_retried(self, fake_sleep) -> None:
        """Classification is left to the operation, so every error is retried."""
        executor = RetryExecutor(max_retries=1, sleep=fake_sleep)
        call_count = 0

        async def permanent():
            nonlocal call_count
            call_count += 1
            raise ValueError("This is a permanent error")

        with pytest.raises(ValueError, match="permanent"):
            await executor.execute(permanent)

        assert call_count == 2
