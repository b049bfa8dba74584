"""Buffered batch writer with partial-failure retry."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import TYPE_CHECKING, Any, Self

from firehose_writer.observability.events import LoggerLike, log_event
from firehose_writer.patterns.retry import RetryExecutor, fibonacci_delay
from firehose_writer.writer.base import RecordSink
from firehose_writer.writer.errors import (
    ConfigurationError,
    PartialBatchFailureError,
    TransportError,
    WriterClosedError,
)
from firehose_writer.writer.models import (
    BatchRequest,
    RecordPayload,
    WriterConfig,
    WriterMetrics,
    serialize_record,
)

if TYPE_CHECKING:
    from firehose_writer.clients.base import IngestionClient


class BatchBufferedWriter(RecordSink):
    """
    Buffer records and deliver them to an ingestion service in batches.

    Records are queued in submission order. When the queue reaches
    ``high_water_mark`` the submitting coroutine waits for a full flush
    cycle, which is the writer's only backpressure mechanism. A flush sends
    the whole queue as one batch call; when the service rejects some
    records, the queue is narrowed to exactly those records (same relative
    order) and the attempt is retried with a Fibonacci backoff seeded by
    ``retry_timeout_ms``. ``max_retries`` counts retries after the first
    attempt, so a flush makes at most ``max_retries + 1`` batch calls.

    When retries are exhausted the last error is raised to whoever
    triggered the flush and the undelivered records stay in the queue,
    available through ``pending`` and ``drain_pending()``.

    Args:
        client: Ingestion client performing the batch calls.
        stream_name: Destination stream for every batch.
        config: Base configuration. Keyword overrides take precedence.
        high_water_mark: Records buffered before an automatic flush (max 500).
        max_retries: Attempts allowed after the first one.
        retry_timeout_ms: Base delay of the retry schedule in milliseconds.
        delimiter: Suffix appended to every serialized record.
        logger: Optional logger. A stdlib logger, or any object with leveled
            ``debug``/``info``/``warning`` (or ``warn``) methods. ``None`` disables logging.
        sleep: Awaitable used for the wait between retry attempts.

    Example:
        ```python
        client = FirehoseIngestionClient.from_settings(FirehoseSettings(region="eu-west-1"))

        async with BatchBufferedWriter(client, "clickstream", delimiter="\\n") as writer:
            for event in events:
                await writer.submit(event)
        ```
    """

    def __init__(
        self,
        client: IngestionClient,
        stream_name: str,
        config: WriterConfig | None = None,
        *,
        high_water_mark: int | None = None,
        max_retries: int | None = None,
        retry_timeout_ms: float | None = None,
        delimiter: str | None = None,
        logger: LoggerLike | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if client is None:
            raise ConfigurationError("client is required")
        if not stream_name:
            raise ConfigurationError("stream_name is required")

        overrides = {
            name: value
            for name, value in {
                "high_water_mark": high_water_mark,
                "max_retries": max_retries,
                "retry_timeout_ms": retry_timeout_ms,
                "delimiter": delimiter,
            }.items()
            if value is not None
        }
        base_config = config or WriterConfig()
        self._config = dataclasses.replace(base_config, **overrides) if overrides else base_config

        self._client = client
        self._stream_name = stream_name
        self._logger = logger
        self._sleep = sleep

        # Each entry keeps the record next to its encoded payload.
        self._queue: list[tuple[Any, RecordPayload]] = []
        self._closed = False
        self._lock = asyncio.Lock()

        # Metrics
        self._records_submitted = 0
        self._records_delivered = 0
        self._batch_calls = 0
        self._failed_attempts = 0
        self._flushes = 0

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def config(self) -> WriterConfig:
        """Effective writer configuration."""
        return self._config

    @property
    def stream_name(self) -> str:
        """Destination stream name."""
        return self._stream_name

    @property
    def is_closed(self) -> bool:
        """Whether ``close()`` has been called."""
        return self._closed

    @property
    def pending(self) -> tuple[Any, ...]:
        """Snapshot of records not yet acknowledged by the service."""
        return tuple(record for record, _ in self._queue)

    async def submit(self, record: Any) -> None:
        """Queue a record, flushing first if the buffer is full.

        Args:
            record: JSON-serializable value or dataclass instance.

        Raises:
            WriterClosedError: If the writer has been closed.
            TypeError: If the record cannot be encoded as JSON. Nothing is queued.
            Exception: The terminal error of a flush triggered by this call.
        """
        async with self._lock:
            if self._closed:
                raise WriterClosedError("Cannot submit to a closed writer")

            payload = RecordPayload(data=serialize_record(record, self._config.delimiter))

            # Records left over from a failed flush must drain before more are accepted.
            if len(self._queue) >= self._config.high_water_mark:
                await self._flush_locked()

            log_event(
                self._logger,
                logging.DEBUG,
                "record_enqueued",
                "Adding to queue",
                stream=self._stream_name,
                record=record,
            )
            self._queue.append((record, payload))
            self._records_submitted += 1

            if len(self._queue) >= self._config.high_water_mark:
                await self._flush_locked()

    async def submit_many(self, records: Iterable[Any]) -> int:
        """Queue records one by one.

        Args:
            records: Records to submit in order.

        Returns:
            int: Number of records queued.
        """
        count = 0
        for record in records:
            await self.submit(record)
            count += 1
        return count

    async def flush(self) -> None:
        """Deliver every queued record, retrying rejected ones.

        No batch call is made when the queue is empty.
        """
        async with self._lock:
            await self._flush_locked()

    async def close(self) -> None:
        """Refuse further submissions and flush what is left.

        If the final flush fails, the error propagates and the queue keeps
        the undelivered records. Calling ``close()`` again retries them.
        """
        async with self._lock:
            self._closed = True
            await self._flush_locked()

    async def drain_pending(self) -> list[Any]:
        """Remove and return the records still waiting for delivery."""
        async with self._lock:
            records = [record for record, _ in self._queue]
            self._queue.clear()
            return records

    def get_metrics(self) -> WriterMetrics:
        """Get writer metrics.

        Returns:
            WriterMetrics: Current counters.
        """
        return WriterMetrics(
            records_submitted=self._records_submitted,
            records_delivered=self._records_delivered,
            records_pending=len(self._queue),
            batch_calls=self._batch_calls,
            failed_attempts=self._failed_attempts,
            flushes=self._flushes,
        )

    async def _flush_locked(self) -> None:
        if not self._queue:
            return

        self._flushes += 1
        executor = RetryExecutor(
            max_retries=self._config.max_retries,
            delay=fibonacci_delay(self._config.retry_timeout),
            sleep=self._sleep,
        )
        await executor.execute(self._write_records)

    def _build_request(self) -> BatchRequest:
        return BatchRequest(
            records=tuple(payload for _, payload in self._queue),
            destination=self._stream_name,
        )

    async def _write_records(self) -> None:
        """Perform one batch call for the current queue."""
        request = self._build_request()
        log_event(
            self._logger,
            logging.DEBUG,
            "batch_write",
            f"Writing {len(request)} records",
            stream=self._stream_name,
            count=len(request),
        )

        self._batch_calls += 1
        try:
            result = await self._client.put_batch(request)
        except Exception as exc:
            self._failed_attempts += 1
            log_event(
                self._logger,
                logging.WARNING,
                "batch_call_failed",
                f"Batch call failed: {exc}",
                stream=self._stream_name,
                count=len(request),
            )
            raise

        failed_indexes = result.failed_indexes() if result.failed_count else []
        if result.failed_count and (len(result.outcomes) != len(request) or not failed_indexes):
            self._failed_attempts += 1
            raise TransportError(
                f"Inconsistent batch response: {len(result.outcomes)} outcomes, "
                f"{len(failed_indexes)} failed, for {len(request)} records"
            )

        delivered = len(request) - len(failed_indexes)
        self._records_delivered += delivered
        log_event(
            self._logger,
            logging.INFO,
            "batch_written",
            f"Wrote {delivered} records",
            stream=self._stream_name,
            count=delivered,
        )

        if not failed_indexes:
            self._queue.clear()
            return

        self._failed_attempts += 1
        log_event(
            self._logger,
            logging.WARNING,
            "batch_partial_failure",
            f"Failed writing {len(failed_indexes)} records",
            stream=self._stream_name,
            count=len(failed_indexes),
        )

        reasons: list[str] = []
        for index in failed_indexes:
            outcome = result.outcomes[index]
            reason = outcome.error_reason or outcome.error_code or "unknown error"
            reasons.append(reason)
            log_event(
                self._logger,
                logging.WARNING,
                "record_failed",
                f"Failed record with message: {reason}",
                stream=self._stream_name,
                error_code=outcome.error_code,
            )

        self._queue[:] = [self._queue[index] for index in failed_indexes]
        raise PartialBatchFailureError(len(failed_indexes), reasons)
