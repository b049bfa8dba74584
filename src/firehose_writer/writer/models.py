"""Domain models for the buffered batch writer.

This module defines the wire-level batch shapes exchanged with ingestion
clients and the writer configuration.
"""

from __future__ import annotations

import dataclasses
import json
import os
from dataclasses import dataclass
from typing import Any

from firehose_writer.writer.errors import ConfigurationError

# Hard limit of records per PutRecordBatch call.
MAX_BATCH_SIZE = 500


def serialize_record(record: Any, delimiter: str = "") -> str:
    """Encode a record as JSON followed by ``delimiter``.

    Dataclass instances are converted with ``dataclasses.asdict()`` first.

    Args:
        record: Any JSON-serializable value or dataclass instance.
        delimiter: Suffix appended after the JSON text.

    Returns:
        The payload sent to the ingestion service for this record.
    """
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        record = dataclasses.asdict(record)
    return json.dumps(record, ensure_ascii=False) + delimiter


@dataclass(frozen=True, slots=True)
class RecordPayload:
    """A single serialized record inside a batch request.

    Attributes:
        data: Serialized record text, delimiter included.
    """

    data: str


@dataclass(frozen=True, slots=True)
class BatchRequest:
    """One batch call worth of records for a destination stream.

    Attributes:
        records: Payloads in queue order.
        destination: Name of the delivery stream.
    """

    records: tuple[RecordPayload, ...]
    destination: str

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True, slots=True)
class RecordOutcome:
    """Service verdict for one record of a batch.

    Attributes:
        succeeded: Whether the service accepted the record.
        error_code: Service error code for a rejected record.
        error_reason: Human-readable reason for a rejected record.
    """

    succeeded: bool
    error_code: str | None = None
    error_reason: str | None = None


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Structured response to a batch call.

    Outcomes are positionally aligned with ``BatchRequest.records``.

    Attributes:
        failed_count: Number of records the service rejected.
        outcomes: One outcome per submitted record.
    """

    failed_count: int
    outcomes: tuple[RecordOutcome, ...]

    @classmethod
    def all_succeeded(cls, count: int) -> BatchResult:
        """Build a result reporting ``count`` accepted records."""
        return cls(failed_count=0, outcomes=tuple(RecordOutcome(succeeded=True) for _ in range(count)))

    @property
    def success_count(self) -> int:
        """Number of accepted records."""
        return sum(1 for outcome in self.outcomes if outcome.succeeded)

    def failed_indexes(self) -> list[int]:
        """Positions of rejected records, in request order."""
        return [i for i, outcome in enumerate(self.outcomes) if not outcome.succeeded]


@dataclass(frozen=True, slots=True)
class WriterConfig:
    """Configuration for BatchBufferedWriter.

    Attributes:
        high_water_mark: Records buffered before an automatic flush (1-500, default: 16).
        max_retries: Attempts allowed after the first one (default: 3).
        retry_timeout_ms: Base of the Fibonacci retry schedule in milliseconds (default: 100.0).
        delimiter: Suffix appended to every serialized record (default: "").
    """

    high_water_mark: int = 16
    max_retries: int = 3
    retry_timeout_ms: float = 100.0
    delimiter: str = ""

    def __post_init__(self) -> None:
        if self.high_water_mark > MAX_BATCH_SIZE:
            raise ConfigurationError(f"Max high_water_mark is {MAX_BATCH_SIZE}")
        if self.high_water_mark < 1:
            raise ConfigurationError("high_water_mark must be >= 1")
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be >= 0")
        if self.retry_timeout_ms <= 0:
            raise ConfigurationError("retry_timeout_ms must be > 0")

    @property
    def retry_timeout(self) -> float:
        """Base retry delay in seconds."""
        return self.retry_timeout_ms / 1000.0

    @classmethod
    def from_env(cls, prefix: str = "FIREHOSE_WRITER_") -> WriterConfig:
        """Build a config from environment variables, falling back to defaults.

        Reads ``{prefix}HIGH_WATER_MARK``, ``{prefix}MAX_RETRIES``,
        ``{prefix}RETRY_TIMEOUT_MS`` and ``{prefix}DELIMITER``.
        """
        defaults = cls()
        try:
            return cls(
                high_water_mark=int(
                    os.getenv(f"{prefix}HIGH_WATER_MARK", str(defaults.high_water_mark))
                ),
                max_retries=int(os.getenv(f"{prefix}MAX_RETRIES", str(defaults.max_retries))),
                retry_timeout_ms=float(
                    os.getenv(f"{prefix}RETRY_TIMEOUT_MS", str(defaults.retry_timeout_ms))
                ),
                delimiter=os.getenv(f"{prefix}DELIMITER", defaults.delimiter),
            )
        except ValueError as exc:
            if isinstance(exc, ConfigurationError):
                raise
            raise ConfigurationError(f"Invalid writer environment setting: {exc}") from exc


@dataclass
class WriterMetrics:
    """Counters for a writer instance."""

    records_submitted: int
    records_delivered: int
    records_pending: int
    batch_calls: int
    failed_attempts: int
    flushes: int
