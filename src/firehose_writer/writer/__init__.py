"""Buffered batch writer module."""

from firehose_writer.writer.base import RecordSink
from firehose_writer.writer.buffered import BatchBufferedWriter
from firehose_writer.writer.errors import (
    ConfigurationError,
    FirehoseWriterError,
    PartialBatchFailureError,
    TransportError,
    WriterClosedError,
)
from firehose_writer.writer.models import (
    MAX_BATCH_SIZE,
    BatchRequest,
    BatchResult,
    RecordOutcome,
    RecordPayload,
    WriterConfig,
    WriterMetrics,
    serialize_record,
)

__all__ = [
    # Writer
    "BatchBufferedWriter",
    "RecordSink",
    # Errors
    "ConfigurationError",
    "FirehoseWriterError",
    "PartialBatchFailureError",
    "TransportError",
    "WriterClosedError",
    # Models
    "MAX_BATCH_SIZE",
    "BatchRequest",
    "BatchResult",
    "RecordOutcome",
    "RecordPayload",
    "WriterConfig",
    "WriterMetrics",
    "serialize_record",
]
