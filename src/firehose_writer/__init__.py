"""Firehose Writer.

Buffered, retrying batch writer for append-only stream ingestion services
such as AWS Kinesis Data Firehose.
"""

from firehose_writer.clients import (
    FirehoseIngestionClient,
    FirehoseSettings,
    IngestionClient,
    JsonlClientConfig,
    JsonlIngestionClient,
)
from firehose_writer.patterns.retry import RetryExecutor, fibonacci_delay
from firehose_writer.writer import (
    BatchBufferedWriter,
    BatchRequest,
    BatchResult,
    ConfigurationError,
    FirehoseWriterError,
    PartialBatchFailureError,
    RecordOutcome,
    RecordPayload,
    TransportError,
    WriterClosedError,
    WriterConfig,
)

__version__ = "0.1.0"

__all__ = [
    "BatchBufferedWriter",
    "BatchRequest",
    "BatchResult",
    "ConfigurationError",
    "FirehoseIngestionClient",
    "FirehoseSettings",
    "FirehoseWriterError",
    "IngestionClient",
    "JsonlClientConfig",
    "JsonlIngestionClient",
    "PartialBatchFailureError",
    "RecordOutcome",
    "RecordPayload",
    "RetryExecutor",
    "TransportError",
    "WriterClosedError",
    "WriterConfig",
    "fibonacci_delay",
]
