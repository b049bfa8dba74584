"""
Exceptions raised by the buffered writer and its ingestion clients.
"""


class FirehoseWriterError(Exception):
    """Base error for firehose-writer."""

    pass


class ConfigurationError(FirehoseWriterError, ValueError):
    """Invalid construction arguments or configuration values."""

    pass


class TransportError(FirehoseWriterError):
    """The ingestion service call failed as a whole (network, auth, throttling)."""

    pass


class PartialBatchFailureError(FirehoseWriterError):
    """Some records of a batch were rejected by the ingestion service."""

    def __init__(self, failed_count: int, reasons: list[str] | None = None) -> None:
        super().__init__(f"Failed to write {failed_count} records")
        self.failed_count = failed_count
        self.reasons: list[str] = list(reasons or [])


class WriterClosedError(FirehoseWriterError):
    """Raised when submitting to a writer that has been closed."""

    pass
