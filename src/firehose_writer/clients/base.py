"""Base protocol for ingestion service clients."""

from typing import Protocol, runtime_checkable

from firehose_writer.writer.models import BatchRequest, BatchResult


@runtime_checkable
class IngestionClient(Protocol):
    """Protocol for remote append-only stream ingestion services.

    A client performs exactly one batch call per ``put_batch`` invocation.
    Transport, authentication or throttling failures are raised as
    exceptions and carry no per-record information; a returned
    ``BatchResult`` must hold one outcome per submitted record.
    """

    async def put_batch(self, request: BatchRequest) -> BatchResult:
        """Submit a batch of records. Returns per-record outcomes."""
        ...
