"""Base protocol for record sinks."""

from typing import Any, Protocol


class RecordSink(Protocol):
    """Protocol for sinks that buffer records and deliver them in batches."""

    async def submit(self, record: Any) -> None:
        """Queue a single record, waiting while the buffer drains."""
        ...

    async def flush(self) -> None:
        """Deliver everything currently buffered."""
        ...

    async def close(self) -> None:
        """Deliver remaining records and refuse further submissions."""
        ...
