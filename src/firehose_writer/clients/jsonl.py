"""Local ingestion client appending batches to a JSONL file."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Self

import aiofiles

from firehose_writer.writer.models import BatchRequest, BatchResult


@dataclass
class JsonlClientConfig:
    """Configuration for JsonlIngestionClient.

    Attributes:
        file_path: Path to the output file. Appended to, never truncated.
        fsync: Force each batch to disk before acknowledging it.
    """

    file_path: Path
    fsync: bool = True


class JsonlIngestionClient:
    """Ingestion client that appends record payloads to a local file.

    Useful for development and tests without a remote stream. Each payload
    is written verbatim, so records written with ``delimiter="\\n"`` produce
    a JSONL file. Every record of a batch is reported as delivered once the
    write completes; I/O errors propagate as failed batch calls.

    Example:
        ```python
        async with JsonlIngestionClient(JsonlClientConfig(Path("out.jsonl"))) as client:
            writer = BatchBufferedWriter(client, "local", delimiter="\\n")
            await writer.submit({"id": 1})
            await writer.close()
        ```
    """

    def __init__(self, config: JsonlClientConfig) -> None:
        self._config = config
        self._file: Any = None
        self._batches_written = 0

    async def __aenter__(self) -> Self:
        await self._open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    @property
    def batches_written(self) -> int:
        """Number of batch calls persisted."""
        return self._batches_written

    async def _open(self) -> None:
        """Open the output file for appending."""
        self._file = await aiofiles.open(
            self._config.file_path,
            mode="a",
            encoding="utf-8",
            newline="\n",
        )

    async def put_batch(self, request: BatchRequest) -> BatchResult:
        """Append the batch payloads to the file."""
        if self._file is None:
            await self._open()

        await self._file.write("".join(payload.data for payload in request.records))
        await self._file.flush()
        if self._config.fsync:
            os.fsync(self._file.fileno())

        self._batches_written += 1
        return BatchResult.all_succeeded(len(request))

    async def close(self) -> None:
        """Close the file handle."""
        if self._file:
            await self._file.close()
            self._file = None
