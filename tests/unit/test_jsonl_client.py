"""Unit tests for JsonlIngestionClient."""

import json
import tempfile
from pathlib import Path

import pytest

from firehose_writer.clients.base import IngestionClient
from firehose_writer.clients.jsonl import JsonlClientConfig, JsonlIngestionClient
from firehose_writer.writer.models import BatchRequest, RecordPayload


def make_request(*lines: str) -> BatchRequest:
    return BatchRequest(records=tuple(RecordPayload(line) for line in lines), destination="local")


class TestJsonlIngestionClient:
    """Test suite for JsonlIngestionClient class."""

    @pytest.fixture
    def temp_dir(self) -> Path:
        """Create a temporary directory for test files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    @pytest.fixture
    def temp_file(self, temp_dir: Path) -> Path:
        """Create a temporary file path."""
        return temp_dir / "test_output.jsonl"

    def test_conforms_to_protocol(self, temp_file: Path) -> None:
        assert isinstance(JsonlIngestionClient(JsonlClientConfig(temp_file)), IngestionClient)

    @pytest.mark.asyncio
    async def test_put_batch_writes_payloads(self, temp_file: Path) -> None:
        """Payloads are written verbatim and all reported delivered."""
        async with JsonlIngestionClient(JsonlClientConfig(temp_file)) as client:
            result = await client.put_batch(make_request('{"id": 1}\n', '{"id": 2}\n'))

        assert result.failed_count == 0
        assert len(result.outcomes) == 2

        lines = temp_file.read_text().splitlines()
        assert [json.loads(line) for line in lines] == [{"id": 1}, {"id": 2}]

    @pytest.mark.asyncio
    async def test_batches_appended(self, temp_file: Path) -> None:
        temp_file.write_text('{"id": 0}\n')

        client = JsonlIngestionClient(JsonlClientConfig(temp_file, fsync=False))
        await client.put_batch(make_request('{"id": 1}\n'))
        await client.put_batch(make_request('{"id": 2}\n'))
        await client.close()

        assert client.batches_written == 2
        assert temp_file.read_text().splitlines() == ['{"id": 0}', '{"id": 1}', '{"id": 2}']

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, temp_file: Path) -> None:
        client = JsonlIngestionClient(JsonlClientConfig(temp_file))
        await client.close()
        await client.close()

    @pytest.mark.asyncio
    async def test_missing_directory_raises(self, temp_dir: Path) -> None:
        client = JsonlIngestionClient(JsonlClientConfig(temp_dir / "missing" / "out.jsonl"))

        with pytest.raises(FileNotFoundError):
            await client.put_batch(make_request('{"id": 1}\n'))
