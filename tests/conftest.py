"""Pytest configuration and fixtures for firehose-writer tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from firehose_writer.writer.models import BatchRequest, BatchResult, RecordOutcome


@pytest.fixture()
def records() -> list[dict]:
    """Provide a small list of records in submission order."""
    return [
        {"id": 1, "name": "alpha"},
        {"id": 2, "name": "beta"},
        {"id": 3, "name": "gamma"},
        {"id": 4, "name": "delta"},
    ]


@pytest.fixture()
def success_result():
    """Build a BatchResult reporting every record of a request as delivered."""

    def build(request: BatchRequest) -> BatchResult:
        return BatchResult.all_succeeded(len(request))

    return build


@pytest.fixture()
def partial_result():
    """Build a BatchResult rejecting the records at the given positions."""

    def build(count: int, failed: set[int]) -> BatchResult:
        return BatchResult(
            failed_count=len(failed),
            outcomes=tuple(
                RecordOutcome(
                    succeeded=False,
                    error_code="ServiceUnavailableException",
                    error_reason="Slow down.",
                )
                if i in failed
                else RecordOutcome(succeeded=True)
                for i in range(count)
            ),
        )

    return build


@pytest.fixture()
def client(success_result) -> AsyncMock:
    """Ingestion client mock that accepts every batch by default."""
    mock = AsyncMock()
    mock.put_batch.side_effect = success_result
    return mock


@pytest.fixture()
def sleeps() -> list[float]:
    """Collect the delays a writer or executor waited for."""
    return []


@pytest.fixture()
def fake_sleep(sleeps: list[float]):
    """Sleep replacement that records delays without waiting."""

    async def sleep(delay: float) -> None:
        sleeps.append(delay)

    return sleep
