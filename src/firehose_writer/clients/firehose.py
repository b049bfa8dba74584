"""AWS Kinesis Data Firehose client built on boto3."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from firehose_writer.writer.errors import TransportError
from firehose_writer.writer.models import BatchRequest, BatchResult, RecordOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FirehoseSettings:
    """Connection settings for the Firehose client.

    Attributes:
        region: AWS region (default: "us-east-1").
        endpoint_url: Endpoint override, e.g. a LocalStack URL (default: None).
        connect_timeout: Connection timeout in seconds (default: 10.0).
        read_timeout: Read timeout in seconds (default: 30.0).
        max_pool_connections: Size of the botocore connection pool (default: 10).
    """

    region: str = "us-east-1"
    endpoint_url: str | None = None
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    max_pool_connections: int = 10

    @classmethod
    def from_env(cls) -> FirehoseSettings:
        """Read ``FIREHOSE_REGION`` and ``FIREHOSE_ENDPOINT_URL`` from the environment."""
        return cls(
            region=os.getenv("FIREHOSE_REGION", os.getenv("AWS_REGION", "us-east-1")),
            endpoint_url=os.getenv("FIREHOSE_ENDPOINT_URL") or None,
        )


class FirehoseIngestionClient:
    """
    Ingestion client wrapping boto3's ``put_record_batch``.

    The blocking boto3 call runs in a worker thread. Per-record failures are
    reported through the returned ``BatchResult``; whole-call failures are
    raised as ``TransportError``. botocore's own retries are disabled so
    that attempt counting stays with the writer.

    Args:
        client: A boto3 ``firehose`` client.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: FirehoseSettings | None = None) -> FirehoseIngestionClient:
        """Create a boto3 Firehose client from settings."""
        settings = settings or FirehoseSettings()
        boto_config = Config(
            region_name=settings.region,
            retries={"max_attempts": 1, "mode": "standard"},
            max_pool_connections=settings.max_pool_connections,
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
        )
        client = boto3.client(
            "firehose",
            endpoint_url=settings.endpoint_url,
            config=boto_config,
        )
        logger.info(
            "Created Firehose client in region %s%s",
            settings.region,
            f" ({settings.endpoint_url})" if settings.endpoint_url else "",
        )
        return cls(client)

    async def put_batch(self, request: BatchRequest) -> BatchResult:
        """Send one ``PutRecordBatch`` call.

        Args:
            request: Records and delivery stream name.

        Returns:
            BatchResult: Per-record outcomes aligned with the request.

        Raises:
            TransportError: If the call itself fails.
        """
        records = [{"Data": payload.data.encode("utf-8")} for payload in request.records]

        try:
            response = await asyncio.to_thread(
                self._client.put_record_batch,
                DeliveryStreamName=request.destination,
                Records=records,
            )
        except ClientError as exc:
            error = exc.response.get("Error", {})
            raise TransportError(
                f"PutRecordBatch failed: {error.get('Code', 'Unknown')} {error.get('Message', '')}".rstrip()
            ) from exc
        except BotoCoreError as exc:
            raise TransportError(f"PutRecordBatch failed: {exc}") from exc

        return parse_put_record_batch_response(response, len(records))


def parse_put_record_batch_response(response: dict[str, Any], record_count: int) -> BatchResult:
    """Convert a ``PutRecordBatch`` response into a ``BatchResult``.

    Args:
        response: Raw boto3 response dictionary.
        record_count: Number of records sent in the request.

    Returns:
        BatchResult: Outcomes in request order.

    Raises:
        TransportError: If the responses do not line up with the records sent.
    """
    failed_count = int(response.get("FailedPutCount", 0))
    entries = response.get("RequestResponses") or []

    if not entries and failed_count == 0:
        return BatchResult.all_succeeded(record_count)

    if len(entries) != record_count:
        raise TransportError(
            f"PutRecordBatch returned {len(entries)} responses for {record_count} records"
        )

    outcomes = tuple(
        RecordOutcome(
            succeeded=not entry.get("ErrorCode"),
            error_code=entry.get("ErrorCode"),
            error_reason=entry.get("ErrorMessage"),
        )
        for entry in entries
    )
    return BatchResult(failed_count=failed_count, outcomes=outcomes)
