"""Ingestion service clients module."""

from firehose_writer.clients.base import IngestionClient
from firehose_writer.clients.firehose import (
    FirehoseIngestionClient,
    FirehoseSettings,
    parse_put_record_batch_response,
)
from firehose_writer.clients.jsonl import JsonlClientConfig, JsonlIngestionClient

__all__ = [
    "FirehoseIngestionClient",
    "FirehoseSettings",
    "IngestionClient",
    "JsonlClientConfig",
    "JsonlIngestionClient",
    "parse_put_record_batch_response",
]
