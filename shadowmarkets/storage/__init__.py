"""Persistence layer for markets and JSON documents."""

from shadowmarkets.storage.jsonfile import CorruptDocumentError, read_json, write_json_atomic
from shadowmarkets.storage.markets import (
    CreatedMarketRecord,
    FileMarketsStore,
    InMemoryMarketsStore,
    MarketsStore,
    SettlementResult,
)

__all__ = [
    "CorruptDocumentError",
    "read_json",
    "write_json_atomic",
    "CreatedMarketRecord",
    "FileMarketsStore",
    "InMemoryMarketsStore",
    "MarketsStore",
    "SettlementResult",
]
