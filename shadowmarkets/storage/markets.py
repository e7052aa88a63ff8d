"""Markets file: the record of every created market and its settlement.

The file is ``{"markets": [CreatedMarketRecord, ...]}`` in creation order. Each
operation reads the whole document, mutates it and writes it back atomically.

Single-writer precondition: the creation role appends and the oracle role marks
settlements. Running two writers of the same role against one file is out of
contract and can lose updates.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import Field

from shadowmarkets.sources.models import CamelModel, PrivateEvent

from .jsonfile import CorruptDocumentError, read_json, write_json_atomic

logger = logging.getLogger(__name__)


# ============================================================================
# Records
# ============================================================================


class SettlementResult(CamelModel):
    """Outcome submitted for a market, kept for audit."""

    yes_winner: bool
    reasoning: str
    signature: str
    used_llm: bool = False
    settled_at_seconds: int | None = None


class CreatedMarketRecord(CamelModel):
    """A market created from a private event.

    Identity fields are written once at creation; only ``settled`` and
    ``result`` change afterwards, and only once.
    """

    market: str = Field(description="On-chain market address")
    signature: str
    created_at_seconds: int
    end_time_seconds: int
    question: str
    event: PrivateEvent
    settled: bool = False
    result: SettlementResult | None = None


class MarketsDocument(CamelModel):
    markets: list[CreatedMarketRecord] = Field(default_factory=list)


# ============================================================================
# Stores
# ============================================================================


class MarketsStore(ABC):
    @abstractmethod
    def load_markets(self) -> list[CreatedMarketRecord]:
        ...

    @abstractmethod
    def append_market(self, record: CreatedMarketRecord) -> None:
        ...

    @abstractmethod
    def mark_settled(self, market: str, result: SettlementResult) -> bool:
        """Mark a market settled. Returns False when nothing changed.

        Unknown markets are ignored. An already-settled record keeps its first
        result.
        """
        ...

    def get_market(self, market: str) -> CreatedMarketRecord | None:
        return next((r for r in self.load_markets() if r.market == market), None)

    def unsettled(self) -> list[CreatedMarketRecord]:
        return [r for r in self.load_markets() if not r.settled]


def _apply_settlement(
    records: list[CreatedMarketRecord], market: str, result: SettlementResult
) -> bool:
    for record in records:
        if record.market != market:
            continue
        if record.settled:
            logger.warning(
                f"Market {market} already settled (yes_winner={record.result.yes_winner if record.result else None}); "
                "keeping the first result"
            )
            return False
        record.settled = True
        record.result = result
        return True

    logger.warning(f"mark_settled: market {market} not found, ignoring")
    return False


class InMemoryMarketsStore(MarketsStore):
    def __init__(self, records: list[CreatedMarketRecord] | None = None):
        self._records: list[CreatedMarketRecord] = list(records or [])

    def load_markets(self) -> list[CreatedMarketRecord]:
        return [r.model_copy(deep=True) for r in self._records]

    def append_market(self, record: CreatedMarketRecord) -> None:
        self._records.append(record.model_copy(deep=True))

    def mark_settled(self, market: str, result: SettlementResult) -> bool:
        return _apply_settlement(self._records, market, result)


class FileMarketsStore(MarketsStore):
    def __init__(self, path: Path):
        self.path = path

    def _read(self) -> MarketsDocument:
        raw = read_json(self.path, default={"markets": []})
        if not isinstance(raw, dict):
            raise CorruptDocumentError(self.path, "expected a JSON object with 'markets'")
        return MarketsDocument.model_validate(raw)

    def _write(self, doc: MarketsDocument) -> None:
        write_json_atomic(self.path, doc.to_json_dict())

    def load_markets(self) -> list[CreatedMarketRecord]:
        return self._read().markets

    def append_market(self, record: CreatedMarketRecord) -> None:
        doc = self._read()
        doc.markets.append(record)
        self._write(doc)
        logger.info(f"Recorded market {record.market} ({len(doc.markets)} total)")

    def mark_settled(self, market: str, result: SettlementResult) -> bool:
        doc = self._read()
        if not _apply_settlement(doc.markets, market, result):
            return False
        self._write(doc)
        logger.info(f"Marked market {market} settled (yes_winner={result.yes_winner})")
        return True
