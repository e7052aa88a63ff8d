"""Consumed-event ledgers.

A ledger is the persisted set of event ids (or issue/message numbers) a source
has already emitted. It only grows. Sources record an id *before* handing the
event downstream, so a crash between emission and market creation loses the
event rather than creating a duplicate market.

Single-writer precondition: one creation process per ledger file. There is no
locking; concurrent writers can lose updates and double-emit events.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from shadowmarkets.storage.jsonfile import CorruptDocumentError, read_json, write_json_atomic

from .exceptions import LedgerCorruptedError

logger = logging.getLogger(__name__)

LedgerId = str | int

LEDGER_KEY = "consumedIds"


class ConsumedLedger(ABC):
    """Monotonic set of already-emitted event ids."""

    @abstractmethod
    def ids(self) -> list[LedgerId]:
        """All consumed ids in the order they were recorded."""
        ...

    @abstractmethod
    def add(self, event_id: LedgerId) -> None:
        """Record an id. Persisted before returning; idempotent."""
        ...

    def contains(self, event_id: LedgerId) -> bool:
        return event_id in set(self.ids())


class InMemoryConsumedLedger(ConsumedLedger):
    def __init__(self, initial: list[LedgerId] | None = None):
        self._ids: list[LedgerId] = list(initial or [])

    def ids(self) -> list[LedgerId]:
        return list(self._ids)

    def add(self, event_id: LedgerId) -> None:
        if event_id not in self._ids:
            self._ids.append(event_id)


class FileConsumedLedger(ConsumedLedger):
    """Ledger stored under ``key`` in a JSON document.

    Other keys in the document are preserved on write, which lets the local
    source keep its ledger inside the events file.
    """

    def __init__(self, path: Path, key: str = LEDGER_KEY):
        self.path = path
        self.key = key

    def _load_document(self) -> dict[str, Any]:
        try:
            doc = read_json(self.path, default={})
        except CorruptDocumentError as e:
            raise LedgerCorruptedError(str(e), source=str(self.path)) from e

        if not isinstance(doc, dict):
            raise LedgerCorruptedError(
                f"Ledger document {self.path} is not a JSON object", source=str(self.path)
            )
        consumed = doc.get(self.key, [])
        if not isinstance(consumed, list):
            raise LedgerCorruptedError(
                f"'{self.key}' in {self.path} is not a list", source=str(self.path)
            )
        return doc

    def ids(self) -> list[LedgerId]:
        return list(self._load_document().get(self.key, []))

    def add(self, event_id: LedgerId) -> None:
        doc = self._load_document()
        consumed = list(doc.get(self.key, []))
        if event_id in consumed:
            logger.debug(f"Ledger {self.path} already contains {event_id!r}")
            return

        consumed.append(event_id)
        doc[self.key] = consumed
        write_json_atomic(self.path, doc)
        logger.info(f"Consumed {event_id!r} (ledger: {self.path.name}, size={len(consumed)})")
