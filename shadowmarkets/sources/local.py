"""Local JSON file source.

The file holds the events to market-ize, the consumed ledger, and the private
signal store used as settlement evidence::

    {
      "events": [{"kind": "localBooleanSignal", "id": "...", ...}],
      "consumedIds": ["..."],
      "signals": {"ship-v2": true}
    }
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from pydantic import ValidationError

from shadowmarkets.storage.jsonfile import CorruptDocumentError, read_json
from shadowmarkets.time_utils import now_seconds

from .base import EventSource
from .exceptions import EventSourceError, EvidenceError
from .ledger import ConsumedLedger, FileConsumedLedger
from .models import Evidence, LocalBooleanSignal, PrivateEvent, parse_event

logger = logging.getLogger(__name__)


class LocalSignalSource(EventSource):
    name = "local"

    def __init__(
        self,
        path: Path,
        ledger: ConsumedLedger | None = None,
        clock: Callable[[], int] = now_seconds,
    ):
        super().__init__(ledger or FileConsumedLedger(path), clock)
        self.path = path

    def _load(self) -> dict[str, Any]:
        doc = read_json(self.path, default=None)
        if doc is None:
            return {"events": [], "signals": {}}
        if not isinstance(doc, dict):
            raise CorruptDocumentError(self.path, "expected a JSON object")
        doc.setdefault("events", [])
        doc.setdefault("signals", {})
        return doc

    def _events(self, doc: dict[str, Any]) -> list[PrivateEvent]:
        events: list[PrivateEvent] = []
        for raw in doc["events"]:
            try:
                events.append(parse_event(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid event in {self.path}: {e}")
        return events

    async def next_event(self) -> PrivateEvent | None:
        try:
            doc = self._load()
        except CorruptDocumentError as e:
            raise EventSourceError(str(e), source=self.name) from e

        consumed = set(self.ledger.ids())
        for event in self._events(doc):
            if event.id in consumed:
                continue
            self.ledger.add(event.id)
            logger.info(f"Emitting local event {event.id}")
            return event

        return None

    async def collect_evidence(self, event: PrivateEvent) -> Evidence:
        if not isinstance(event, LocalBooleanSignal):
            return self._unsupported(event)

        try:
            doc = self._load()
        except CorruptDocumentError as e:
            raise EvidenceError(str(e), source=self.name) from e

        return Evidence(
            event_id=event.id,
            collected_at_seconds=self.clock(),
            payload={
                "kind": event.kind,
                "signalKey": event.signal_key,
                "value": doc["signals"].get(event.signal_key),
            },
        )
