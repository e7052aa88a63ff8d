"""Event source contract shared by all private event backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable

from shadowmarkets.time_utils import now_seconds

from .ledger import ConsumedLedger
from .models import Evidence, PrivateEvent


class EventSource(ABC):
    """Produces unseen private events and collects evidence to settle them.

    ``next_event`` never returns an event whose dedup key is already in the
    ledger, and records the key before returning. ``collect_evidence`` is a
    pure read; for event kinds a source cannot handle it returns evidence with an
    ``error`` marker instead of raising.
    """

    name = "source"

    def __init__(self, ledger: ConsumedLedger, clock: Callable[[], int] = now_seconds):
        self.ledger = ledger
        self.clock = clock

    @abstractmethod
    async def next_event(self) -> PrivateEvent | None:
        """Return the next unseen event to turn into a market, or None."""
        ...

    @abstractmethod
    async def collect_evidence(self, event: PrivateEvent) -> Evidence:
        """Collect resolvability evidence for a previously emitted event."""
        ...

    def _unsupported(self, event: PrivateEvent) -> Evidence:
        return Evidence(
            event_id=event.id,
            collected_at_seconds=self.clock(),
            payload={
                "kind": event.kind,
                "error": f"{self.__class__.__name__} cannot collect evidence for event kind {event.kind}",
            },
        )
