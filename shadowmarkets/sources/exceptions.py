"""Event source exceptions."""


class EventSourceError(Exception):
    """Base exception for event source failures (listing, ledger, queue)."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class EvidenceError(EventSourceError):
    """Source unreachable while collecting settlement evidence. Retried next tick."""

    pass


class LedgerCorruptedError(EventSourceError):
    """Consumed ledger exists but cannot be read; refusing to re-emit events."""

    pass
