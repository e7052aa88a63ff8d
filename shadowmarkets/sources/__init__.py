"""Private event sources and their consumed-id ledgers."""

from shadowmarkets.sources.base import EventSource
from shadowmarkets.sources.discord import DiscordQueueSource, append_pending_message
from shadowmarkets.sources.exceptions import EventSourceError, EvidenceError, LedgerCorruptedError
from shadowmarkets.sources.github import GithubIssueSource
from shadowmarkets.sources.ledger import ConsumedLedger, FileConsumedLedger, InMemoryConsumedLedger
from shadowmarkets.sources.local import LocalSignalSource
from shadowmarkets.sources.models import (
    DiscordPrediction,
    Evidence,
    GithubIssueWillClose,
    LocalBooleanSignal,
    PrivateEvent,
    UnknownEvent,
    parse_event,
)

__all__ = [
    "EventSource",
    "DiscordQueueSource",
    "append_pending_message",
    "EventSourceError",
    "EvidenceError",
    "LedgerCorruptedError",
    "GithubIssueSource",
    "ConsumedLedger",
    "FileConsumedLedger",
    "InMemoryConsumedLedger",
    "LocalSignalSource",
    "DiscordPrediction",
    "Evidence",
    "GithubIssueWillClose",
    "LocalBooleanSignal",
    "PrivateEvent",
    "UnknownEvent",
    "parse_event",
]
