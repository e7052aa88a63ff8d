"""Discord queue source.

An external bot process watches a channel and appends each message to a pending
queue file (a JSON array of ``{messageId, content, author, timestamp}``). This
source drains that queue one message per call. Entries that are not objects or
carry no ``messageId`` are logged and pruned.

The pending file has two writers, the bot and this source, and no locking.
This source rewrites the file from the snapshot it read, so a message the bot
appends between that read and the rewrite is lost.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable
from uuid import uuid4

from shadowmarkets.storage.jsonfile import CorruptDocumentError, read_json, write_json_atomic
from shadowmarkets.time_utils import now_seconds

from .base import EventSource
from .exceptions import EventSourceError
from .ledger import ConsumedLedger
from .models import DiscordPrediction, Evidence, PrivateEvent

logger = logging.getLogger(__name__)


def _load_pending(path: Path) -> list[dict[str, Any]]:
    pending = read_json(path, default=[])
    if not isinstance(pending, list):
        raise CorruptDocumentError(path, "expected a JSON array of messages")
    return pending


def _has_message_id(entry: Any) -> bool:
    return isinstance(entry, dict) and entry.get("messageId") not in (None, "")


def append_pending_message(
    path: Path,
    content: str,
    author: str,
    message_id: str | None = None,
) -> dict[str, Any]:
    """Append a message to the pending queue the way the bot does."""
    entry = {
        "messageId": message_id or uuid4().hex,
        "content": content,
        "author": author,
        "timestamp": int(time.time() * 1000),
    }
    pending = _load_pending(path)
    pending.append(entry)
    write_json_atomic(path, pending)
    logger.info(f"Queued message {entry['messageId']} from {author} ({len(pending)} pending)")
    return entry


class DiscordQueueSource(EventSource):
    name = "discord"

    def __init__(
        self,
        guild_id: str,
        channel_id: str,
        pending_path: Path,
        ledger: ConsumedLedger,
        window_seconds: int = 3600,
        clock: Callable[[], int] = now_seconds,
    ):
        super().__init__(ledger, clock)
        self.guild_id = guild_id
        self.channel_id = channel_id
        self.pending_path = pending_path
        self.window_seconds = window_seconds

    async def next_event(self) -> PrivateEvent | None:
        try:
            pending = _load_pending(self.pending_path)
        except CorruptDocumentError as e:
            raise EventSourceError(str(e), source=self.name) from e

        if not pending:
            return None

        valid = [m for m in pending if _has_message_id(m)]
        if len(valid) < len(pending):
            logger.warning(
                f"Dropping {len(pending) - len(valid)} invalid entries from {self.pending_path}"
            )

        consumed = {str(i) for i in self.ledger.ids()}
        message = next((m for m in valid if str(m["messageId"]) not in consumed), None)
        if message is None:
            write_json_atomic(self.pending_path, [])
            logger.info(f"Pruned {len(pending)} consumed or invalid messages")
            return None

        message_id = str(message["messageId"])
        self.ledger.add(message_id)
        consumed.add(message_id)

        remaining = [m for m in valid if str(m["messageId"]) not in consumed]
        write_json_atomic(self.pending_path, remaining)

        end = self.clock() + self.window_seconds
        content = str(message.get("content", ""))
        event = DiscordPrediction(
            id=f"discord:{self.guild_id}:{self.channel_id}:{message_id}@{end}",
            guild_id=self.guild_id,
            channel_id=self.channel_id,
            message_id=message_id,
            message_content=content,
            author=str(message.get("author", "unknown")),
            question=f'Will the following statement be true: "{content}"?',
            end_time_seconds=end,
        )
        logger.info(f"Emitting Discord event {event.id}")
        return event

    async def collect_evidence(self, event: PrivateEvent) -> Evidence:
        if not isinstance(event, DiscordPrediction):
            return self._unsupported(event)

        return Evidence(
            event_id=event.id,
            collected_at_seconds=self.clock(),
            payload={
                "kind": event.kind,
                "messageId": event.message_id,
                "content": event.message_content,
                "resolved": False,
            },
        )
