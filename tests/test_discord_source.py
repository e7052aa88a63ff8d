"""Tests for the Discord pending-queue source."""

import asyncio
import json
from pathlib import Path

from shadowmarkets.sources.discord import DiscordQueueSource, append_pending_message
from shadowmarkets.sources.ledger import FileConsumedLedger
from shadowmarkets.sources.models import DiscordPrediction

from tests.helpers import NOW, Clock


def _source(tmp_path: Path) -> DiscordQueueSource:
    return DiscordQueueSource(
        guild_id="g1",
        channel_id="c1",
        pending_path=tmp_path / "discord-pending.json",
        ledger=FileConsumedLedger(tmp_path / "discord-consumed.json"),
        window_seconds=3600,
        clock=Clock(),
    )


def test_missing_pending_file_means_no_events(tmp_path: Path) -> None:
    assert asyncio.run(_source(tmp_path).next_event()) is None


def test_drains_queue_in_order(tmp_path: Path) -> None:
    pending = tmp_path / "discord-pending.json"
    append_pending_message(pending, "BTC above 100k by Friday", "alice", message_id="m1")
    append_pending_message(pending, "Launch slips a week", "bob", message_id="m2")

    source = _source(tmp_path)
    first = asyncio.run(source.next_event())

    assert isinstance(first, DiscordPrediction)
    assert first.message_id == "m1"
    assert first.author == "alice"
    assert first.question == 'Will the following statement be true: "BTC above 100k by Friday"?'
    assert first.end_time_seconds == NOW + 3600
    assert first.id == f"discord:g1:c1:m1@{NOW + 3600}"

    remaining = json.loads(pending.read_text())
    assert [m["messageId"] for m in remaining] == ["m2"]
    assert json.loads((tmp_path / "discord-consumed.json").read_text()) == {"consumedIds": ["m1"]}

    second = asyncio.run(_source(tmp_path).next_event())
    assert second.message_id == "m2"
    assert asyncio.run(_source(tmp_path).next_event()) is None


def test_consumed_messages_are_never_reemitted(tmp_path: Path) -> None:
    pending = tmp_path / "discord-pending.json"
    FileConsumedLedger(tmp_path / "discord-consumed.json").add("m1")
    # Bot re-wrote an already consumed message back into the queue
    append_pending_message(pending, "old", "alice", message_id="m1")
    append_pending_message(pending, "new", "bob", message_id="m3")

    event = asyncio.run(_source(tmp_path).next_event())

    assert event.message_id == "m3"
    assert json.loads(pending.read_text()) == []


def test_queue_of_only_consumed_messages_is_pruned(tmp_path: Path) -> None:
    pending = tmp_path / "discord-pending.json"
    FileConsumedLedger(tmp_path / "discord-consumed.json").add("m1")
    append_pending_message(pending, "old", "alice", message_id="m1")

    assert asyncio.run(_source(tmp_path).next_event()) is None
    assert json.loads(pending.read_text()) == []


def test_evidence_is_unresolved_message(tmp_path: Path) -> None:
    append_pending_message(tmp_path / "discord-pending.json", "It rains", "carol", message_id="m9")
    source = _source(tmp_path)

    async def run():
        return await source.collect_evidence(await source.next_event())

    evidence = asyncio.run(run())
    assert evidence.payload == {
        "kind": "discordPrediction",
        "messageId": "m9",
        "content": "It rains",
        "resolved": False,
    }


def test_append_generates_message_id(tmp_path: Path) -> None:
    entry = append_pending_message(tmp_path / "q.json", "hello", "dave")

    assert entry["messageId"]
    assert entry["author"] == "dave"
    assert isinstance(entry["timestamp"], int)
    assert json.loads((tmp_path / "q.json").read_text()) == [entry]


def test_entries_without_message_id_are_skipped_and_pruned(tmp_path: Path) -> None:
    pending = tmp_path / "discord-pending.json"
    pending.write_text(
        json.dumps(
            [
                {"content": "no id here", "author": "eve", "timestamp": 1},
                "not an object",
                {"messageId": "m2", "content": "Launch slips a week", "author": "bob", "timestamp": 2},
            ]
        )
    )
    source = _source(tmp_path)

    async def run():
        return [await source.next_event() for _ in range(3)]

    first, second, third = asyncio.run(run())

    assert first is not None
    assert first.message_id == "m2"
    assert second is None
    assert third is None
    assert json.loads(pending.read_text()) == []
