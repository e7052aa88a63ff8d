"""Tests for the local signal file source."""

import asyncio
import json
from pathlib import Path

import pytest

from shadowmarkets.sources.exceptions import EventSourceError, EvidenceError
from shadowmarkets.sources.local import LocalSignalSource
from shadowmarkets.sources.models import LocalBooleanSignal

from tests.helpers import NOW, Clock, github_event


def _write_events(path: Path, signals: dict | None = None) -> None:
    path.write_text(
        json.dumps(
            {
                "events": [
                    {
                        "kind": "localBooleanSignal",
                        "id": "ship-v2",
                        "signalKey": "ship-v2",
                        "expectedYes": True,
                        "question": "Will v2 ship?",
                        "endTimeSeconds": NOW + 60,
                    },
                    {
                        "kind": "localBooleanSignal",
                        "id": "hire-cto",
                        "signalKey": "hire-cto",
                        "expectedYes": False,
                        "question": "Will we fail to hire a CTO?",
                        "endTimeSeconds": NOW + 60,
                    },
                ],
                "signals": signals or {},
            }
        )
    )


def test_emits_each_event_once_across_restarts(tmp_path: Path) -> None:
    path = tmp_path / "private-events.json"
    _write_events(path)

    async def run() -> list:
        emitted = []
        for _ in range(3):
            # Fresh instance each time, as after a process restart
            event = await LocalSignalSource(path, clock=Clock()).next_event()
            emitted.append(event.id if event else None)
        return emitted

    assert asyncio.run(run()) == ["ship-v2", "hire-cto", None]
    assert json.loads(path.read_text())["consumedIds"] == ["ship-v2", "hire-cto"]


def test_event_parsed_into_variant(tmp_path: Path) -> None:
    path = tmp_path / "private-events.json"
    _write_events(path)

    event = asyncio.run(LocalSignalSource(path).next_event())

    assert isinstance(event, LocalBooleanSignal)
    assert event.signal_key == "ship-v2"
    assert event.expected_yes is True


def test_missing_file_yields_no_event(tmp_path: Path) -> None:
    source = LocalSignalSource(tmp_path / "absent.json")
    assert asyncio.run(source.next_event()) is None


def test_corrupt_file_raises_source_error(tmp_path: Path) -> None:
    path = tmp_path / "private-events.json"
    path.write_text("[1, 2")

    with pytest.raises(EventSourceError):
        asyncio.run(LocalSignalSource(path).next_event())


def test_invalid_entries_are_skipped(tmp_path: Path) -> None:
    path = tmp_path / "private-events.json"
    path.write_text(
        json.dumps(
            {
                "events": [
                    {"kind": "localBooleanSignal", "id": "broken"},
                    {
                        "kind": "localBooleanSignal",
                        "id": "ok",
                        "signalKey": "ok",
                        "expectedYes": True,
                        "question": "?",
                        "endTimeSeconds": NOW,
                    },
                ]
            }
        )
    )

    event = asyncio.run(LocalSignalSource(path).next_event())
    assert event.id == "ok"


def test_evidence_reads_signal_value(tmp_path: Path) -> None:
    path = tmp_path / "private-events.json"
    _write_events(path, signals={"ship-v2": True})
    source = LocalSignalSource(path, clock=Clock())

    async def run():
        event = await source.next_event()
        return await source.collect_evidence(event)

    evidence = asyncio.run(run())
    assert evidence.event_id == "ship-v2"
    assert evidence.collected_at_seconds == NOW
    assert evidence.payload == {"kind": "localBooleanSignal", "signalKey": "ship-v2", "value": True}
    assert evidence.error is None


def test_evidence_for_unset_signal_is_null(tmp_path: Path) -> None:
    path = tmp_path / "private-events.json"
    _write_events(path)
    source = LocalSignalSource(path)

    async def run():
        return await source.collect_evidence(await source.next_event())

    assert asyncio.run(run()).payload["value"] is None


def test_evidence_does_not_touch_ledger(tmp_path: Path) -> None:
    path = tmp_path / "private-events.json"
    _write_events(path)
    source = LocalSignalSource(path)
    event = asyncio.run(source.next_event())
    before = path.read_text()

    asyncio.run(source.collect_evidence(event))

    assert path.read_text() == before


def test_unsupported_kind_returns_error_marker(tmp_path: Path) -> None:
    source = LocalSignalSource(tmp_path / "private-events.json")

    evidence = asyncio.run(source.collect_evidence(github_event()))

    assert evidence.error is not None
    assert "githubIssueWillClose" in evidence.error


def test_evidence_on_corrupt_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "private-events.json"
    _write_events(path)
    source = LocalSignalSource(path)
    event = asyncio.run(source.next_event())
    path.write_text("{oops")

    with pytest.raises(EvidenceError):
        asyncio.run(source.collect_evidence(event))
