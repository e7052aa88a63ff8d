"""End-to-end ticks over the local source and the paper chain."""

import asyncio
import json
from pathlib import Path

import pytest

from shadowmarkets.agents.oracle import Settled
from shadowmarkets.alerts import OperatorAlerts
from shadowmarkets.config import Settings
from shadowmarkets.pipeline import (
    MANUAL_SETTLEMENT_REASONING,
    Runtime,
    run_creation_cycle,
    run_oracle_cycle,
    seed_market,
    settle_market_manually,
)
from shadowmarkets.services.chain import PaperChainClient
from shadowmarkets.sources.local import LocalSignalSource
from shadowmarkets.storage.markets import InMemoryMarketsStore

from tests.helpers import NOW, Clock, local_event


def _write_events(path: Path, events, signals: dict) -> None:
    path.write_text(
        json.dumps({"events": [e.to_json_dict() for e in events], "signals": signals})
    )


@pytest.fixture
def runtime(settings: Settings, paper_chain: PaperChainClient, clock: Clock, tmp_path: Path) -> Runtime:
    events_path = tmp_path / "private-events.json"
    _write_events(
        events_path,
        [local_event("ship-v2", expected_yes=True), local_event("launch", expected_yes=False)],
        {"ship-v2": True, "launch": True},
    )
    return Runtime(
        settings=settings,
        source=LocalSignalSource(events_path, clock=clock),
        chain=paper_chain,
        store=InMemoryMarketsStore(),
        alerts=OperatorAlerts(settings),
        clock=clock,
    )


def test_creation_cycle_creates_and_activates(runtime: Runtime, paper_chain: PaperChainClient) -> None:
    result = asyncio.run(run_creation_cycle(runtime))

    assert result.record is not None
    assert result.activation is not None
    assert result.activation_error is None
    assert result.record.event.id == "ship-v2"

    stored = runtime.store.get_market(result.record.market)
    assert stored is not None
    assert stored.settled is False

    account = paper_chain._state["markets"][result.record.market]
    assert account["resolvable"] is True
    assert account["trades"] == [{"side": "yes", "amount": 1_000_000}]


def test_creation_cycle_consumes_each_event_once(runtime: Runtime) -> None:
    async def run():
        return [await run_creation_cycle(runtime) for _ in range(3)]

    first, second, third = asyncio.run(run())

    assert first.record.event.id == "ship-v2"
    assert second.record.event.id == "launch"
    assert third.record is None
    assert len(runtime.store.load_markets()) == 2


def test_activation_failure_keeps_market_record(runtime: Runtime, paper_chain: PaperChainClient) -> None:
    # Enough for the market's initial liquidity but not for the seed trade
    paper_chain._state["balance"] = 1_000_500

    result = asyncio.run(run_creation_cycle(runtime))

    assert result.record is not None
    assert result.activation is None
    assert "seed trade failed" in result.activation_error
    assert runtime.store.get_market(result.record.market) is not None


def test_oracle_cycle_settles_ended_markets(runtime: Runtime, clock: Clock) -> None:
    async def run():
        await run_creation_cycle(runtime)
        await run_creation_cycle(runtime)
        before_end = await run_oracle_cycle(runtime)
        clock.advance(600)
        after_end = await run_oracle_cycle(runtime)
        again = await run_oracle_cycle(runtime)
        return before_end, after_end, again

    before_end, after_end, again = asyncio.run(run())

    assert before_end.pending == 2
    assert before_end.settled == 0
    assert after_end.settled == 2
    assert again.checked == 0

    results = {r.event.id: r.result for r in runtime.store.load_markets()}
    assert results["ship-v2"].yes_winner is True
    assert results["launch"].yes_winner is False
    assert results["ship-v2"].used_llm is False
    assert results["ship-v2"].settled_at_seconds == NOW + 600


def test_oracle_cycle_isolates_failures(runtime: Runtime, clock: Clock) -> None:
    async def run():
        first = await run_creation_cycle(runtime)
        await run_creation_cycle(runtime)
        # Market disappears from the chain: fetch fails for this one only
        runtime.chain._state["markets"].pop(first.record.market)
        clock.advance(600)
        return await run_oracle_cycle(runtime)

    result = asyncio.run(run())

    assert result.checked == 2
    assert result.failed == 1
    assert result.settled == 1
    assert len(runtime.store.unsettled()) == 1


def test_seed_only_reruns_trade(runtime: Runtime, paper_chain: PaperChainClient) -> None:
    async def run():
        created = await run_creation_cycle(runtime)
        signature = await seed_market(runtime, created.record.market, 250_000, seed_only=True)
        return created.record.market, signature

    market, signature = asyncio.run(run())

    assert signature.startswith("papersig_")
    assert paper_chain._state["markets"][market]["trades"][-1] == {"side": "yes", "amount": 250_000}


def test_manual_settlement_with_explicit_outcome(runtime: Runtime, clock: Clock) -> None:
    async def run():
        created = await run_creation_cycle(runtime)
        return created.record.market, await settle_market_manually(runtime, created.record.market, yes_winner=False)

    market, outcome = asyncio.run(run())

    assert isinstance(outcome, Settled)
    assert outcome.yes_winner is False
    assert outcome.reasoning == MANUAL_SETTLEMENT_REASONING
    record = runtime.store.get_market(market)
    assert record.settled is True
    assert record.result.reasoning == MANUAL_SETTLEMENT_REASONING


def test_manual_settlement_unknown_market_needs_outcome(runtime: Runtime) -> None:
    with pytest.raises(ValueError, match="not in the markets file"):
        asyncio.run(settle_market_manually(runtime, "paper_missing"))


def test_manual_settlement_through_oracle(runtime: Runtime, clock: Clock) -> None:
    async def run():
        created = await run_creation_cycle(runtime)
        clock.advance(600)
        return await settle_market_manually(runtime, created.record.market)

    outcome = asyncio.run(run())

    assert isinstance(outcome, Settled)
    assert outcome.yes_winner is True
