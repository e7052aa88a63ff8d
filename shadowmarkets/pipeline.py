"""Poll-tick orchestration: creation -> activation, and the oracle sweep.

Each tick is one unit of work. Tick functions let errors propagate; the job
wrappers log them and the next scheduled tick is the retry.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from pydantic import BaseModel

from shadowmarkets.agents.creation import MarketCreationAgent
from shadowmarkets.agents.liquidity import ActivationError, ActivationResult, LiquidityAgent
from shadowmarkets.agents.oracle import NotSettled, OracleAgent, Settled, SettleOutcome
from shadowmarkets.alerts import OperatorAlerts
from shadowmarkets.config import Settings
from shadowmarkets.llm import LlmOracle, make_llm_oracle
from shadowmarkets.services.chain import ChainClient, create_chain_client, to_base_units
from shadowmarkets.sources import EventSource
from shadowmarkets.sources.factory import make_event_source
from shadowmarkets.storage.markets import (
    CreatedMarketRecord,
    FileMarketsStore,
    MarketsStore,
    SettlementResult,
)
from shadowmarkets.time_utils import now_seconds

logger = logging.getLogger("shadowmarkets.pipeline")

MANUAL_SETTLEMENT_REASONING = "Manual settlement by operator."


@dataclass
class Runtime:
    """Collaborators shared by every tick of one process."""

    settings: Settings
    source: EventSource
    chain: ChainClient
    store: MarketsStore
    alerts: OperatorAlerts
    llm: LlmOracle | None = None
    clock: Callable[[], int] = now_seconds


def build_runtime(settings: Settings) -> Runtime:
    return Runtime(
        settings=settings,
        source=make_event_source(settings),
        chain=create_chain_client(settings),
        store=FileMarketsStore(settings.markets_path),
        alerts=OperatorAlerts(settings),
        llm=make_llm_oracle(settings),
    )


class CreationCycleResult(BaseModel):
    record: CreatedMarketRecord | None = None
    activation: ActivationResult | None = None
    activation_error: str | None = None


class OracleCycleResult(BaseModel):
    checked: int = 0
    settled: int = 0
    pending: int = 0
    refused: int = 0
    failed: int = 0


def _seed_amount_base_units(settings: Settings) -> int:
    return to_base_units(settings.market.seed_trade_amount, settings.chain.collateral_decimals)


def _creation_agent(runtime: Runtime) -> MarketCreationAgent:
    settings = runtime.settings
    return MarketCreationAgent(
        chain=runtime.chain,
        source=runtime.source,
        collateral_mint=settings.chain.collateral_mint,
        initial_liquidity_base_units=settings.market.initial_liquidity_base_units,
        oracle_address=settings.chain.oracle_address or None,
        yes_odds_bps=settings.market.yes_odds_bps,
        clock=runtime.clock,
    )


def _liquidity_agent(runtime: Runtime) -> LiquidityAgent:
    return LiquidityAgent(
        chain=runtime.chain,
        activation_window_seconds=runtime.settings.market.activation_window_seconds,
        clock=runtime.clock,
    )


def _oracle_agent(runtime: Runtime) -> OracleAgent:
    return OracleAgent(
        chain=runtime.chain,
        source=runtime.source,
        llm=runtime.llm,
        unhandled_kind_policy=runtime.settings.oracle.unhandled_kind_policy,
        clock=runtime.clock,
    )


async def run_creation_cycle(runtime: Runtime) -> CreationCycleResult:
    """Create at most one market, persist it, then activate it."""
    async with runtime.chain:
        record = await _creation_agent(runtime).create_next_market(
            runtime.settings.market.default_duration_seconds
        )
        if record is None:
            logger.info("No new events")
            return CreationCycleResult()

        runtime.store.append_market(record)
        await runtime.alerts.market_created(record)

        try:
            activation = await _liquidity_agent(runtime).enable_trading_and_seed(
                record.market,
                _seed_amount_base_units(runtime.settings),
                created_at_seconds=record.created_at_seconds,
            )
        except ActivationError as e:
            logger.error(f"Activation failed for {record.market} (stage={e.stage}): {e}")
            await runtime.alerts.activation_failed(record.market, e)
            return CreationCycleResult(record=record, activation_error=str(e))

    logger.info(f"Market {record.market} created and activated")
    return CreationCycleResult(record=record, activation=activation)


def _settlement_result(outcome: Settled, settled_at_seconds: int) -> SettlementResult:
    return SettlementResult(
        yes_winner=outcome.yes_winner,
        reasoning=outcome.reasoning,
        signature=outcome.signature,
        used_llm=outcome.used_llm,
        settled_at_seconds=settled_at_seconds,
    )


async def run_oracle_cycle(runtime: Runtime) -> OracleCycleResult:
    """One sweep over unsettled markets. A failure on one market does not stop the sweep."""
    result = OracleCycleResult()
    records = runtime.store.unsettled()
    if not records:
        logger.info("No unsettled markets")
        return result

    oracle = _oracle_agent(runtime)
    async with runtime.chain:
        for record in records:
            result.checked += 1
            try:
                outcome = await oracle.settle_if_ready(record.market, record.event)
            except Exception as e:
                logger.error(f"Settlement attempt failed for {record.market}: {e}")
                result.failed += 1
                continue

            if isinstance(outcome, Settled):
                settlement = _settlement_result(outcome, runtime.clock())
                runtime.store.mark_settled(record.market, settlement)
                await runtime.alerts.market_settled(record.market, settlement)
                result.settled += 1
            elif outcome.refused:
                await runtime.alerts.oracle_refused(record.market, outcome.reason)
                result.refused += 1
            else:
                logger.debug(f"{record.market}: {outcome.reason}")
                result.pending += 1

    logger.info(
        f"Oracle sweep: checked={result.checked} settled={result.settled} "
        f"pending={result.pending} refused={result.refused} failed={result.failed}"
    )
    return result


async def seed_market(
    runtime: Runtime,
    market: str,
    amount_base_units: int | None = None,
    seed_only: bool = False,
) -> ActivationResult | str:
    """Manual activation, or re-run of the seed trade for an activated-but-unseeded market."""
    amount = amount_base_units or _seed_amount_base_units(runtime.settings)
    liquidity = _liquidity_agent(runtime)
    async with runtime.chain:
        if seed_only:
            return await liquidity.seed_only(market, amount)
        record = runtime.store.get_market(market)
        return await liquidity.enable_trading_and_seed(
            market,
            amount,
            created_at_seconds=record.created_at_seconds if record else None,
        )


async def settle_market_manually(
    runtime: Runtime,
    market: str,
    yes_winner: bool | None = None,
    wait: bool = False,
    poll_seconds: float = 10.0,
) -> SettleOutcome:
    """Settle one market now, through the oracle or with an explicit outcome.

    Markets not in the markets file have no event to decide from, so they
    need ``yes_winner``.
    """
    record = runtime.store.get_market(market)
    if record is None and yes_winner is None:
        raise ValueError(f"Market {market} is not in the markets file; pass an explicit outcome")

    async with runtime.chain:
        if wait:
            account = await runtime.chain.fetch_market(market)
            while not account.resolved and runtime.clock() < account.end_time:
                remaining = account.end_time - runtime.clock()
                logger.info(f"Waiting {remaining}s for {market} to end")
                await asyncio.sleep(min(max(remaining, 1), poll_seconds))
                account = await runtime.chain.fetch_market(market)

        if yes_winner is None:
            outcome = await _oracle_agent(runtime).settle_if_ready(market, record.event)
        else:
            account = await runtime.chain.fetch_market(market)
            if account.resolved:
                return NotSettled(reason="Market already resolved on-chain.")
            tx = await runtime.chain.settle_market(market, yes_winner)
            outcome = Settled(
                signature=tx.signature,
                yes_winner=yes_winner,
                reasoning=MANUAL_SETTLEMENT_REASONING,
                used_llm=False,
            )

    if isinstance(outcome, Settled) and record is not None:
        runtime.store.mark_settled(market, _settlement_result(outcome, runtime.clock()))
    return outcome


def creation_job(runtime: Runtime) -> None:
    """Scheduler job wrapper for one creation tick."""
    try:
        result = asyncio.run(run_creation_cycle(runtime))
        if result.record:
            logger.info(
                f"Creation tick: market={result.record.market} "
                f"activated={result.activation is not None}"
            )
    except Exception as exc:
        logger.error(f"Creation tick failed: {exc}", exc_info=True)


def oracle_job(runtime: Runtime) -> None:
    """Scheduler job wrapper for one oracle sweep."""
    try:
        asyncio.run(run_oracle_cycle(runtime))
    except Exception as exc:
        logger.error(f"Oracle tick failed: {exc}", exc_info=True)
