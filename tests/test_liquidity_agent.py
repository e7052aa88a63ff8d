"""Tests for market activation and seeding."""

import asyncio

import httpx
import pytest

from shadowmarkets.agents.liquidity import (
    ActivationError,
    LiquidityAgent,
    MarketUnrecoverableError,
)
from shadowmarkets.services.chain import (
    ChainRejectedError,
    GatewayConfig,
    HttpChainClient,
    PaperChainClient,
    Side,
)

from tests.helpers import NOW, Clock


async def _new_market(chain: PaperChainClient) -> str:
    created = await chain.create_market("Q?", 1_000_000, NOW + 3600, "USDC", "oracle", 5000)
    return created.market


def test_enables_then_seeds_yes(paper_chain: PaperChainClient, clock: Clock) -> None:
    agent = LiquidityAgent(paper_chain, activation_window_seconds=900, clock=clock)

    async def run():
        market = await _new_market(paper_chain)
        result = await agent.enable_trading_and_seed(market, 250_000, created_at_seconds=NOW)
        return market, result

    market, result = asyncio.run(run())

    assert result.enable_signature
    assert result.trade_signature
    account = paper_chain._state["markets"][market]
    assert account["resolvable"] is True
    assert account["trades"] == [{"side": Side.YES.value, "amount": 250_000}]


def test_seed_failure_leaves_market_enabled(clock: Clock) -> None:
    chain = PaperChainClient(balance_base_units=1_000_100, clock=clock)
    agent = LiquidityAgent(chain, clock=clock)

    async def run():
        market = await _new_market(chain)
        try:
            await agent.enable_trading_and_seed(market, 5_000, created_at_seconds=NOW)
        except ActivationError as e:
            return market, e
        raise AssertionError("expected ActivationError")

    market, error = asyncio.run(run())

    assert error.stage == "seed"
    assert error.enable_signature
    assert not isinstance(error, MarketUnrecoverableError)
    assert chain._state["markets"][market]["resolvable"] is True


def test_seed_only_recovers_unseeded_market(clock: Clock) -> None:
    chain = PaperChainClient(balance_base_units=1_000_100, clock=clock)
    agent = LiquidityAgent(chain, clock=clock)

    async def run():
        market = await _new_market(chain)
        with pytest.raises(ActivationError):
            await agent.enable_trading_and_seed(market, 5_000)
        chain._state["balance"] += 10_000
        return await agent.seed_only(market, 5_000)

    assert asyncio.run(run()).startswith("papersig_")


def test_enable_failure_within_window(paper_chain: PaperChainClient, clock: Clock) -> None:
    agent = LiquidityAgent(paper_chain, clock=clock)

    with pytest.raises(ActivationError) as excinfo:
        asyncio.run(agent.enable_trading_and_seed("missing", 1000, created_at_seconds=NOW))

    assert excinfo.value.stage == "enable"
    assert not isinstance(excinfo.value, MarketUnrecoverableError)


def test_enable_failure_after_window_is_unrecoverable(paper_chain: PaperChainClient, clock: Clock) -> None:
    agent = LiquidityAgent(paper_chain, activation_window_seconds=900, clock=clock)

    async def run():
        market = await _new_market(paper_chain)
        clock.advance(901)
        await agent.enable_trading_and_seed(market, 1000, created_at_seconds=NOW)

    with pytest.raises(MarketUnrecoverableError) as excinfo:
        asyncio.run(run())
    assert isinstance(excinfo.value.__cause__, ChainRejectedError)


def test_garbled_gateway_reply_is_activation_error(clock: Clock) -> None:
    chain = HttpChainClient(
        GatewayConfig(base_url="https://gateway.test"),
        api_key="secret",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>proxy ok</html>")),
    )
    agent = LiquidityAgent(chain, activation_window_seconds=900, clock=clock)

    async def run():
        async with chain:
            await agent.enable_trading_and_seed("Mkt111", 1_000_000, created_at_seconds=NOW)

    with pytest.raises(ActivationError) as exc_info:
        asyncio.run(run())

    assert exc_info.value.stage == "enable"
    assert not isinstance(exc_info.value, MarketUnrecoverableError)
