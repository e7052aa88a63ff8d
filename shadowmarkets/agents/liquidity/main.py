"""Liquidity Agent: makes new markets resolvable and seeds the first trade.

Custom-oracle markets must be activated within a short window after creation
or the program will never let them resolve.
"""

from __future__ import annotations

import logging
from typing import Callable

from shadowmarkets.services.chain import ChainClient, ChainError, Side
from shadowmarkets.time_utils import now_seconds

from .exceptions import ActivationError, MarketUnrecoverableError
from .models import ActivationResult

logger = logging.getLogger(__name__)


class LiquidityAgent:
    def __init__(
        self,
        chain: ChainClient,
        activation_window_seconds: int = 900,
        clock: Callable[[], int] = now_seconds,
    ):
        self.chain = chain
        self.activation_window_seconds = activation_window_seconds
        self.clock = clock

    def _window_elapsed(self, created_at_seconds: int | None) -> bool:
        if created_at_seconds is None:
            return False
        return self.clock() > created_at_seconds + self.activation_window_seconds

    async def enable_trading_and_seed(
        self,
        market: str,
        seed_amount_base_units: int,
        created_at_seconds: int | None = None,
    ) -> ActivationResult:
        try:
            enabled = await self.chain.set_market_resolvable(market, True)
        except ChainError as e:
            if self._window_elapsed(created_at_seconds):
                raise MarketUnrecoverableError(
                    f"Could not enable {market} and the {self.activation_window_seconds}s "
                    f"activation window has elapsed; treat the market as void: {e}",
                    market=market,
                ) from e
            raise ActivationError(
                f"Failed to enable trading on {market}: {e}", market=market, stage="enable"
            ) from e

        logger.info(f"Enabled trading on {market} (sig={enabled.signature})")

        try:
            trade_signature = await self.seed_only(market, seed_amount_base_units)
        except ChainError as e:
            raise ActivationError(
                f"Market {market} is enabled but the seed trade failed; retry the seed only: {e}",
                market=market,
                stage="seed",
                enable_signature=enabled.signature,
            ) from e

        return ActivationResult(
            market=market,
            enable_signature=enabled.signature,
            trade_signature=trade_signature,
        )

    async def seed_only(self, market: str, seed_amount_base_units: int) -> str:
        """Place the YES seed trade on an already-enabled market."""
        trade = await self.chain.buy_tokens(market, Side.YES, seed_amount_base_units)
        logger.info(f"Seeded {market} with {seed_amount_base_units} base units YES (sig={trade.signature})")
        return trade.signature
