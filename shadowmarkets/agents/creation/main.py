"""Market Creation Agent: turns the next private event into a market."""

from __future__ import annotations

import logging
from typing import Callable

from shadowmarkets.services.chain import ChainClient
from shadowmarkets.sources import EventSource
from shadowmarkets.storage.markets import CreatedMarketRecord
from shadowmarkets.time_utils import format_seconds, now_seconds

logger = logging.getLogger(__name__)

DEFAULT_YES_ODDS_BPS = 5000


class MarketCreationAgent:
    def __init__(
        self,
        chain: ChainClient,
        source: EventSource,
        collateral_mint: str,
        initial_liquidity_base_units: int,
        oracle_address: str | None = None,
        yes_odds_bps: int | None = None,
        clock: Callable[[], int] = now_seconds,
    ):
        self.chain = chain
        self.source = source
        self.collateral_mint = collateral_mint
        self.initial_liquidity_base_units = initial_liquidity_base_units
        self.oracle_address = oracle_address
        self.yes_odds_bps = yes_odds_bps or DEFAULT_YES_ODDS_BPS
        self.clock = clock

    async def _resolve_oracle_address(self) -> str:
        if not self.oracle_address:
            wallet = await self.chain.get_wallet()
            self.oracle_address = wallet.address
        return self.oracle_address

    async def create_next_market(self, default_duration_seconds: int) -> CreatedMarketRecord | None:
        """Create a market for the next unseen event.

        The returned record is not persisted. Chain errors propagate; the event
        has already been consumed and will not be offered again.
        """
        event = await self.source.next_event()
        if event is None:
            return None

        now = self.clock()
        if event.end_time_seconds > now:
            effective_end = event.end_time_seconds
        else:
            effective_end = now + default_duration_seconds
            logger.info(
                f"Event {event.id} end time is past; using {format_seconds(effective_end)}"
            )

        oracle_address = await self._resolve_oracle_address()
        created = await self.chain.create_market(
            question=event.question,
            initial_liquidity_base_units=self.initial_liquidity_base_units,
            end_time_seconds=effective_end,
            collateral_mint=self.collateral_mint,
            oracle_address=oracle_address,
            yes_odds_bps=self.yes_odds_bps,
        )

        logger.info(f"Created market {created.market} for event {event.id}")
        return CreatedMarketRecord(
            market=created.market,
            signature=created.signature,
            created_at_seconds=self.clock(),
            end_time_seconds=effective_end,
            question=event.question,
            event=event.model_copy(update={"end_time_seconds": effective_end}),
        )
