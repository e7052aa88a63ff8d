"""Simulated market program for dry runs and tests.

State lives in memory, or in a JSON file when ``state_path`` is given so that
separate creation and oracle processes see the same markets. The simulation
enforces the rules the agents depend on: collateral balance, the activation
window, and settlement only once on a resolvable market. No pricing curve is
modelled; trades just move collateral into the market.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable
from uuid import uuid4

from shadowmarkets.storage.jsonfile import read_json, write_json_atomic
from shadowmarkets.time_utils import now_seconds

from .exceptions import (
    ChainNotFoundError,
    ChainRejectedError,
    InsufficientCollateralError,
)
from .models import CreatedMarket, MarketAccount, Side, TxResult, WalletInfo

logger = logging.getLogger(__name__)

PAPER_WALLET_ADDRESS = "paper-operator"


class PaperChainClient:
    def __init__(
        self,
        balance_base_units: int = 1_000_000_000,
        state_path: Path | None = None,
        activation_window_seconds: int | None = 900,
        clock: Callable[[], int] = now_seconds,
    ):
        self.state_path = state_path
        self.activation_window_seconds = activation_window_seconds
        self.clock = clock
        self._state: dict[str, Any] = {"balance": balance_base_units, "markets": {}}
        if state_path is not None:
            self._state = read_json(state_path, default=self._state)

        logger.info(
            f"Initialized PaperChainClient (balance={self._state['balance']}, "
            f"persist={'yes' if state_path else 'no'})"
        )

    async def __aenter__(self) -> PaperChainClient:
        self._reload()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> None:
        return None

    def _reload(self) -> None:
        if self.state_path is not None:
            self._state = read_json(self.state_path, default=self._state)

    def _save(self) -> None:
        if self.state_path is not None:
            write_json_atomic(self.state_path, self._state)

    def _market(self, market: str) -> dict[str, Any]:
        self._reload()
        account = self._state["markets"].get(market)
        if account is None:
            raise ChainNotFoundError(f"Market {market} not found", status_code=404)
        return account

    @staticmethod
    def _signature() -> str:
        return f"papersig_{uuid4().hex}"

    def _debit(self, amount: int) -> None:
        if amount <= 0:
            raise ChainRejectedError(f"Amount must be positive, got {amount}")
        if amount > self._state["balance"]:
            raise InsufficientCollateralError(
                f"Insufficient collateral: need {amount}, have {self._state['balance']}"
            )
        self._state["balance"] -= amount

    async def create_market(
        self,
        question: str,
        initial_liquidity_base_units: int,
        end_time_seconds: int,
        collateral_mint: str,
        oracle_address: str,
        yes_odds_bps: int,
    ) -> CreatedMarket:
        self._reload()
        now = self.clock()
        if end_time_seconds <= now:
            raise ChainRejectedError(f"End time {end_time_seconds} is not in the future")
        if not 0 < yes_odds_bps < 10_000:
            raise ChainRejectedError(f"yes_odds_bps out of range: {yes_odds_bps}")

        self._debit(initial_liquidity_base_units)
        market = f"paper_{uuid4().hex[:16]}"
        self._state["markets"][market] = {
            "question": question,
            "end_time": end_time_seconds,
            "created_at": now,
            "collateral_mint": collateral_mint,
            "oracle": oracle_address,
            "yes_odds_bps": yes_odds_bps,
            "liquidity": initial_liquidity_base_units,
            "resolvable": False,
            "resolved": False,
            "yes_winner": None,
            "trades": [],
        }
        self._save()
        logger.info(f"[PAPER] Created market {market}: {question}")
        return CreatedMarket(market=market, signature=self._signature())

    async def set_market_resolvable(self, market: str, enabled: bool) -> TxResult:
        account = self._market(market)
        if account["resolved"]:
            raise ChainRejectedError(f"Market {market} is already resolved")
        if (
            enabled
            and not account["resolvable"]
            and self.activation_window_seconds is not None
            and self.clock() > account["created_at"] + self.activation_window_seconds
        ):
            raise ChainRejectedError(
                f"Activation window of {self.activation_window_seconds}s elapsed for {market}"
            )
        account["resolvable"] = enabled
        self._save()
        logger.info(f"[PAPER] Market {market} resolvable={enabled}")
        return TxResult(signature=self._signature())

    async def buy_tokens(self, market: str, side: Side, amount_base_units: int) -> TxResult:
        account = self._market(market)
        if not account["resolvable"]:
            raise ChainRejectedError(f"Market {market} is not open for trading")
        if account["resolved"]:
            raise ChainRejectedError(f"Market {market} is already resolved")

        self._debit(amount_base_units)
        account["liquidity"] += amount_base_units
        account["trades"].append({"side": side.value, "amount": amount_base_units})
        self._save()
        logger.info(f"[PAPER] Bought {amount_base_units} {side.value.upper()} on {market}")
        return TxResult(signature=self._signature())

    async def fetch_market(self, market: str) -> MarketAccount:
        account = self._market(market)
        return MarketAccount(
            market=market,
            question=account["question"],
            end_time=account["end_time"],
            resolvable=account["resolvable"],
            resolved=account["resolved"],
            yes_winner=account["yes_winner"],
        )

    async def settle_market(self, market: str, yes_winner: bool) -> TxResult:
        account = self._market(market)
        if account["resolved"]:
            raise ChainRejectedError(f"Market {market} is already resolved")
        if not account["resolvable"]:
            raise ChainRejectedError(f"Market {market} was never made resolvable")

        account["resolved"] = True
        account["yes_winner"] = yes_winner
        self._save()
        logger.info(f"[PAPER] Settled {market}: {'YES' if yes_winner else 'NO'}")
        return TxResult(signature=self._signature())

    async def get_wallet(self) -> WalletInfo:
        self._reload()
        return WalletInfo(
            address=PAPER_WALLET_ADDRESS,
            collateral_balance_base_units=self._state["balance"],
        )
