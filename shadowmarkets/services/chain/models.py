from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class Side(StrEnum):
    YES = "yes"
    NO = "no"


class CreatedMarket(BaseModel):
    market: str
    signature: str


class TxResult(BaseModel):
    signature: str


class MarketAccount(BaseModel):
    """On-chain market state. Program fields beyond these are kept as extras."""

    model_config = ConfigDict(extra="allow")

    market: str
    question: str = ""
    end_time: int
    resolvable: bool = False
    resolved: bool = False
    yes_winner: bool | None = None


class WalletInfo(BaseModel):
    address: str
    collateral_balance_base_units: int = 0


def to_base_units(amount: float | str | Decimal, decimals: int) -> int:
    """Convert whole collateral units to integer base units, rounding down."""
    scaled = Decimal(str(amount)) * (Decimal(10) ** decimals)
    return int(scaled.quantize(Decimal(1), rounding=ROUND_DOWN))
