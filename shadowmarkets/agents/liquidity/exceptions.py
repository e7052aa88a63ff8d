from typing import Literal


class ActivationError(Exception):
    """Enabling or seeding a new market failed.

    ``stage="seed"`` means the market is activated but unseeded; retrying the
    seed trade alone recovers it.
    """

    def __init__(
        self,
        message: str,
        market: str,
        stage: Literal["enable", "seed"],
        enable_signature: str | None = None,
    ):
        super().__init__(message)
        self.market = market
        self.stage = stage
        self.enable_signature = enable_signature


class MarketUnrecoverableError(ActivationError):
    """Enabling failed after the activation window closed; the market is void."""

    def __init__(self, message: str, market: str):
        super().__init__(message, market=market, stage="enable")
