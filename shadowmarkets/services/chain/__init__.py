from shadowmarkets.config import Settings

from .client import ChainClient, HttpChainClient
from .config import GatewayConfig
from .exceptions import (
    ChainAuthError,
    ChainError,
    ChainNotFoundError,
    ChainRejectedError,
    InsufficientCollateralError,
)
from .models import (
    CreatedMarket,
    MarketAccount,
    Side,
    TxResult,
    WalletInfo,
    to_base_units,
)
from .paper import PaperChainClient


def create_chain_client(settings: Settings) -> ChainClient:
    chain = settings.chain
    if chain.paper_mode:
        return PaperChainClient(
            balance_base_units=chain.paper_balance_base_units,
            state_path=settings.data_path(chain.paper_state_file),
            activation_window_seconds=settings.market.activation_window_seconds,
        )
    return HttpChainClient(
        GatewayConfig(
            base_url=chain.gateway_url,
            timeout_seconds=chain.timeout_seconds,
            max_retries=chain.max_retries,
        ),
        api_key=settings.chain_api_key,
    )


__all__ = [
    "ChainClient",
    "HttpChainClient",
    "PaperChainClient",
    "create_chain_client",
    "GatewayConfig",
    "ChainAuthError",
    "ChainError",
    "ChainNotFoundError",
    "ChainRejectedError",
    "InsufficientCollateralError",
    "CreatedMarket",
    "MarketAccount",
    "Side",
    "TxResult",
    "WalletInfo",
    "to_base_units",
]
