from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol, Self, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .config import GatewayConfig
from .exceptions import (
    ChainAuthError,
    ChainError,
    ChainNotFoundError,
    ChainRejectedError,
    InsufficientCollateralError,
)
from .models import CreatedMarket, MarketAccount, Side, TxResult, WalletInfo

ModelT = TypeVar("ModelT", bound=BaseModel)

logger = logging.getLogger(__name__)


class ChainClient(Protocol):
    """Operations the agents need from the market program."""

    async def __aenter__(self) -> Self: ...

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: Any) -> None: ...

    async def create_market(
        self,
        question: str,
        initial_liquidity_base_units: int,
        end_time_seconds: int,
        collateral_mint: str,
        oracle_address: str,
        yes_odds_bps: int,
    ) -> CreatedMarket: ...

    async def set_market_resolvable(self, market: str, enabled: bool) -> TxResult: ...

    async def buy_tokens(self, market: str, side: Side, amount_base_units: int) -> TxResult: ...

    async def fetch_market(self, market: str) -> MarketAccount: ...

    async def settle_market(self, market: str, yes_winner: bool) -> TxResult: ...

    async def get_wallet(self) -> WalletInfo: ...


class HttpChainClient:
    """Client for the signing gateway that wraps the on-chain program SDK.

    The gateway holds the operator key and submits transactions; this client
    only authenticates with a bearer token. Rate limits (429) are retried for
    every request. Server errors and timeouts are retried for GETs only: a
    retried POST whose first attempt actually landed would create a second
    market or a second trade.
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        api_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or GatewayConfig()
        self.api_key = api_key
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        logger.info(f"Initialized HttpChainClient (gateway={self.config.base_url})")

    async def __aenter__(self) -> HttpChainClient:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("HttpChainClient must be used as async context manager")
        return self._client

    def _raise_for_error(self, response: httpx.Response, endpoint: str) -> None:
        try:
            body = response.json()
        except ValueError:
            body = {}
        detail = body.get("error", response.text) if isinstance(body, dict) else response.text
        code = body.get("code") if isinstance(body, dict) else None
        status = response.status_code

        if status in (401, 403):
            raise ChainAuthError(f"Gateway rejected credentials: {detail}", status_code=status)
        elif status == 404:
            raise ChainNotFoundError(f"Not found: {endpoint}", status_code=status)
        elif status == 402 or code == "insufficient_collateral":
            raise InsufficientCollateralError(f"Insufficient collateral: {detail}", status_code=status)
        elif status in (400, 409, 422):
            raise ChainRejectedError(f"Program rejected {endpoint}: {detail}", status_code=status)
        raise ChainError(f"Gateway returned {status} for {endpoint}: {detail}", status_code=status)

    async def _request(
        self,
        method: str,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        idempotent = method == "GET"
        retry_count = 0
        last_error: Exception | None = None

        while retry_count < self.config.max_retries:
            try:
                response = await self.client.request(method=method, url=endpoint, json=json_data)

                if response.status_code == 429:
                    wait_time = 2 ** retry_count
                    logger.warning(f"Rate limited, waiting {wait_time}s...")
                    await asyncio.sleep(wait_time)
                    last_error = ChainError("Rate limited", status_code=429)
                    retry_count += 1
                    continue
                elif response.status_code >= 500 and idempotent:
                    wait_time = 2 ** retry_count
                    logger.warning(
                        f"Server error {response.status_code}, retrying in {wait_time}s..."
                    )
                    await asyncio.sleep(wait_time)
                    last_error = ChainError(
                        f"Server error {response.status_code}", status_code=response.status_code
                    )
                    retry_count += 1
                    continue
                elif response.status_code >= 400:
                    self._raise_for_error(response, endpoint)

                try:
                    return response.json()
                except ValueError as e:
                    raise ChainError(
                        f"Gateway returned a non-JSON body for {endpoint}",
                        status_code=response.status_code,
                    ) from e

            except httpx.TimeoutException as e:
                if not idempotent:
                    raise ChainError(
                        f"{method} {endpoint} timed out; outcome unknown, not retrying"
                    ) from e
                last_error = e
                retry_count += 1
                if retry_count < self.config.max_retries:
                    logger.warning(f"Timeout, retrying ({retry_count})...")
                    await asyncio.sleep(2)

            except httpx.RequestError as e:
                last_error = e
                logger.error(f"Network error: {e}")
                break

        raise ChainError(f"Request failed after {retry_count} retries: {last_error}")

    async def create_market(
        self,
        question: str,
        initial_liquidity_base_units: int,
        end_time_seconds: int,
        collateral_mint: str,
        oracle_address: str,
        yes_odds_bps: int,
    ) -> CreatedMarket:
        data = await self._request(
            "POST",
            "/markets",
            json_data={
                "question": question,
                "initial_liquidity": str(initial_liquidity_base_units),
                "end_time": end_time_seconds,
                "collateral_mint": collateral_mint,
                "oracle": oracle_address,
                "yes_odds_bps": yes_odds_bps,
            },
        )
        created = _parse(CreatedMarket, data, "/markets")
        logger.info(f"Created market {created.market} (sig={created.signature})")
        return created

    async def set_market_resolvable(self, market: str, enabled: bool) -> TxResult:
        endpoint = f"/markets/{market}/resolvable"
        data = await self._request("POST", endpoint, json_data={"enabled": enabled})
        return _parse(TxResult, data, endpoint)

    async def buy_tokens(self, market: str, side: Side, amount_base_units: int) -> TxResult:
        endpoint = f"/markets/{market}/trades"
        data = await self._request(
            "POST",
            endpoint,
            json_data={"side": side.value, "amount": str(amount_base_units)},
        )
        return _parse(TxResult, data, endpoint)

    async def fetch_market(self, market: str) -> MarketAccount:
        endpoint = f"/markets/{market}"
        data = await self._request("GET", endpoint)
        if isinstance(data, dict):
            data = {"market": market, **data}
        return _parse(MarketAccount, data, endpoint)

    async def settle_market(self, market: str, yes_winner: bool) -> TxResult:
        endpoint = f"/markets/{market}/settle"
        data = await self._request("POST", endpoint, json_data={"yes_winner": yes_winner})
        return _parse(TxResult, data, endpoint)

    async def get_wallet(self) -> WalletInfo:
        data = await self._request("GET", "/wallet")
        return _parse(WalletInfo, data, "/wallet")


def _parse(model: type[ModelT], data: Any, endpoint: str) -> ModelT:
    """Validate a gateway reply; a malformed 2xx body is a ChainError like any other failure."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ChainError(
            f"Unexpected gateway reply for {endpoint}: {e.error_count()} invalid field(s)"
        ) from e
