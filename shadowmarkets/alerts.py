"""Best-effort operator alerts over Telegram.

Alerts never raise: a failed or misconfigured alert is logged and the tick
carries on.
"""

from __future__ import annotations

import html
import logging
from typing import Callable

from shadowmarkets.config import Settings
from shadowmarkets.services.telegram import NotificationResult, TelegramClient
from shadowmarkets.storage.markets import CreatedMarketRecord, SettlementResult
from shadowmarkets.time_utils import format_seconds

logger = logging.getLogger(__name__)


class OperatorAlerts:
    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[[], TelegramClient] | None = None,
    ):
        self.settings = settings
        self._client_factory = client_factory
        self._refused_markets: set[str] = set()

    @property
    def enabled(self) -> bool:
        return bool(
            self._client_factory
            or (self.settings.telegram_bot_token and self.settings.telegram_chat_id)
        )

    def _make_client(self) -> TelegramClient:
        if self._client_factory is not None:
            return self._client_factory()
        return TelegramClient(
            bot_token=self.settings.telegram_bot_token,
            default_chat_id=self.settings.telegram_chat_id,
        )

    async def _send(self, message: str) -> NotificationResult | None:
        if not self.enabled:
            return None
        try:
            async with self._make_client() as client:
                result = await client.send_alert(message)
        except Exception as e:
            logger.warning(f"Failed to send operator alert: {e}")
            return None
        if not result.success:
            logger.warning(f"Operator alert not delivered: {result}")
        return result

    async def market_created(self, record: CreatedMarketRecord) -> NotificationResult | None:
        if not self.settings.telegram.send_creation_alerts:
            return None
        return await self._send(
            f"🆕 <b>Market created</b>\n{html.escape(record.question)}\n\n"
            f"<code>{record.market}</code>\nEnds {format_seconds(record.end_time_seconds)}"
        )

    async def activation_failed(self, market: str, error: Exception) -> NotificationResult | None:
        if not self.settings.telegram.send_activation_alerts:
            return None
        return await self._send(
            f"⚠️ <b>Activation failed</b>\n<code>{market}</code>\n\n{html.escape(str(error))}"
        )

    async def market_settled(self, market: str, result: SettlementResult) -> NotificationResult | None:
        if not self.settings.telegram.send_settlement_alerts:
            return None
        winner = "YES" if result.yes_winner else "NO"
        source = "LLM" if result.used_llm else "rule"
        return await self._send(
            f"✅ <b>Settled {winner}</b> ({source})\n<code>{market}</code>\n\n"
            f"{html.escape(result.reasoning)}"
        )

    async def oracle_refused(self, market: str, reason: str) -> NotificationResult | None:
        """Alert once per market per process; the oracle retries refused markets every sweep."""
        if not self.settings.telegram.send_settlement_alerts or market in self._refused_markets:
            return None
        self._refused_markets.add(market)
        return await self._send(
            f"🛑 <b>Settlement refused</b>\n<code>{market}</code>\n\n{html.escape(reason)}"
        )
