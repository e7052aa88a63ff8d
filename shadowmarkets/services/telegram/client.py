"""Telegram client for operator alerts."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from telegram import Bot
from telegram.constants import ParseMode
from telegram.error import TelegramError as BotError

from .exceptions import TelegramAuthError, TelegramConfigError
from .models import NotificationResult

logger = logging.getLogger(__name__)


class TelegramClient:
    def __init__(self, bot_token: str, default_chat_id: str | None = None):
        if not bot_token:
            raise TelegramConfigError("bot_token is required")
        self.bot_token = bot_token
        self.default_chat_id = default_chat_id
        self._bot: Bot | None = None

    async def __aenter__(self) -> TelegramClient:
        bot = Bot(token=self.bot_token)
        try:
            await bot.initialize()
        except BotError as e:
            logger.error(f"Failed to initialize Telegram bot: {e}")
            raise TelegramAuthError(f"Invalid bot token: {e}") from e
        self._bot = bot
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._bot:
            await self._bot.shutdown()
            self._bot = None

    @property
    def bot(self) -> Bot:
        if self._bot is None:
            raise RuntimeError("TelegramClient must be used as async context manager")
        return self._bot

    async def send_alert(self, message: str, chat_id: str | None = None) -> NotificationResult:
        """Send an HTML message with a single retry."""
        target_chat_id = chat_id or self.default_chat_id
        if not target_chat_id:
            raise TelegramConfigError("chat_id is required")

        retry_count = 0
        last_error: str | None = None

        for attempt in range(2):
            try:
                sent = await self.bot.send_message(
                    chat_id=target_chat_id,
                    text=message,
                    parse_mode=ParseMode.HTML,
                )
                logger.info(f"Alert sent to {target_chat_id} (message_id: {sent.message_id})")
                return NotificationResult(
                    success=True,
                    message_id=sent.message_id,
                    recipient=target_chat_id,
                    retry_count=retry_count,
                )

            except BotError as e:
                last_error = e.message or "Telegram error"
                logger.warning(f"Telegram send failed (attempt {attempt + 1}/2): {last_error}")

            if attempt == 0:
                await asyncio.sleep(2)
                retry_count = 1

        return NotificationResult(
            success=False,
            recipient=target_chat_id,
            error=last_error or "Message send failed",
            retry_count=retry_count,
        )
