"""Telegram notification service."""

from .client import TelegramClient
from .exceptions import TelegramAuthError, TelegramConfigError, TelegramError
from .models import NotificationResult

__all__ = [
    "TelegramClient",
    "NotificationResult",
    "TelegramError",
    "TelegramAuthError",
    "TelegramConfigError",
]
