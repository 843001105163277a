"""Telegram Bot API client."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from courtwatch.core.config import settings
from courtwatch.core.templates import group_changes, render_template

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """A notification provider rejected a message."""


def format_changes_for_telegram(changes: List[Any]) -> str:
    """Render slot changes as a Telegram HTML message grouped by venue and date."""
    if not changes:
        return ""
    return render_template("telegram/slots_available.html", groups=group_changes(changes))


class TelegramNotifier:
    """Sends messages through the Telegram Bot API."""

    def __init__(self, token: Optional[str] = None):
        self.token = token if token is not None else settings.TELEGRAM_BOT_TOKEN
        self.api_base_url = settings.TELEGRAM_API_BASE_URL

    @property
    def configured(self) -> bool:
        return bool(self.token)

    async def send_message(self, chat_id: str, text: str) -> Optional[Dict[str, Any]]:
        """
        Send an HTML message to a chat.

        Returns:
            API response, or None when no bot token is configured

        Raises:
            NotificationError: If the API rejects the message or answers with a non-JSON body
        """
        if not self.configured:
            logger.warning("TELEGRAM_BOT_TOKEN not set, skipping Telegram notification")
            return None

        url = f"{self.api_base_url}/bot{self.token}/sendMessage"
        async with httpx.AsyncClient() as client:
            response = await client.post(
                url,
                json={"chat_id": chat_id, "text": text, "parse_mode": "HTML"},
                timeout=15.0,
            )

        if response.status_code >= 400:
            raise NotificationError(f"Telegram API error: {response.text}")
        try:
            return response.json()
        except ValueError:
            raise NotificationError(f"Telegram API returned a non-JSON body: {response.text[:200]}")


# Singleton instance
telegram_notifier = TelegramNotifier()
