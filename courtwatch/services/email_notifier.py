"""Email delivery through Resend."""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import resend

from courtwatch.core.config import settings
from courtwatch.core.templates import group_changes, render_template
from courtwatch.services.telegram_notifier import NotificationError

logger = logging.getLogger(__name__)


def format_changes_for_email(changes: List[Any]) -> Tuple[str, str]:
    """
    Render slot changes as an email.

    Returns:
        (subject, html)
    """
    if not changes:
        return "", ""

    plural = "s" if len(changes) > 1 else ""
    subject = f"{len(changes)} tennis court{plural} now available"
    html = render_template(
        "emails/slots_available.html",
        slot_count=len(changes),
        groups=group_changes(changes),
    )
    return subject, html


class EmailNotifier:
    """Sends email through Resend."""

    def __init__(self, api_key: Optional[str] = None, sender: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self.sender = sender if sender is not None else settings.EMAIL_FROM

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def send_email(self, to: str, subject: str, html: str) -> Optional[Dict[str, Any]]:
        """
        Send one email.

        The Resend client is synchronous, so the call runs in a worker thread.

        Returns:
            API response, or None when no API key is configured

        Raises:
            NotificationError: If EMAIL_FROM is missing or Resend rejects the message
        """
        if not self.configured:
            logger.warning("RESEND_API_KEY not set, skipping email notification")
            return None

        if not self.sender:
            raise NotificationError("EMAIL_FROM is not set")

        resend.api_key = self.api_key
        params = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        try:
            response = await asyncio.to_thread(resend.Emails.send, params)
        except Exception as e:
            raise NotificationError(f"Resend error: {e}") from e

        logger.info(f"Email sent to {to} - Subject: {subject}")
        return response

    async def notify_admin(self, subject: str, html: str) -> bool:
        """Best-effort email to ADMIN_EMAIL. Never raises."""
        if not settings.ADMIN_EMAIL:
            logger.warning("ADMIN_EMAIL not set, skipping admin email")
            return False
        try:
            await self.send_email(settings.ADMIN_EMAIL, subject, html)
            return True
        except Exception as e:
            logger.error(f"Failed to email admin: {e}", exc_info=True)
            return False


# Singleton instance
email_notifier = EmailNotifier()
