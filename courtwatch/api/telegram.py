"""Telegram bot webhook."""
import logging

from fastapi import APIRouter, HTTPException, Request

from courtwatch.core.templates import render_template
from courtwatch.services.telegram_notifier import telegram_notifier

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/telegram", tags=["telegram"])


@router.post("/webhook")
async def telegram_webhook(request: Request):
    """
    Reply to any message with the sender's chat id.

    Users paste that id into a Telegram notification channel. Updates that
    carry no message are acknowledged and ignored.
    """
    if not telegram_notifier.configured:
        raise HTTPException(status_code=500, detail="Telegram bot not configured")

    try:
        update = await request.json()
        message = update.get("message")
        if not message:
            return {"ok": True}

        chat = message["chat"]
        chat_id = chat["id"]
        first_name = chat.get("first_name") or "there"

        text = render_template("telegram/chat_id.html", first_name=first_name, chat_id=chat_id)
        await telegram_notifier.send_message(str(chat_id), text)
        return {"ok": True}

    except Exception as e:
        logger.error(f"Telegram webhook error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Webhook processing failed")
