"""Endpoint for an external cron to trigger scrapes."""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Header, HTTPException

from courtwatch.core.config import settings
from courtwatch.services.scrape_runner import scrape_runner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cron", tags=["cron"])


def verify_cron_secret(authorization: Optional[str]):
    """Deny by default: without CRON_SECRET only DEBUG mode may call."""
    if not settings.CRON_SECRET:
        if settings.DEBUG:
            return
        logger.error("CRON_SECRET is not configured")
        raise HTTPException(status_code=500, detail="Server misconfigured")

    expected = f"Bearer {settings.CRON_SECRET}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.post("/scrape")
async def trigger_scrape(authorization: Optional[str] = Header(default=None)):
    """
    Start a scrape and cleanup run in the background.

    Returns immediately. A second call while a run is in progress gets 409.
    """
    verify_cron_secret(authorization)

    if not scrape_runner.start_background(with_cleanup=True):
        raise HTTPException(status_code=409, detail="Scrape job already running")

    return {"success": True, "message": "Scrape job started"}
