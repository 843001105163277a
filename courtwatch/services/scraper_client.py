"""Shared HTTP plumbing for the booking-system scrapers.

Both booking systems are public websites run by small operators, so every
request goes through the same politeness delay and retry loop.
"""
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Dict, Optional

import httpx

from courtwatch.core.config import settings

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENTS = [
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_2) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
]


class ScrapeError(Exception):
    """A venue page could not be fetched or understood."""


@dataclass
class ScrapedSlot:
    venue: str
    date: str
    time: str
    court: str
    status: str
    price: Optional[str] = None

    @property
    def key(self) -> str:
        return f"{self.venue}:{self.date}:{self.time}:{self.court}"


def random_user_agent() -> str:
    return random.choice(DESKTOP_USER_AGENTS)


class ScraperClient:
    """Base client with rate limiting and retry logic."""

    retry_delay_base = 2.0

    def __init__(self):
        self.request_delay = settings.REQUEST_DELAY_SECONDS
        self.max_retries = settings.MAX_RETRIES
        self.timeout = settings.REQUEST_TIMEOUT_SECONDS
        self._last_request_time = 0.0

    async def _rate_limit(self):
        """Implement rate limiting with politeness delay."""
        current_time = asyncio.get_running_loop().time()
        time_since_last_request = current_time - self._last_request_time

        if time_since_last_request < self.request_delay:
            await asyncio.sleep(self.request_delay - time_since_last_request)

        self._last_request_time = asyncio.get_running_loop().time()

    async def _request(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Single GET, raising for non-2xx responses."""
        await self._rate_limit()
        response = await client.get(url, headers=headers, timeout=self.timeout)
        response.raise_for_status()
        return response

    async def _backoff(self, attempt: int):
        # 2s, 4s, 8s...
        await asyncio.sleep(self.retry_delay_base * (2 ** attempt))

    async def fetch_with_retry(self, url: str, venue_slug: str, date: str) -> str:
        """
        Fetch a page, retrying with exponential backoff.

        Args:
            url: Page URL
            venue_slug: Venue being scraped, for logging
            date: Date being scraped, for logging

        Returns:
            Response body

        Raises:
            ScrapeError: If every attempt failed
        """
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                logger.info(
                    f"Fetching {venue_slug} for {date} (attempt {attempt + 1}/{self.max_retries})"
                )
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    body = await self._fetch_once(client, url)
                self._check_body(body)
                return body

            except (httpx.HTTPError, ScrapeError) as e:
                last_error = e
                logger.warning(
                    f"Attempt {attempt + 1}/{self.max_retries} failed for {venue_slug}: {e}"
                )
                if attempt < self.max_retries - 1:
                    await self._backoff(attempt)

        raise ScrapeError(
            f"Failed after {self.max_retries} attempts for {url}: {last_error}"
        )

    async def _fetch_once(self, client: httpx.AsyncClient, url: str) -> str:
        response = await self._request(client, url, headers={"User-Agent": random_user_agent()})
        return response.text

    def _check_body(self, body: str):
        """Hook for rejecting block pages that come back with a 200."""
        return None
