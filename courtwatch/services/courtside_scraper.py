"""Scraper for Tower Hamlets venues on the Courtside booking system."""
import asyncio
import logging
import random
from typing import Dict, List, Optional

import httpx
from bs4 import BeautifulSoup

from courtwatch.core.venues import COURTSIDE_BASE_URL, VenueConfig
from courtwatch.models.slot import AVAILABLE, BOOKED, CLOSED, COACHING
from courtwatch.services.scraper_client import (
    ScrapedSlot,
    ScrapeError,
    ScraperClient,
    random_user_agent,
)

logger = logging.getLogger(__name__)

BLOCK_MARKERS = ("Access Denied", "403 Forbidden")
MIN_BODY_LENGTH = 100


def browser_headers(user_agent: str, referer: Optional[str] = None) -> Dict[str, str]:
    headers = {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-GB,en;q=0.9,en-US;q=0.8",
        "DNT": "1",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "same-origin" if referer else "none",
        "Sec-Fetch-User": "?1",
        "Cache-Control": "max-age=0",
    }
    if referer:
        headers["Referer"] = referer
    return headers


def parse_courtside_html(html: str, venue_slug: str, date: str) -> List[ScrapedSlot]:
    """
    Parse a Courtside day page into slots.

    Each table row holds a ``th.time`` label and one ``label.court`` per
    court. The court's ``span.button`` carries the status as a class and the
    court name as its own text.
    """
    soup = BeautifulSoup(html, "html.parser")
    slots: List[ScrapedSlot] = []

    for row in soup.select("table tr"):
        time_el = row.select_one("th.time")
        time_label = time_el.get_text(strip=True) if time_el else ""
        if not time_label:
            continue

        for court_label in row.select("label.court"):
            button = court_label.select_one("span.button")
            price_span = court_label.select_one("span.price")

            classes = button.get("class", []) if button else []
            # Court name is the button's own text, without nested spans
            court = ""
            if button is not None:
                court = "".join(button.find_all(string=True, recursive=False)).strip()

            price = None
            if "available" in classes:
                status = AVAILABLE
                price = price_span.get_text(strip=True) if price_span else None
            elif "booked" in classes:
                status = BOOKED
            elif "coaching" in classes or "class" in classes:
                status = COACHING
            else:
                status = CLOSED

            slots.append(
                ScrapedSlot(
                    venue=venue_slug,
                    date=date,
                    time=time_label,
                    court=court or "Unknown",
                    status=status,
                    price=price,
                )
            )

    return slots


class CourtsideScraper(ScraperClient):
    """Client for tennistowerhamlets.com day pages."""

    def __init__(self):
        super().__init__()
        self.base_url = COURTSIDE_BASE_URL

    def page_url(self, venue_slug: str, date: str) -> str:
        return f"{self.base_url}/book/courts/{venue_slug}/{date}"

    async def _fetch_once(self, client: httpx.AsyncClient, url: str) -> str:
        # Visit the homepage first so the day page request carries its cookies
        user_agent = random_user_agent()
        homepage = f"{self.base_url}/"
        await self._request(client, homepage, headers=browser_headers(user_agent))
        await asyncio.sleep(random.uniform(0.5, 1.5))

        response = await self._request(client, url, headers=browser_headers(user_agent, homepage))
        return response.text

    def _check_body(self, body: str):
        if len(body) < MIN_BODY_LENGTH or any(marker in body for marker in BLOCK_MARKERS):
            raise ScrapeError("Blocked or empty response")

    async def scrape(self, venue: VenueConfig, date: str) -> List[ScrapedSlot]:
        """
        Scrape one venue for one date.

        Args:
            venue: Courtside venue
            date: Date in YYYY-MM-DD form

        Returns:
            Slots found on the page
        """
        html = await self.fetch_with_retry(self.page_url(venue.slug, date), venue.slug, date)
        slots = parse_courtside_html(html, venue.slug, date)
        logger.info(f"Parsed {len(slots)} slots for {venue.slug} on {date}")
        return slots


# Singleton instance
courtside_scraper = CourtsideScraper()
