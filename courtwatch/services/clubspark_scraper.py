"""Scraper for LTA ClubSpark venues."""
import json
import logging
from typing import Any, Dict, List

import httpx

from courtwatch.core.venues import VenueConfig
from courtwatch.models.slot import AVAILABLE, BOOKED, COACHING
from courtwatch.services.scraper_client import (
    ScrapedSlot,
    ScrapeError,
    ScraperClient,
    random_user_agent,
)

logger = logging.getLogger(__name__)

CATEGORY_AVAILABLE = 0
CATEGORY_BOOKING = 1000
DEFAULT_PRICE = "£10.00"


def hour_label(hour: int) -> str:
    """Render an hour as the 12-hour label Courtside pages use."""
    if hour == 0:
        return "12am"
    if hour < 12:
        return f"{hour}am"
    if hour == 12:
        return "12pm"
    return f"{hour - 12}pm"


def parse_clubspark_sessions(data: Dict[str, Any], venue_slug: str, date: str) -> List[ScrapedSlot]:
    """
    Expand a GetVenueSessions payload into hourly slots per court.

    Hours run from EarliestStartTime to LatestEndTime (minutes past
    midnight). A session covering the hour decides its status; an hour with
    no session is open for booking at the default price.
    """
    slots: List[ScrapedSlot] = []
    start_hour = int(data.get("EarliestStartTime", 0)) // 60
    end_hour = int(data.get("LatestEndTime", 0)) // 60

    for resource in data.get("Resources") or []:
        court = resource.get("Name") or "Unknown"
        sessions: List[Dict[str, Any]] = []
        for day in resource.get("Days") or []:
            if str(day.get("Date", "")).startswith(date):
                sessions = day.get("Sessions") or []
                break

        for hour in range(start_hour, end_hour):
            minutes = hour * 60
            session = next(
                (s for s in sessions if s.get("StartTime", 0) <= minutes < s.get("EndTime", 0)),
                None,
            )

            price = None
            if session is None:
                status = AVAILABLE
                price = DEFAULT_PRICE
            elif session.get("Category") == CATEGORY_AVAILABLE:
                status = AVAILABLE
                total = float(session.get("CourtCost") or 0) + float(session.get("LightingCost") or 0)
                price = f"£{total:.2f}"
            elif session.get("Category") == CATEGORY_BOOKING:
                status = BOOKED
            else:
                status = COACHING

            slots.append(
                ScrapedSlot(
                    venue=venue_slug,
                    date=date,
                    time=hour_label(hour),
                    court=court,
                    status=status,
                    price=price,
                )
            )

    return slots


class ClubSparkScraper(ScraperClient):
    """Client for the ClubSpark venue sessions endpoint."""

    def sessions_url(self, venue: VenueConfig, date: str) -> str:
        return (
            f"https://{venue.clubspark_host}/v0/VenueBooking/{venue.clubspark_id}"
            f"/GetVenueSessions?resourceID=&startDate={date}&endDate={date}&roleId="
        )

    async def _fetch_once(self, client: httpx.AsyncClient, url: str) -> str:
        origin = str(httpx.URL(url).copy_with(path="/", query=None)).rstrip("/")
        headers = {
            "User-Agent": random_user_agent(),
            "Accept": "application/json, text/plain, */*",
            "Accept-Language": "en-GB,en;q=0.9,en-US;q=0.8",
            "Origin": origin,
            "Referer": f"{origin}/Booking/BookByDate",
            "Sec-Fetch-Dest": "empty",
            "Sec-Fetch-Mode": "cors",
            "Sec-Fetch-Site": "same-origin",
            "X-Requested-With": "XMLHttpRequest",
        }
        response = await self._request(client, url, headers=headers)
        return response.text

    async def scrape(self, venue: VenueConfig, date: str) -> List[ScrapedSlot]:
        """
        Scrape one venue for one date.

        Raises:
            ScrapeError: If the venue lacks ClubSpark config or the payload is not JSON
        """
        if not venue.clubspark_host or not venue.clubspark_id:
            raise ScrapeError(f"Venue {venue.slug} missing ClubSpark config")

        body = await self.fetch_with_retry(self.sessions_url(venue, date), venue.slug, date)
        try:
            data = json.loads(body)
        except ValueError as e:
            raise ScrapeError(f"Invalid JSON from {venue.slug}: {e}")

        slots = parse_clubspark_sessions(data, venue.slug, date)
        logger.info(f"Parsed {len(slots)} slots for {venue.slug} on {date}")
        return slots


# Singleton instance
clubspark_scraper = ClubSparkScraper()
