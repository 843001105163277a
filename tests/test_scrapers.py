"""Tests for the booking page parsers and the retry loop."""
from unittest.mock import AsyncMock

import httpx
import pytest

from courtwatch.core.venues import get_venue
from courtwatch.services.clubspark_scraper import ClubSparkScraper, hour_label, parse_clubspark_sessions
from courtwatch.services.courtside_scraper import CourtsideScraper, parse_courtside_html
from courtwatch.services.scraper_client import ScrapeError

COURTSIDE_HTML = """
<html><body>
<table class="book">
  <tr><th></th><th>Court 1</th><th>Court 2</th></tr>
  <tr>
    <th class="time">7am</th>
    <td><label class="court"><span class="button available">Court 1<span class="price">£8.40</span></span></label></td>
    <td><label class="court"><span class="button booked">Court 2</span></label></td>
  </tr>
  <tr>
    <th class="time">8am</th>
    <td><label class="court"><span class="button class">Court 1</span></label></td>
    <td><label class="court"><span class="button">Court 2</span></label></td>
  </tr>
  <tr>
    <th class="time">9am</th>
    <td><label class="court"><span class="button coaching"><span class="price">£0</span></span></label></td>
  </tr>
</table>
</body></html>
"""

CLUBSPARK_SESSIONS = {
    "EarliestStartTime": 420,
    "LatestEndTime": 660,
    "Resources": [
        {
            "Name": "Court 1",
            "Days": [
                {"Date": "2025-01-14T00:00:00", "Sessions": [{"StartTime": 420, "EndTime": 660, "Category": 1000}]},
                {
                    "Date": "2025-01-15T00:00:00",
                    "Sessions": [
                        {"StartTime": 420, "EndTime": 480, "Category": 1000},
                        {"StartTime": 480, "EndTime": 540, "Category": 0, "CourtCost": 6.5, "LightingCost": 2},
                        {"StartTime": 540, "EndTime": 600, "Category": 2000},
                    ],
                },
            ],
        },
        {"Name": "Court 2", "Days": []},
    ],
}


def test_parse_courtside_html():
    slots = parse_courtside_html(COURTSIDE_HTML, "victoria-park", "2025-01-15")

    assert [(s.time, s.court, s.status, s.price) for s in slots] == [
        ("7am", "Court 1", "available", "£8.40"),
        ("7am", "Court 2", "booked", None),
        ("8am", "Court 1", "coaching", None),
        ("8am", "Court 2", "closed", None),
        ("9am", "Unknown", "coaching", None),
    ]
    assert all(s.venue == "victoria-park" and s.date == "2025-01-15" for s in slots)


def test_parse_courtside_html_without_table():
    assert parse_courtside_html("<html><body><p>No courts</p></body></html>", "victoria-park", "2025-01-15") == []


@pytest.mark.parametrize("hour,label", [(0, "12am"), (7, "7am"), (11, "11am"), (12, "12pm"), (13, "1pm"), (21, "9pm")])
def test_hour_label(hour, label):
    assert hour_label(hour) == label


def test_parse_clubspark_sessions():
    slots = parse_clubspark_sessions(CLUBSPARK_SESSIONS, "west-ham-park", "2025-01-15")

    court_1 = [(s.time, s.status, s.price) for s in slots if s.court == "Court 1"]
    assert court_1 == [
        ("7am", "booked", None),
        ("8am", "available", "£8.50"),
        ("9am", "coaching", None),
        ("10am", "available", "£10.00"),
    ]

    court_2 = [(s.time, s.status, s.price) for s in slots if s.court == "Court 2"]
    assert court_2 == [(t, "available", "£10.00") for t in ["7am", "8am", "9am", "10am"]]


def test_clubspark_sessions_url():
    url = ClubSparkScraper().sessions_url(get_venue("west-ham-park"), "2025-01-15")

    assert url.startswith("https://clubspark.lta.org.uk/v0/VenueBooking/WestHamPark/GetVenueSessions?")
    assert "startDate=2025-01-15&endDate=2025-01-15" in url


@pytest.mark.asyncio
async def test_clubspark_scrape_rejects_invalid_json(monkeypatch):
    scraper = ClubSparkScraper()
    monkeypatch.setattr(scraper, "fetch_with_retry", AsyncMock(return_value="<html>maintenance</html>"))

    with pytest.raises(ScrapeError):
        await scraper.scrape(get_venue("west-ham-park"), "2025-01-15")


@pytest.mark.asyncio
async def test_clubspark_scrape_requires_config():
    with pytest.raises(ScrapeError):
        await ClubSparkScraper().scrape(get_venue("victoria-park"), "2025-01-15")


@pytest.mark.asyncio
async def test_retry_recovers_after_failures(monkeypatch):
    scraper = CourtsideScraper()
    scraper.max_retries = 3
    backoff = AsyncMock()
    monkeypatch.setattr(scraper, "_backoff", backoff)
    monkeypatch.setattr(
        scraper,
        "_fetch_once",
        AsyncMock(side_effect=[httpx.ConnectError("refused"), "<html>Access Denied</html>", COURTSIDE_HTML]),
    )

    body = await scraper.fetch_with_retry(scraper.page_url("victoria-park", "2025-01-15"), "victoria-park", "2025-01-15")

    assert body == COURTSIDE_HTML
    assert [c.args for c in backoff.await_args_list] == [(0,), (1,)]


@pytest.mark.asyncio
async def test_retry_gives_up(monkeypatch):
    scraper = CourtsideScraper()
    scraper.max_retries = 2
    monkeypatch.setattr(scraper, "_backoff", AsyncMock())
    fetch = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
    monkeypatch.setattr(scraper, "_fetch_once", fetch)

    with pytest.raises(ScrapeError):
        await scraper.fetch_with_retry("https://example.com", "victoria-park", "2025-01-15")

    assert fetch.await_count == 2


def test_courtside_rejects_block_pages():
    scraper = CourtsideScraper()

    with pytest.raises(ScrapeError):
        scraper._check_body("too short")
    with pytest.raises(ScrapeError):
        scraper._check_body("<html>" + "x" * 200 + "403 Forbidden</html>")

    scraper._check_body(COURTSIDE_HTML)
