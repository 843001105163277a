"""Tests for slot storage and change detection."""
import pytest
from sqlalchemy import select

from courtwatch.models import Slot
from courtwatch.services.differ import store_and_diff
from courtwatch.services.scraper_client import ScrapedSlot

DATE = "2025-01-15"


def scraped(status, time="7am", court="Court 1", price=None, venue="victoria-park"):
    return ScrapedSlot(venue=venue, date=DATE, time=time, court=court, status=status, price=price)


@pytest.mark.asyncio
async def test_first_sighting_is_stored_silently(db_session, venues):
    result = await store_and_diff(db_session, [scraped("available", price="£10.00"), scraped("booked", time="8am")])

    assert result.changes == []
    assert result.added == 2
    assert result.updated == 0

    rows = (await db_session.execute(select(Slot).order_by(Slot.time))).scalars().all()
    assert [(r.time, r.status, r.price) for r in rows] == [("7am", "available", "£10.00"), ("8am", "booked", None)]


@pytest.mark.asyncio
async def test_booked_to_available_is_a_change(db_session, venues):
    await store_and_diff(db_session, [scraped("booked"), scraped("closed", court="Court 2")])

    result = await store_and_diff(
        db_session,
        [scraped("available", price="£8.40"), scraped("available", court="Court 2", price="£8.40")],
    )

    assert result.updated == 2
    assert [(c.court, c.old_status, c.new_status, c.price) for c in result.changes] == [
        ("Court 1", "booked", "available", "£8.40"),
        ("Court 2", "closed", "available", "£8.40"),
    ]
    change = result.changes[0]
    assert change.venue_name == "Victoria Park"
    assert change.key == "victoria-park:2025-01-15:7am:Court 1"


@pytest.mark.asyncio
async def test_no_change_when_status_stays_or_closes(db_session, venues):
    await store_and_diff(db_session, [scraped("available"), scraped("booked", time="8am")])

    result = await store_and_diff(db_session, [scraped("available"), scraped("coaching", time="8am")])

    assert result.changes == []
    row = (await db_session.execute(select(Slot).where(Slot.time == "8am"))).scalar_one()
    assert row.status == "coaching"


@pytest.mark.asyncio
async def test_unknown_venue_is_skipped(db_session, venues):
    result = await store_and_diff(db_session, [scraped("available", venue="atlantis")])

    assert result.added == 0
    assert (await db_session.execute(select(Slot))).scalars().all() == []


@pytest.mark.asyncio
async def test_duplicate_slot_in_batch_is_stored_once(db_session, venues):
    result = await store_and_diff(db_session, [scraped("booked"), scraped("available")])

    assert result.added == 1
    assert result.updated == 1
    rows = (await db_session.execute(select(Slot))).scalars().all()
    assert len(rows) == 1
    assert rows[0].status == "available"
    assert result.changes == []
