"""Tests for the availability and venue endpoints."""
from datetime import datetime
from unittest.mock import AsyncMock

import pytest

from courtwatch.models import Slot, Venue
from courtwatch.services import availability_service as availability_module


@pytest.mark.asyncio
async def test_missing_parameters_return_400(client, monkeypatch):
    spy = AsyncMock()
    monkeypatch.setattr(availability_module.availability_service, "get_availability", spy)

    for query in ["", "?venue=victoria-park", "?date=2025-01-15", "?venue=&date=2025-01-15"]:
        response = await client.get(f"/api/availability{query}")
        assert response.status_code == 400
        assert response.json() == {"error": "Missing venue or date parameter"}

    spy.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_venue_returns_404_without_reading_slots(client, venues, monkeypatch):
    selected = []
    real_select = availability_module.select

    def recording_select(*entities):
        selected.append(entities)
        return real_select(*entities)

    monkeypatch.setattr(availability_module, "select", recording_select)

    response = await client.get("/api/availability?venue=nowhere&date=2025-01-15")

    assert response.status_code == 404
    assert response.json() == {"error": "Venue not found"}
    assert selected == [(Venue,)]


@pytest.mark.asyncio
async def test_returns_slots_for_venue_and_date(client, venues, session_factory):
    venue = venues["victoria-park"]
    updated = datetime(2025, 1, 14, 9, 30)
    async with session_factory() as session:
        session.add_all(
            [
                Slot(venue_id=venue.id, date="2025-01-15", time="7am", court="Court 1",
                     status="available", price="£10.00", updated_at=updated),
                Slot(venue_id=venue.id, date="2025-01-15", time="8am", court="Court 1",
                     status="booked", updated_at=updated),
                Slot(venue_id=venue.id, date="2025-01-16", time="7am", court="Court 1",
                     status="closed", updated_at=updated),
            ]
        )
        await session.commit()

    response = await client.get("/api/availability?venue=victoria-park&date=2025-01-15")

    assert response.status_code == 200
    data = response.json()
    assert data["venue"] == {"slug": "victoria-park", "name": "Victoria Park"}
    assert data["date"] == "2025-01-15"
    assert data["slots"] == [
        {"time": "7am", "court": "Court 1", "status": "available", "price": "£10.00"},
        {"time": "8am", "court": "Court 1", "status": "booked", "price": None},
    ]
    assert data["lastUpdated"].startswith("2025-01-14T09:30")


@pytest.mark.asyncio
async def test_venue_without_slots_returns_empty_list(client, venues):
    response = await client.get("/api/availability?venue=wapping-gardens&date=2025-01-15")

    assert response.status_code == 200
    data = response.json()
    assert data["slots"] == []
    assert data["lastUpdated"] is None


@pytest.mark.asyncio
async def test_list_venues(client):
    response = await client.get("/api/venues")

    assert response.status_code == 200
    venues = response.json()["venues"]
    assert len(venues) == 10
    west_ham = next(v for v in venues if v["slug"] == "west-ham-park")
    assert west_ham["type"] == "clubspark"
    assert west_ham["clubsparkId"] == "WestHamPark"
