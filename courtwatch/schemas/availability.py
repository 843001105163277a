"""Availability schemas."""
from datetime import datetime
from typing import List, Optional

from courtwatch.schemas.base import CamelModel


class VenueSummary(CamelModel):
    """Venue display data."""

    slug: str
    name: str


class SlotOut(CamelModel):
    """A slot projected for the availability view."""

    time: str
    court: str
    status: str  # available, booked, closed, coaching
    price: Optional[str] = None


class AvailabilityResponse(CamelModel):
    """Slots of one venue on one date."""

    venue: VenueSummary
    date: str
    slots: List[SlotOut]
    last_updated: Optional[datetime] = None

