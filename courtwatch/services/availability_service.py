"""Availability service for reading slot data."""
import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.core.venues import VENUES
from courtwatch.models.slot import Slot
from courtwatch.models.venue import Venue
from courtwatch.schemas.availability import AvailabilityResponse, SlotOut, VenueSummary

logger = logging.getLogger(__name__)


class NotFoundError(ValueError):
    """A referenced row does not exist."""


class AvailabilityService:
    """Service for managing venues and their slots."""

    async def get_venue_by_slug(self, db: AsyncSession, slug: str) -> Optional[Venue]:
        result = await db.execute(select(Venue).where(Venue.slug == slug))
        return result.scalar_one_or_none()

    async def ensure_venues_exist(self, db: AsyncSession) -> int:
        """
        Insert any catalogue venue missing from the database.

        Returns:
            Number of venues created
        """
        result = await db.execute(select(Venue.slug))
        existing = set(result.scalars().all())

        created = 0
        for venue in VENUES:
            if venue.slug not in existing:
                db.add(Venue(slug=venue.slug, name=venue.name))
                created += 1

        if created:
            await db.commit()
            logger.info(f"Created {created} venues")
        return created

    async def get_availability(
        self,
        db: AsyncSession,
        venue_slug: str,
        date: str,
    ) -> AvailabilityResponse:
        """
        Get every slot of a venue on a date.

        Args:
            db: Database session
            venue_slug: Venue slug
            date: Date in YYYY-MM-DD form

        Returns:
            AvailabilityResponse in storage order

        Raises:
            NotFoundError: If the slug does not resolve to a venue
        """
        venue = await self.get_venue_by_slug(db, venue_slug)
        if venue is None:
            raise NotFoundError("Venue not found")

        result = await db.execute(
            select(Slot).where(Slot.venue_id == venue.id, Slot.date == date)
        )
        slots: List[Slot] = result.scalars().all()

        result = await db.execute(
            select(func.max(Slot.updated_at)).where(Slot.venue_id == venue.id)
        )
        last_updated = result.scalar()

        return AvailabilityResponse(
            venue=VenueSummary(slug=venue.slug, name=venue.name),
            date=date,
            slots=[
                SlotOut(time=s.time, court=s.court, status=s.status, price=s.price)
                for s in slots
            ],
            last_updated=last_updated,
        )


# Singleton instance
availability_service = AvailabilityService()
