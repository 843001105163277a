"""Slot persistence and change detection."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.core.venues import get_venue
from courtwatch.models.slot import AVAILABLE, Slot
from courtwatch.models.venue import Venue
from courtwatch.services.scraper_client import ScrapedSlot

logger = logging.getLogger(__name__)


def slot_key(venue: str, date: str, time: str, court: str) -> str:
    return f"{venue}:{date}:{time}:{court}"


@dataclass
class SlotChange:
    """A slot that has just become available."""

    venue: str
    venue_name: str
    date: str
    time: str
    court: str
    old_status: Optional[str]
    new_status: str
    price: Optional[str] = None

    @property
    def key(self) -> str:
        return slot_key(self.venue, self.date, self.time, self.court)


@dataclass
class DiffResult:
    changes: List[SlotChange] = field(default_factory=list)
    added: int = 0
    updated: int = 0


async def store_and_diff(db: AsyncSession, scraped: Iterable[ScrapedSlot]) -> DiffResult:
    """
    Upsert scraped slots and report which ones opened up.

    A change is emitted only when a slot that was already known with a
    non-available status is now available. First sightings are stored
    silently.

    Args:
        db: Database session
        scraped: Slots from one or more scrapes

    Returns:
        DiffResult with changes and added/updated counts
    """
    result = DiffResult()

    by_venue: Dict[str, List[ScrapedSlot]] = {}
    for slot in scraped:
        by_venue.setdefault(slot.venue, []).append(slot)

    for venue_slug, venue_slots in by_venue.items():
        venue_row = (
            await db.execute(select(Venue).where(Venue.slug == venue_slug))
        ).scalar_one_or_none()
        if venue_row is None:
            logger.warning(f"Skipping {len(venue_slots)} slots for unknown venue {venue_slug}")
            continue

        config = get_venue(venue_slug)
        venue_name = config.name if config else venue_row.name

        dates = {s.date for s in venue_slots}
        existing_rows = (
            await db.execute(
                select(Slot).where(Slot.venue_id == venue_row.id, Slot.date.in_(dates))
            )
        ).scalars().all()
        existing = {(row.date, row.time, row.court): row for row in existing_rows}
        first_seen = set()

        now = datetime.utcnow()
        for scraped_slot in venue_slots:
            ident = (scraped_slot.date, scraped_slot.time, scraped_slot.court)
            row = existing.get(ident)
            old_status = row.status if row is not None else None

            if (
                scraped_slot.status == AVAILABLE
                and old_status is not None
                and old_status != AVAILABLE
                and ident not in first_seen
            ):
                result.changes.append(
                    SlotChange(
                        venue=venue_slug,
                        venue_name=venue_name,
                        date=scraped_slot.date,
                        time=scraped_slot.time,
                        court=scraped_slot.court,
                        old_status=old_status,
                        new_status=scraped_slot.status,
                        price=scraped_slot.price,
                    )
                )

            if row is not None:
                row.status = scraped_slot.status
                row.price = scraped_slot.price
                row.updated_at = now
                result.updated += 1
            else:
                row = Slot(
                    venue_id=venue_row.id,
                    date=scraped_slot.date,
                    time=scraped_slot.time,
                    court=scraped_slot.court,
                    status=scraped_slot.status,
                    price=scraped_slot.price,
                    updated_at=now,
                )
                db.add(row)
                # Same slot twice in one batch updates the new row
                existing[ident] = row
                first_seen.add(ident)
                result.added += 1

    await db.commit()
    logger.info(
        f"Stored slots: {result.added} added, {result.updated} updated, "
        f"{len(result.changes)} newly available"
    )
    return result
