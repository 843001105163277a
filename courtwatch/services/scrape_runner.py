"""End-to-end scrape run: fetch, store, diff, notify."""
import asyncio
import logging
import traceback
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

import pytz
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.core.config import settings
from courtwatch.core.database import AsyncSessionLocal, vacuum
from courtwatch.core.templates import render_template
from courtwatch.core.venues import CLUBSPARK, COURTSIDE, VENUES, VenueConfig
from courtwatch.models.notification_log import NotificationLogEntry
from courtwatch.models.scraping_log import (
    STATUS_FAILURE,
    STATUS_PARTIAL,
    STATUS_RUNNING,
    STATUS_SUCCESS,
    ScrapingLog,
)
from courtwatch.models.slot import Slot
from courtwatch.models.venue import Venue
from courtwatch.services.availability_service import availability_service
from courtwatch.services.clubspark_scraper import clubspark_scraper
from courtwatch.services.courtside_scraper import courtside_scraper
from courtwatch.services.differ import SlotChange, store_and_diff
from courtwatch.services.email_notifier import email_notifier
from courtwatch.services.notifier import notify_users

logger = logging.getLogger(__name__)

# Percentage of failed venues that triggers an admin alert
FAILURE_ALERT_THRESHOLD = 20.0


class ScrapeAlreadyRunning(RuntimeError):
    """A scrape run is already in progress in this process."""


@dataclass
class ScrapeSummary:
    venues_success: int = 0
    venues_failed: int = 0
    slots_scraped: int = 0
    changes: int = 0
    notifications_sent: int = 0
    duration_ms: int = 0
    failed_venues: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return asdict(self)


def next_dates(days: int, now_utc: Optional[datetime] = None) -> List[str]:
    """Today and the following days, as London calendar dates."""
    now_utc = now_utc or datetime.utcnow()
    today = now_utc.replace(tzinfo=pytz.UTC).astimezone(pytz.timezone(settings.TIMEZONE)).date()
    return [(today + timedelta(days=i)).isoformat() for i in range(days)]


async def cleanup_old_data(db: AsyncSession, days: int) -> Dict[str, int]:
    """
    Delete slots dated before the cutoff and notification log rows sent before it.

    Returns:
        Deleted row counts
    """
    cutoff = datetime.utcnow() - timedelta(days=days)
    cutoff_date = cutoff.date().isoformat()

    deleted_slots = await db.execute(delete(Slot).where(Slot.date < cutoff_date))
    deleted_logs = await db.execute(
        delete(NotificationLogEntry).where(NotificationLogEntry.sent_at < cutoff)
    )
    await db.commit()

    counts = {"deletedSlots": deleted_slots.rowcount or 0, "deletedLogs": deleted_logs.rowcount or 0}
    logger.info(
        f"Cleanup before {cutoff_date}: {counts['deletedSlots']} slots, "
        f"{counts['deletedLogs']} notification log rows"
    )
    return counts


class ScrapeRunner:
    """Runs scrapes one at a time and records a ScrapingLog per venue."""

    def __init__(self, session_factory: Callable[[], AsyncSession] = AsyncSessionLocal):
        self.session_factory = session_factory
        self.scrapers = {COURTSIDE: courtside_scraper, CLUBSPARK: clubspark_scraper}
        self.is_running = False
        self._task: Optional[asyncio.Task] = None

    async def _scrape_venue(
        self, db: AsyncSession, venue: VenueConfig, venue_id: Optional[int], dates: List[str]
    ) -> Tuple[ScrapingLog, List[SlotChange]]:
        """
        Scrape one venue for every date and store the results.

        Failures while storing or diffing mark the log as failed; the log is
        always closed with an end time.
        """
        started = datetime.utcnow()
        log = ScrapingLog(
            venue_id=venue_id,
            scraper_type=venue.type,
            status=STATUS_RUNNING,
            start_time=started,
        )
        db.add(log)
        await db.commit()

        slots = []
        changes: List[SlotChange] = []
        failed_dates: List[str] = []
        errors: List[str] = []
        last_stack = None
        scraper = self.scrapers[venue.type]

        try:
            for date in dates:
                try:
                    slots.extend(await scraper.scrape(venue, date))
                except Exception as e:
                    logger.error(f"Error scraping {venue.slug} {date}: {e}")
                    failed_dates.append(date)
                    errors.append(f"{date}: {e}")
                    last_stack = traceback.format_exc()

            diff = await store_and_diff(db, slots)
            changes = diff.changes
            log.slots_added = diff.added
            log.slots_updated = diff.updated

            if not failed_dates:
                log.status = STATUS_SUCCESS
            elif len(failed_dates) == len(dates):
                log.status = STATUS_FAILURE
            else:
                log.status = STATUS_PARTIAL
        except Exception as e:
            logger.error(f"Error storing results for {venue.slug}: {e}", exc_info=True)
            # Rollback expires the log, reload it before closing it out
            await db.rollback()
            await db.refresh(log)
            changes = []
            log.status = STATUS_FAILURE
            log.slots_added = 0
            log.slots_updated = 0
            errors.append(f"store: {e}")
            last_stack = traceback.format_exc()
        finally:
            ended = datetime.utcnow()
            log.end_time = ended
            log.duration_ms = int((ended - started).total_seconds() * 1000)
            log.slots_found = len(slots)
            log.error_message = "\n".join(errors) or None
            log.error_stack = last_stack
            log.run_metadata = {"venue": venue.slug, "dates": dates, "failedDates": failed_dates}
            await db.commit()

        return log, changes

    async def run_scrape(self, days_ahead: Optional[int] = None) -> ScrapeSummary:
        """
        Scrape every venue for the coming days, store results and notify.

        Args:
            days_ahead: Number of London dates to cover, today included

        Returns:
            ScrapeSummary for the run

        Raises:
            ScrapeAlreadyRunning: If another run is in progress
        """
        if self.is_running:
            raise ScrapeAlreadyRunning("Scrape job already running")

        self.is_running = True
        started = datetime.utcnow()
        summary = ScrapeSummary()
        try:
            dates = next_dates(days_ahead or settings.SCRAPE_DAYS_AHEAD)
            logger.info(f"Starting scrape of {len(VENUES)} venues for {len(dates)} dates")

            async with self.session_factory() as db:
                await availability_service.ensure_venues_exist(db)
                venue_ids = {
                    slug: venue_id
                    for venue_id, slug in (await db.execute(select(Venue.id, Venue.slug))).all()
                }

                changes: List[SlotChange] = []
                for venue in VENUES:
                    log, venue_changes = await self._scrape_venue(
                        db, venue, venue_ids.get(venue.slug), dates
                    )
                    changes.extend(venue_changes)
                    summary.slots_scraped += log.slots_found
                    if log.status == STATUS_FAILURE:
                        summary.venues_failed += 1
                        summary.failed_venues.append(venue.slug)
                    else:
                        summary.venues_success += 1

                summary.changes = len(changes)
                logger.info(f"Detected {len(changes)} newly available slots")

                if changes:
                    summary.notifications_sent = await notify_users(db, changes)

            summary.duration_ms = int((datetime.utcnow() - started).total_seconds() * 1000)
            logger.info(
                f"Scrape finished in {summary.duration_ms}ms: "
                f"{summary.venues_success} venues ok, {summary.venues_failed} failed"
            )
            await self._alert_on_failures(summary)
            return summary
        finally:
            self.is_running = False

    async def _alert_on_failures(self, summary: ScrapeSummary):
        total = summary.venues_success + summary.venues_failed
        failure_rate = summary.venues_failed / total * 100 if total else 0.0
        if failure_rate < FAILURE_ALERT_THRESHOLD:
            return

        await email_notifier.notify_admin(
            f"Scrape Alert: {failure_rate:.0f}% Failure Rate",
            render_template(
                "emails/scrape_alert.html",
                failed=summary.venues_failed,
                total=total,
                failed_venues=summary.failed_venues,
            ),
        )

    async def run_scheduled(self):
        """Scrape, then prune old data. Used by the cron endpoint and the scheduler."""
        try:
            await self.run_scrape()
        except ScrapeAlreadyRunning:
            logger.warning("Skipping scheduled scrape, previous run still in progress")
            return
        except Exception as e:
            logger.error(f"Scrape job failed: {e}", exc_info=True)
            return

        try:
            async with self.session_factory() as db:
                await cleanup_old_data(db, settings.CLEANUP_DAYS)
            await vacuum()
        except Exception as e:
            logger.error(f"Cleanup failed: {e}", exc_info=True)

    def start_background(self, with_cleanup: bool = False) -> bool:
        """
        Start a run on the event loop without waiting for it.

        Returns:
            False if a run is already in progress
        """
        if self.is_running or (self._task is not None and not self._task.done()):
            return False

        coro = self.run_scheduled() if with_cleanup else self._run_logged()
        self._task = asyncio.create_task(coro)
        return True

    async def _run_logged(self):
        try:
            await self.run_scrape()
        except Exception as e:
            logger.error(f"Manual scrape failed: {e}", exc_info=True)


# Singleton instance
scrape_runner = ScrapeRunner()
