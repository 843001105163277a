"""Background scheduler for periodic scraping."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from courtwatch.core.config import settings
from courtwatch.services.scrape_runner import ScrapeRunner, scrape_runner

logger = logging.getLogger(__name__)


class ScrapeScheduler:
    """Runs the scrape job on a fixed interval."""

    def __init__(self, runner: ScrapeRunner = scrape_runner, interval_minutes: int = None):
        """Initialize the scheduler."""
        self.runner = runner
        self.interval_minutes = interval_minutes or settings.SCRAPE_INTERVAL_MINUTES
        self.scheduler = AsyncIOScheduler()
        self.running = False

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        logger.info(f"Starting scrape scheduler (every {self.interval_minutes} minutes)")

        self.scheduler.add_job(
            self._run_job,
            IntervalTrigger(minutes=self.interval_minutes),
            id="scrape_job",
            name="Scrape venues and notify users",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self.scheduler.start()
        self.running = True
        logger.info("Scrape scheduler started")

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping scrape scheduler")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Scrape scheduler stopped")

    async def _run_job(self):
        logger.debug("Running scheduled scrape")
        await self.runner.run_scheduled()


# Singleton instance
scrape_scheduler = ScrapeScheduler()
