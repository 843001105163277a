"""Tests for the scrape run orchestration."""
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from courtwatch.core.venues import CLUBSPARK, COURTSIDE, VENUES
from courtwatch.models import ScrapingLog, Slot
from courtwatch.services import scrape_runner as runner_module
from courtwatch.services.scrape_runner import ScrapeAlreadyRunning, ScrapeRunner, next_dates
from courtwatch.services.scraper_client import ScrapedSlot, ScrapeError


class FakeScraper:
    def __init__(self, status="booked", error=None):
        self.status = status
        self.error = error
        self.calls = []

    async def scrape(self, venue, date):
        self.calls.append((venue.slug, date))
        if self.error:
            raise self.error
        return [ScrapedSlot(venue=venue.slug, date=date, time="7am", court="Court 1", status=self.status)]


@pytest.fixture
def runner(session_factory):
    runner = ScrapeRunner(session_factory=session_factory)
    runner.scrapers = {COURTSIDE: FakeScraper(), CLUBSPARK: FakeScraper(error=ScrapeError("blocked"))}
    return runner


@pytest.fixture
def notify_admin(monkeypatch):
    spy = AsyncMock(return_value=True)
    monkeypatch.setattr(runner_module.email_notifier, "notify_admin", spy)
    return spy


def test_next_dates_follow_london_calendar():
    assert next_dates(3, datetime(2025, 7, 1, 23, 30)) == ["2025-07-02", "2025-07-03", "2025-07-04"]
    assert next_dates(1, datetime(2025, 1, 1, 23, 30)) == ["2025-01-01"]


@pytest.mark.asyncio
async def test_run_scrape_records_logs_and_alerts(runner, session_factory, notify_admin):
    summary = await runner.run_scrape(days_ahead=2)

    courtside_count = sum(1 for v in VENUES if v.type == COURTSIDE)
    clubspark_count = len(VENUES) - courtside_count
    assert summary.venues_success == courtside_count
    assert summary.venues_failed == clubspark_count
    assert summary.slots_scraped == courtside_count * 2
    assert summary.changes == 0
    assert sorted(summary.failed_venues) == sorted(v.slug for v in VENUES if v.type == CLUBSPARK)
    assert runner.is_running is False

    async with session_factory() as session:
        logs = (await session.execute(select(ScrapingLog))).scalars().all()
        assert len(logs) == len(VENUES)
        failed = [log for log in logs if log.status == "failure"]
        assert len(failed) == clubspark_count
        assert all("blocked" in log.error_message for log in failed)
        assert all(len(log.run_metadata["failedDates"]) == 2 for log in failed)
        assert len((await session.execute(select(Slot))).scalars().all()) == courtside_count * 2

    # 3 of 10 venues failed
    notify_admin.assert_awaited_once()
    assert "30% Failure Rate" in notify_admin.await_args.args[0]


@pytest.mark.asyncio
async def test_second_run_notifies_newly_available(runner, notify_admin, monkeypatch):
    notify = AsyncMock(return_value=4)
    monkeypatch.setattr(runner_module, "notify_users", notify)

    await runner.run_scrape(days_ahead=1)
    notify.assert_not_called()

    runner.scrapers[COURTSIDE] = FakeScraper(status="available")
    summary = await runner.run_scrape(days_ahead=1)

    changes = notify.await_args.args[1]
    assert summary.changes == len(changes) == sum(1 for v in VENUES if v.type == COURTSIDE)
    assert summary.notifications_sent == 4


@pytest.mark.asyncio
async def test_partial_failure(runner, session_factory, notify_admin):
    class FlakyScraper(FakeScraper):
        async def scrape(self, venue, date):
            if date == dates[1]:
                raise ScrapeError("timeout")
            return await super().scrape(venue, date)

    dates = next_dates(2)
    runner.scrapers = {COURTSIDE: FlakyScraper(), CLUBSPARK: FlakyScraper()}

    summary = await runner.run_scrape(days_ahead=2)

    assert summary.venues_failed == 0
    notify_admin.assert_not_called()
    async with session_factory() as session:
        statuses = set((await session.execute(select(ScrapingLog.status))).scalars().all())
        assert statuses == {"partial"}


@pytest.mark.asyncio
async def test_store_failure_closes_venue_log_and_continues(runner, session_factory, notify_admin, monkeypatch):
    runner.scrapers = {COURTSIDE: FakeScraper(), CLUBSPARK: FakeScraper()}
    real_store_and_diff = runner_module.store_and_diff
    calls = []

    async def flaky_store_and_diff(db, slots):
        calls.append(len(slots))
        if len(calls) == 1:
            raise RuntimeError("database is locked")
        return await real_store_and_diff(db, slots)

    monkeypatch.setattr(runner_module, "store_and_diff", flaky_store_and_diff)

    summary = await runner.run_scrape(days_ahead=1)

    assert len(calls) == len(VENUES)
    assert summary.venues_failed == 1
    assert summary.failed_venues == [VENUES[0].slug]
    assert summary.venues_success == len(VENUES) - 1
    assert runner.is_running is False

    async with session_factory() as session:
        logs = (await session.execute(select(ScrapingLog).order_by(ScrapingLog.id))).scalars().all()
        assert len(logs) == len(VENUES)
        assert all(log.end_time is not None for log in logs)
        assert all(log.status != "running" for log in logs)

        failed = logs[0]
        assert failed.status == "failure"
        assert "database is locked" in failed.error_message
        assert "RuntimeError" in failed.error_stack
        assert failed.duration_ms is not None
        assert failed.slots_found == 1
        assert failed.slots_added == 0

        stored = (await session.execute(select(Slot.venue_id))).scalars().all()
        assert len(stored) == len(VENUES) - 1
@pytest.mark.asyncio
async def test_run_scrape_refuses_concurrent_runs(runner):
    runner.is_running = True

    with pytest.raises(ScrapeAlreadyRunning):
        await runner.run_scrape()

    assert runner.start_background() is False


@pytest.mark.asyncio
async def test_run_scheduled_swallows_scrape_failures(runner, monkeypatch):
    monkeypatch.setattr(runner, "run_scrape", AsyncMock(side_effect=RuntimeError("db down")))
    cleanup = AsyncMock()
    monkeypatch.setattr(runner_module, "cleanup_old_data", cleanup)

    await runner.run_scheduled()

    cleanup.assert_not_called()


@pytest.mark.asyncio
async def test_run_scheduled_cleans_up_after_scrape(runner, monkeypatch):
    monkeypatch.setattr(runner, "run_scrape", AsyncMock())
    cleanup = AsyncMock(return_value={"deletedSlots": 0, "deletedLogs": 0})
    vacuum = AsyncMock()
    monkeypatch.setattr(runner_module, "cleanup_old_data", cleanup)
    monkeypatch.setattr(runner_module, "vacuum", vacuum)

    await runner.run_scheduled()

    cleanup.assert_awaited_once()
    vacuum.assert_awaited_once()
