"""Tests for the cron trigger."""
from unittest.mock import MagicMock

import pytest

from courtwatch.core.config import settings
from courtwatch.services.scrape_runner import scrape_runner

CRON_HEADERS = {"Authorization": "Bearer test-cron-secret"}


@pytest.fixture
def start_background(monkeypatch):
    spy = MagicMock(return_value=True)
    monkeypatch.setattr(scrape_runner, "start_background", spy)
    return spy


@pytest.mark.asyncio
async def test_cron_rejects_wrong_secret(client, start_background):
    for headers in [{}, {"Authorization": "Bearer wrong"}, {"Authorization": "test-cron-secret"}]:
        response = await client.post("/api/cron/scrape", headers=headers)
        assert response.status_code == 401

    start_background.assert_not_called()


@pytest.mark.asyncio
async def test_cron_starts_scrape_with_cleanup(client, start_background):
    response = await client.post("/api/cron/scrape", headers=CRON_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Scrape job started"}
    start_background.assert_called_once_with(with_cleanup=True)


@pytest.mark.asyncio
async def test_cron_conflict_while_running(client, start_background):
    start_background.return_value = False

    response = await client.post("/api/cron/scrape", headers=CRON_HEADERS)

    assert response.status_code == 409
    assert response.json() == {"error": "Scrape job already running"}


@pytest.mark.asyncio
async def test_cron_without_secret_is_misconfigured(client, start_background, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", None)

    response = await client.post("/api/cron/scrape", headers=CRON_HEADERS)

    assert response.status_code == 500
    assert response.json() == {"error": "Server misconfigured"}
    start_background.assert_not_called()


@pytest.mark.asyncio
async def test_cron_without_secret_allowed_in_debug(client, start_background, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", None)
    monkeypatch.setattr(settings, "DEBUG", True)

    response = await client.post("/api/cron/scrape")

    assert response.status_code == 200
