"""Scraping log schemas."""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from courtwatch.schemas.base import CamelModel


class ScrapingLogOut(CamelModel):
    id: int
    venue_id: Optional[int] = None
    scraper_type: str
    status: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_ms: Optional[int] = None
    slots_found: int
    slots_added: int
    slots_updated: int
    error_message: Optional[str] = None
    # Read from the ORM attribute, emitted as "metadata"
    run_metadata: Optional[Dict[str, Any]] = Field(default=None, serialization_alias="metadata")


class CleanupRequest(CamelModel):
    days: int = Field(default=7, ge=0, le=3650)
