"""Watch schemas."""
from typing import List, Optional

from pydantic import StrictBool

from courtwatch.schemas.availability import VenueSummary
from courtwatch.schemas.base import CamelModel


class WatchCreate(CamelModel):
    venue_slug: Optional[str] = None
    weekday_times: Optional[List[str]] = None
    weekend_times: Optional[List[str]] = None


class WatchUpdate(CamelModel):
    """Only the fields present in the body are changed."""

    venue_slug: Optional[str] = None
    weekday_times: Optional[List[str]] = None
    weekend_times: Optional[List[str]] = None
    active: Optional[bool] = None


class ActiveToggle(CamelModel):
    active: StrictBool


class WatchOut(CamelModel):
    id: int
    user_id: int
    venue: Optional[VenueSummary] = None
    weekday_times: Optional[List[str]] = None
    weekend_times: Optional[List[str]] = None
    active: bool
