"""Notification channel schemas."""
from typing import Any, Optional

from courtwatch.schemas.base import CamelModel


class ChannelCreate(CamelModel):
    # Loosely typed so the route can answer with its own 400 messages
    type: Optional[str] = None
    destination: Optional[Any] = None


class ChannelUpdate(CamelModel):
    type: Optional[str] = None
    destination: Optional[str] = None
    active: Optional[bool] = None


class ChannelOut(CamelModel):
    id: int
    type: str
    destination: str
    active: bool
