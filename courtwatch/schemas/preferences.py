"""Notification preference schemas."""
from datetime import datetime
from typing import Optional

from pydantic import Field

from courtwatch.models.notification_preference import (
    DEFAULT_COOLDOWN_MINUTES,
    DEFAULT_MAX_NOTIFICATIONS_PER_DAY,
    DEFAULT_QUIET_HOURS_END,
    DEFAULT_QUIET_HOURS_START,
)
from courtwatch.schemas.base import CamelModel


class NotificationPreferenceBase(CamelModel):
    """Base notification preference schema."""

    email_enabled: bool = True
    sms_enabled: bool = False
    quiet_hours_start: Optional[int] = Field(default=DEFAULT_QUIET_HOURS_START, ge=0, le=23)
    quiet_hours_end: Optional[int] = Field(default=DEFAULT_QUIET_HOURS_END, ge=0, le=23)
    max_notifications_per_day: int = Field(default=DEFAULT_MAX_NOTIFICATIONS_PER_DAY, ge=1, le=100)
    notification_cooldown_minutes: int = Field(default=DEFAULT_COOLDOWN_MINUTES, ge=1, le=1440)


class NotificationPreferenceUpdate(NotificationPreferenceBase):
    """Full replacement of a user's preferences."""

    pass


class NotificationPreferenceOut(NotificationPreferenceBase):
    """Schema for preferences read back from the database."""

    updated_at: Optional[datetime] = None
