"""Per-user notification preference model."""
from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from courtwatch.core.database import Base

DEFAULT_QUIET_HOURS_START = 22
DEFAULT_QUIET_HOURS_END = 7
DEFAULT_MAX_NOTIFICATIONS_PER_DAY = 10
DEFAULT_COOLDOWN_MINUTES = 30


class NotificationPreference(Base):
    """Channel toggles, quiet hours and rate limits for one user."""

    __tablename__ = "user_notification_preferences"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    email_enabled = Column(Boolean, nullable=False, default=True)
    sms_enabled = Column(Boolean, nullable=False, default=False)
    quiet_hours_start = Column(Integer, nullable=True, default=DEFAULT_QUIET_HOURS_START)  # Hour of day
    quiet_hours_end = Column(Integer, nullable=True, default=DEFAULT_QUIET_HOURS_END)
    max_notifications_per_day = Column(Integer, nullable=False, default=DEFAULT_MAX_NOTIFICATIONS_PER_DAY)
    notification_cooldown_minutes = Column(Integer, nullable=False, default=DEFAULT_COOLDOWN_MINUTES)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="notification_preference")

    __table_args__ = (
        CheckConstraint("quiet_hours_start BETWEEN 0 AND 23", name="ck_prefs_quiet_start"),
        CheckConstraint("quiet_hours_end BETWEEN 0 AND 23", name="ck_prefs_quiet_end"),
        CheckConstraint("max_notifications_per_day >= 0", name="ck_prefs_daily_cap"),
        CheckConstraint("notification_cooldown_minutes >= 0", name="ck_prefs_cooldown"),
    )
