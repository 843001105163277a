"""Notification log model."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func
from courtwatch.core.database import Base


class NotificationLogEntry(Base):
    """One slot announced on one channel. Used to avoid repeat alerts."""

    __tablename__ = "notification_log"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(Integer, ForeignKey("notification_channels.id", ondelete="CASCADE"), nullable=False)
    slot_key = Column(String, nullable=False)  # venue:date:time:court
    sent_at = Column(DateTime, server_default=func.now(), index=True)

    __table_args__ = (
        UniqueConstraint("channel_id", "slot_key", name="uq_notification_log_channel_slot"),
    )
