"""Notification channel model."""
from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from courtwatch.core.database import Base

TELEGRAM = "telegram"
EMAIL = "email"
CHANNEL_TYPES = (TELEGRAM, EMAIL)


class NotificationChannel(Base):
    """Where a user's alerts are delivered."""

    __tablename__ = "notification_channels"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(20), nullable=False)  # telegram, email
    destination = Column(String, nullable=False)  # chat id or email address
    active = Column(Boolean, nullable=False, default=True)

    # Relationships
    user = relationship("User", back_populates="notification_channels")

    __table_args__ = (
        UniqueConstraint("user_id", "type", "destination", name="uq_channels_user_type_destination"),
        Index("ix_channels_user_active", "user_id", "active"),
    )
