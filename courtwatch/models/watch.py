"""Watch model."""
from sqlalchemy import JSON, Boolean, Column, ForeignKey, Index, Integer
from sqlalchemy.orm import relationship
from courtwatch.core.database import Base


class Watch(Base):
    """Times a user wants to hear about, at one venue or at all of them."""

    __tablename__ = "watches"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=True)  # None = all venues
    weekday_times = Column(JSON, nullable=True)  # e.g. ["5pm", "6pm"]
    weekend_times = Column(JSON, nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    # Relationships
    user = relationship("User", back_populates="watches")
    venue = relationship("Venue")

    __table_args__ = (
        Index("ix_watches_user_active", "user_id", "active"),
    )
