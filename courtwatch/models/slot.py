"""Slot model."""
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from courtwatch.core.database import Base

AVAILABLE = "available"
BOOKED = "booked"
CLOSED = "closed"
COACHING = "coaching"


class Slot(Base):
    """Latest known state of one (venue, date, time, court) unit."""

    __tablename__ = "slots"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time = Column(String(16), nullable=False)  # e.g. "5pm"
    court = Column(String, nullable=False)
    status = Column(String(20), nullable=False)  # available, booked, closed, coaching
    price = Column(String(20), nullable=True)  # e.g. "£10.00"
    updated_at = Column(DateTime, server_default=func.now())

    # Relationships
    venue = relationship("Venue", back_populates="slots")

    __table_args__ = (
        UniqueConstraint("venue_id", "date", "time", "court", name="uq_slots_venue_date_time_court"),
        Index("ix_slots_venue_date_time", "venue_id", "date", "time"),
    )
