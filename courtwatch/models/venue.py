"""Venue model."""
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from courtwatch.core.database import Base


class Venue(Base):
    """A bookable tennis facility."""

    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)

    # Relationships
    slots = relationship("Slot", back_populates="venue", cascade="all, delete-orphan", passive_deletes=True)
    scraping_logs = relationship("ScrapingLog", back_populates="venue")
