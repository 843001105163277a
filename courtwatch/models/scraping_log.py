"""Scraping log model."""
from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from courtwatch.core.database import Base

STATUS_RUNNING = "running"
STATUS_SUCCESS = "success"
STATUS_FAILURE = "failure"
STATUS_PARTIAL = "partial"


class ScrapingLog(Base):
    """Audit record of one scrape run against a venue's booking system.

    Rows are written when the run starts and completed exactly once when it
    finishes; nothing else updates them.
    """

    __tablename__ = "scraping_logs"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="SET NULL"), nullable=True, index=True)
    scraper_type = Column(String(50), nullable=False)  # courtside, clubspark
    status = Column(String(20), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=True)
    duration_ms = Column(Integer, nullable=True)
    slots_found = Column(Integer, nullable=False, default=0)
    slots_added = Column(Integer, nullable=False, default=0)
    slots_updated = Column(Integer, nullable=False, default=0)
    error_message = Column(Text, nullable=True)
    error_stack = Column(Text, nullable=True)
    # "metadata" is reserved on declarative classes
    run_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    # Relationships
    venue = relationship("Venue", back_populates="scraping_logs")
