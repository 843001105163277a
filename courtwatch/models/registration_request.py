"""Registration request model."""
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func
from courtwatch.core.database import Base

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"


class RegistrationRequest(Base):
    """A request for access, reviewed by an admin."""

    __tablename__ = "registration_requests"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    name = Column(String, nullable=True)
    reason = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=PENDING, index=True)
    created_at = Column(DateTime, server_default=func.now())
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
