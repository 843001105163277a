"""User model."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from courtwatch.core.database import Base


class User(Base):
    """An account, linked to the external auth provider by email."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    external_auth_id = Column(String(255), unique=True, nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)  # Always lower-cased
    name = Column(String, nullable=True)
    phone = Column(String(20), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    is_admin = Column(Boolean, nullable=False, default=False)
    is_allowed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    notification_preference = relationship(
        "NotificationPreference", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    watches = relationship("Watch", back_populates="user", cascade="all, delete-orphan")
    notification_channels = relationship(
        "NotificationChannel", back_populates="user", cascade="all, delete-orphan"
    )
