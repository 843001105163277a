"""Registration request schemas."""
from datetime import datetime
from typing import Optional

from courtwatch.schemas.base import CamelModel


class RegistrationCreate(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None
    reason: Optional[str] = None


class RegistrationSubmitted(CamelModel):
    success: bool = True
    message: str
    request_id: int


class RegistrationRequestOut(CamelModel):
    id: int
    email: str
    name: Optional[str] = None
    reason: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None


class ReviewAction(CamelModel):
    action: Optional[str] = None  # approve, reject
