"""User schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from courtwatch.schemas.base import CamelModel


class UserOut(CamelModel):
    """The caller's own projection."""

    id: int
    email: str
    name: Optional[str] = None
    is_admin: bool
    is_allowed: bool


class UserMeResponse(BaseModel):
    user: UserOut


class AdminUserOut(UserOut):
    """User row as shown in the admin area."""

    phone: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    watch_count: int = 0
    channel_count: int = 0


class AdminUserCreate(CamelModel):
    email: Optional[str] = None
    name: Optional[str] = None
    is_allowed: bool = False
    is_admin: bool = False


class AdminUserUpdate(CamelModel):
    name: Optional[str] = None
    is_allowed: Optional[bool] = None
    is_admin: Optional[bool] = None
