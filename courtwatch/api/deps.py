"""Authentication dependencies for routes.

The session only proves who the caller is. Whether they exist, are allowed or
are admins is looked up in the database on every request, so permission
changes apply on the very next call.
"""
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.core.config import settings
from courtwatch.core.database import get_db
from courtwatch.core.security import decode_session_token, normalize_email
from courtwatch.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


async def get_session_email(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Resolve the session email from the bearer header or the session cookie."""
    token = credentials.credentials if credentials else request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    return decode_session_token(token)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Look up a user by email, case-insensitively."""
    result = await db.execute(
        select(User).where(User.email == normalize_email(email)).limit(1)
    )
    return result.scalar_one_or_none()


async def get_current_user(
    email: Optional[str] = Depends(get_session_email),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Require a session that maps to a user row."""
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = await get_user_by_email(db, email)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def require_admin(
    email: Optional[str] = Depends(get_session_email),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Require a session whose user has the admin flag."""
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user = await get_user_by_email(db, email)
    if user is None or not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user
