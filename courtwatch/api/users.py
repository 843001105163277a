"""Endpoints for the signed-in user's own account."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.api.deps import get_current_user, get_session_email, get_user_by_email
from courtwatch.core.database import get_db
from courtwatch.models.notification_preference import NotificationPreference
from courtwatch.models.user import User
from courtwatch.schemas.preferences import NotificationPreferenceOut, NotificationPreferenceUpdate
from courtwatch.schemas.user import UserMeResponse, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/user/me", response_model=UserMeResponse)
async def get_me(
    email: Optional[str] = Depends(get_session_email),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the caller's identity and permission flags.

    Flags are read from the database on every call, so an admin's change
    shows up on the next request.
    """
    if not email:
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        user = await get_user_by_email(db, email)
    except Exception as e:
        logger.error(f"Failed to fetch user {email}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch user")

    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserMeResponse(user=UserOut.model_validate(user))


async def _get_preference(db: AsyncSession, user_id: int):
    result = await db.execute(
        select(NotificationPreference).where(NotificationPreference.user_id == user_id)
    )
    return result.scalar_one_or_none()


@router.get("/preferences")
async def get_preferences(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get notification preferences, falling back to defaults when none are saved."""
    preference = await _get_preference(db, user.id)
    if preference is None:
        out = NotificationPreferenceOut()
    else:
        out = NotificationPreferenceOut.model_validate(preference)
    return {"preferences": out.model_dump(by_alias=True)}


@router.put("/preferences")
async def update_preferences(
    body: NotificationPreferenceUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Replace notification preferences.

    Args:
        body: Full preference set
        user: Caller
        db: Database session

    Returns:
        The saved preferences
    """
    preference = await _get_preference(db, user.id)
    if preference is None:
        preference = NotificationPreference(user_id=user.id)
        db.add(preference)

    for field, value in body.model_dump().items():
        setattr(preference, field, value)
    preference.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(preference)
    logger.info(f"Updated notification preferences for user {user.id}")
    return {"preferences": NotificationPreferenceOut.model_validate(preference).model_dump(by_alias=True)}
