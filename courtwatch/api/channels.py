"""Notification channel endpoints, scoped to the signed-in user."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.api.deps import get_current_user
from courtwatch.core.database import get_db
from courtwatch.models.notification_channel import CHANNEL_TYPES, NotificationChannel
from courtwatch.models.user import User
from courtwatch.schemas.channel import ChannelCreate, ChannelOut, ChannelUpdate
from courtwatch.schemas.watch import ActiveToggle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/channels", tags=["channels"])

INVALID_TYPE = "type must be telegram or email"


def serialize_channel(channel: NotificationChannel) -> dict:
    return ChannelOut.model_validate(channel).model_dump(by_alias=True)


async def _get_owned_channel(db: AsyncSession, channel_id: int, user_id: int) -> NotificationChannel:
    result = await db.execute(
        select(NotificationChannel).where(
            NotificationChannel.id == channel_id,
            NotificationChannel.user_id == user_id,
        )
    )
    channel = result.scalar_one_or_none()
    if channel is None:
        raise HTTPException(status_code=404, detail="Channel not found")
    return channel


async def _ensure_unique(
    db: AsyncSession,
    user_id: int,
    channel_type: str,
    destination: str,
    exclude_id: Optional[int] = None,
):
    query = select(NotificationChannel.id).where(
        NotificationChannel.user_id == user_id,
        NotificationChannel.type == channel_type,
        NotificationChannel.destination == destination,
    )
    if exclude_id is not None:
        query = query.where(NotificationChannel.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise HTTPException(status_code=400, detail="Channel already exists")


@router.get("")
async def list_channels(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's notification channels."""
    result = await db.execute(
        select(NotificationChannel)
        .where(NotificationChannel.user_id == user.id)
        .order_by(NotificationChannel.id)
    )
    return {"channels": [serialize_channel(c) for c in result.scalars().all()]}


@router.post("")
async def create_channel(
    body: ChannelCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Add a notification channel.

    Args:
        body: Channel type (telegram or email) and destination (chat id or address)
        user: Caller
        db: Database session

    Returns:
        The created channel
    """
    if not body.type or not body.destination:
        raise HTTPException(status_code=400, detail="type and destination are required")

    if not isinstance(body.destination, str):
        raise HTTPException(status_code=400, detail="destination must be a string")

    destination = body.destination.strip()
    if not destination:
        raise HTTPException(status_code=400, detail="destination cannot be empty or whitespace-only")

    if body.type not in CHANNEL_TYPES:
        raise HTTPException(status_code=400, detail=INVALID_TYPE)

    await _ensure_unique(db, user.id, body.type, destination)

    channel = NotificationChannel(
        user_id=user.id,
        type=body.type,
        destination=destination,
        active=True,
    )
    db.add(channel)
    await db.commit()
    logger.info(f"User {user.id} added {body.type} channel {channel.id}")
    return {"channel": serialize_channel(channel)}


@router.get("/{channel_id}")
async def get_channel(
    channel_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"channel": serialize_channel(await _get_owned_channel(db, channel_id, user.id))}


@router.put("/{channel_id}")
async def update_channel(
    channel_id: int,
    body: ChannelUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a channel. Fields left out of the body keep their values."""
    channel = await _get_owned_channel(db, channel_id, user.id)
    changes = body.model_dump(exclude_unset=True)

    if "type" in changes:
        if changes["type"] not in CHANNEL_TYPES:
            raise HTTPException(status_code=400, detail=INVALID_TYPE)
        channel.type = changes["type"]

    if "destination" in changes:
        destination = (changes["destination"] or "").strip()
        if not destination:
            raise HTTPException(status_code=400, detail="destination is required")
        channel.destination = destination

    if changes.get("active") is not None:
        channel.active = changes["active"]

    await _ensure_unique(db, user.id, channel.type, channel.destination, exclude_id=channel.id)
    await db.commit()
    return {"channel": serialize_channel(channel)}


@router.patch("/{channel_id}")
async def toggle_channel(
    channel_id: int,
    body: ActiveToggle,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Switch a channel on or off."""
    channel = await _get_owned_channel(db, channel_id, user.id)
    channel.active = body.active
    await db.commit()
    return {"channel": serialize_channel(channel)}


@router.delete("/{channel_id}")
async def delete_channel(
    channel_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    channel = await _get_owned_channel(db, channel_id, user.id)
    await db.delete(channel)
    await db.commit()
    logger.info(f"User {user.id} deleted channel {channel_id}")
    return {"success": True}
