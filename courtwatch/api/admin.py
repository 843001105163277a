"""Admin API: users, registration requests, statistics and maintenance."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from courtwatch.api.channels import serialize_channel
from courtwatch.api.deps import require_admin
from courtwatch.api.watches import serialize_watch
from courtwatch.core import database
from courtwatch.core.database import get_db
from courtwatch.core.security import normalize_email
from courtwatch.models.notification_channel import NotificationChannel
from courtwatch.models.notification_log import NotificationLogEntry
from courtwatch.models.registration_request import PENDING, RegistrationRequest
from courtwatch.models.scraping_log import ScrapingLog
from courtwatch.models.slot import Slot
from courtwatch.models.user import User
from courtwatch.models.venue import Venue
from courtwatch.models.watch import Watch
from courtwatch.schemas.registration import RegistrationRequestOut, ReviewAction
from courtwatch.schemas.scraping import CleanupRequest, ScrapingLogOut
from courtwatch.schemas.user import AdminUserCreate, AdminUserOut, AdminUserUpdate, UserOut
from courtwatch.services.availability_service import NotFoundError
from courtwatch.services.registration_service import InvalidRequestError, registration_service
from courtwatch.services.scrape_runner import cleanup_old_data, scrape_runner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


async def _count(db: AsyncSession, query) -> int:
    return (await db.execute(query)).scalar() or 0


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# Users


@router.get("/users")
async def list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List every user with watch and channel counts."""
    users = (await db.execute(select(User).order_by(User.id))).scalars().all()
    watch_counts = dict(
        (await db.execute(select(Watch.user_id, func.count(Watch.id)).group_by(Watch.user_id))).all()
    )
    channel_counts = dict(
        (
            await db.execute(
                select(NotificationChannel.user_id, func.count(NotificationChannel.id)).group_by(
                    NotificationChannel.user_id
                )
            )
        ).all()
    )

    return {
        "users": [
            AdminUserOut.model_validate(u)
            .model_copy(update={"watch_count": watch_counts.get(u.id, 0), "channel_count": channel_counts.get(u.id, 0)})
            .model_dump(by_alias=True)
            for u in users
        ]
    }


@router.post("/users", status_code=201)
async def create_user(
    body: AdminUserCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a user directly, skipping the registration queue."""
    if not body.email:
        raise HTTPException(status_code=400, detail="Email is required")

    email = normalize_email(body.email)
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.first() is not None:
        raise HTTPException(status_code=400, detail="User with this email already exists")

    user = User(email=email, name=body.name or None, is_allowed=body.is_allowed, is_admin=body.is_admin)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Admin {admin.email} created user {email}")
    return {"user": AdminUserOut.model_validate(user).model_dump(by_alias=True)}


@router.put("/users/{user_id}")
async def update_user(
    user_id: int,
    body: AdminUserUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change a user's name or permission flags."""
    user = await _get_user(db, user_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is not None or field == "name":
            setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    logger.info(f"Admin {admin.email} updated user {user_id}")
    return {"user": AdminUserOut.model_validate(user).model_dump(by_alias=True)}


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a user together with their watches, channels and notification history."""
    user = await _get_user(db, user_id)
    await db.execute(delete(NotificationLogEntry).where(NotificationLogEntry.user_id == user_id))
    await db.delete(user)
    await db.commit()
    logger.info(f"Admin {admin.email} deleted user {user_id}")
    return {"success": True}


@router.get("/users/{user_id}/watches")
async def list_user_watches(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await _get_user(db, user_id)
    result = await db.execute(
        select(Watch).options(selectinload(Watch.venue)).where(Watch.user_id == user_id).order_by(Watch.id)
    )
    return {"watches": [serialize_watch(w) for w in result.scalars().all()]}


@router.get("/users/{user_id}/channels")
async def list_user_channels(
    user_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await _get_user(db, user_id)
    result = await db.execute(
        select(NotificationChannel).where(NotificationChannel.user_id == user_id).order_by(NotificationChannel.id)
    )
    return {"channels": [serialize_channel(c) for c in result.scalars().all()]}


# Registration requests


@router.get("/requests")
async def list_requests(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List registration requests, newest first."""
    requests = await registration_service.list_requests(db)
    return {"requests": [RegistrationRequestOut.model_validate(r).model_dump(by_alias=True) for r in requests]}


@router.put("/requests/{request_id}")
async def review_request(
    request_id: int,
    body: ReviewAction,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Approve or reject a pending registration request.

    Approving creates the user, or enables an existing one, and emails the
    applicant. Requests that were already reviewed are rejected with a 400.
    """
    try:
        await registration_service.get_request(db, request_id)
        if body.action == "approve":
            user = await registration_service.approve(db, request_id, admin)
            return {"success": True, "user": UserOut.model_validate(user).model_dump(by_alias=True)}
        if body.action == "reject":
            await registration_service.reject(db, request_id, admin)
            return {"success": True}
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))

    raise HTTPException(status_code=400, detail="Invalid action")


@router.delete("/requests/{request_id}")
async def delete_request(
    request_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        await registration_service.delete(db, request_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}


# Statistics and logs


@router.get("/stats")
async def get_stats(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Headline counts and the latest notifications."""
    stats = {
        "totalUsers": await _count(db, select(func.count(User.id))),
        "allowedUsers": await _count(db, select(func.count(User.id)).where(User.is_allowed == True)),  # noqa: E712
        "totalVenues": await _count(db, select(func.count(Venue.id))),
        "totalSlots": await _count(db, select(func.count(Slot.id))),
        "totalWatches": await _count(db, select(func.count(Watch.id))),
        "activeWatches": await _count(db, select(func.count(Watch.id)).where(Watch.active == True)),  # noqa: E712
        "totalChannels": await _count(db, select(func.count(NotificationChannel.id))),
        "totalNotifications": await _count(db, select(func.count(NotificationLogEntry.id))),
        "pendingRequests": await _count(
            db, select(func.count(RegistrationRequest.id)).where(RegistrationRequest.status == PENDING)
        ),
    }

    recent = (
        await db.execute(select(NotificationLogEntry).order_by(NotificationLogEntry.sent_at.desc()).limit(10))
    ).scalars().all()

    return {
        "stats": stats,
        "recentNotifications": [
            {
                "id": entry.id,
                "userId": entry.user_id,
                "channelId": entry.channel_id,
                "slotKey": entry.slot_key,
                "sentAt": entry.sent_at,
            }
            for entry in recent
        ],
    }


@router.get("/logs")
async def get_logs(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Latest notifications rendered as log lines."""
    entries = (
        await db.execute(select(NotificationLogEntry).order_by(NotificationLogEntry.sent_at.desc()).limit(100))
    ).scalars().all()
    return {
        "logs": [
            {
                "id": entry.id,
                "timestamp": entry.sent_at,
                "level": "info",
                "message": f"Notification sent for slot: {entry.slot_key}",
            }
            for entry in entries
        ]
    }


@router.get("/scraping-logs")
async def get_scraping_logs(
    limit: int = Query(default=50, ge=1, le=500),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Most recent scrape runs, newest first."""
    logs = (
        await db.execute(select(ScrapingLog).order_by(ScrapingLog.start_time.desc()).limit(limit))
    ).scalars().all()
    return {"logs": [ScrapingLogOut.model_validate(log).model_dump(by_alias=True) for log in logs]}


# Maintenance


@router.post("/cleanup")
async def cleanup(
    body: CleanupRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete old slots and notification history, then compact the database."""
    try:
        counts = await cleanup_old_data(db, body.days)
    except Exception as e:
        logger.error(f"Error running cleanup: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to run cleanup")

    try:
        await database.vacuum()
    except Exception as e:
        logger.error(f"Vacuum after cleanup failed: {e}", exc_info=True)

    return {"success": True, **counts}


@router.post("/scrape")
async def trigger_scrape(admin: User = Depends(require_admin)):
    """Start a scrape in the background."""
    if not scrape_runner.start_background():
        raise HTTPException(status_code=409, detail="Scrape job already running")
    logger.info(f"Admin {admin.email} started a scrape")
    return {"success": True, "message": "Scrape started"}
