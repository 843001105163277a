"""Watch endpoints, scoped to the signed-in user."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from courtwatch.api.deps import get_current_user
from courtwatch.core.database import get_db
from courtwatch.models.user import User
from courtwatch.models.venue import Venue
from courtwatch.models.watch import Watch
from courtwatch.schemas.availability import VenueSummary
from courtwatch.schemas.watch import ActiveToggle, WatchCreate, WatchOut, WatchUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/watches", tags=["watches"])


def serialize_watch(watch: Watch) -> dict:
    return WatchOut(
        id=watch.id,
        user_id=watch.user_id,
        venue=VenueSummary(slug=watch.venue.slug, name=watch.venue.name) if watch.venue else None,
        weekday_times=watch.weekday_times,
        weekend_times=watch.weekend_times,
        active=bool(watch.active),
    ).model_dump(by_alias=True)


async def _venue_id_for_slug(db: AsyncSession, slug: str) -> Optional[int]:
    result = await db.execute(select(Venue.id).where(Venue.slug == slug))
    return result.scalar_one_or_none()


async def _get_owned_watch(db: AsyncSession, watch_id: int, user_id: int) -> Watch:
    result = await db.execute(
        select(Watch)
        .options(selectinload(Watch.venue))
        .where(Watch.id == watch_id, Watch.user_id == user_id)
    )
    watch = result.scalar_one_or_none()
    if watch is None:
        raise HTTPException(status_code=404, detail="Watch not found")
    return watch


@router.get("")
async def list_watches(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's watches."""
    result = await db.execute(
        select(Watch)
        .options(selectinload(Watch.venue))
        .where(Watch.user_id == user.id)
        .order_by(Watch.id)
    )
    return {"watches": [serialize_watch(w) for w in result.scalars().all()]}


@router.post("")
async def create_watch(
    body: WatchCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a watch.

    An unknown venue slug leaves the watch covering all venues.
    """
    venue_id = await _venue_id_for_slug(db, body.venue_slug) if body.venue_slug else None

    watch = Watch(
        user_id=user.id,
        venue_id=venue_id,
        weekday_times=body.weekday_times or None,
        weekend_times=body.weekend_times or None,
        active=True,
    )
    db.add(watch)
    await db.commit()
    logger.info(f"User {user.id} created watch {watch.id}")

    return {"watch": serialize_watch(await _get_owned_watch(db, watch.id, user.id))}


@router.get("/{watch_id}")
async def get_watch(
    watch_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"watch": serialize_watch(await _get_owned_watch(db, watch_id, user.id))}


@router.put("/{watch_id}")
async def update_watch(
    watch_id: int,
    body: WatchUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a watch. Fields left out of the body keep their values.

    Raises:
        HTTPException: 404 for a watch the caller does not own, 400 for an unknown venue
    """
    watch = await _get_owned_watch(db, watch_id, user.id)
    changes = body.model_dump(exclude_unset=True)

    if "venue_slug" in changes:
        if changes["venue_slug"] is None:
            watch.venue_id = None
        else:
            venue_id = await _venue_id_for_slug(db, changes["venue_slug"])
            if venue_id is None:
                raise HTTPException(status_code=400, detail="Invalid venue")
            watch.venue_id = venue_id

    if "weekday_times" in changes:
        watch.weekday_times = changes["weekday_times"] or None
    if "weekend_times" in changes:
        watch.weekend_times = changes["weekend_times"] or None
    if changes.get("active") is not None:
        watch.active = changes["active"]

    await db.commit()
    db.expire(watch)
    return {"watch": serialize_watch(await _get_owned_watch(db, watch_id, user.id))}


@router.patch("/{watch_id}")
async def toggle_watch(
    watch_id: int,
    body: ActiveToggle,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Switch a watch on or off."""
    watch = await _get_owned_watch(db, watch_id, user.id)
    watch.active = body.active
    await db.commit()
    return {"watch": serialize_watch(watch)}


@router.delete("/{watch_id}")
async def delete_watch(
    watch_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    watch = await _get_owned_watch(db, watch_id, user.id)
    await db.delete(watch)
    await db.commit()
    logger.info(f"User {user.id} deleted watch {watch_id}")
    return {"success": True}
