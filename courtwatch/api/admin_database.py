"""Admin database maintenance endpoints."""
import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy import func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.api.deps import require_admin
from courtwatch.core import database
from courtwatch.core.database import get_db
from courtwatch.models import (
    NotificationChannel,
    NotificationLogEntry,
    RegistrationRequest,
    Slot,
    User,
    Venue,
    Watch,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/database", tags=["admin"])

EXPORT_TABLES = {
    "users": User,
    "watches": Watch,
    "venues": Venue,
    "slots": Slot,
    "notificationChannels": NotificationChannel,
    "notificationLog": NotificationLogEntry,
    "registrationRequests": RegistrationRequest,
}


def row_to_dict(row) -> dict:
    return {attr.key: getattr(row, attr.key) for attr in inspect(row).mapper.column_attrs}


@router.post("/vacuum")
async def vacuum_database(admin: User = Depends(require_admin)):
    """
    Compact database storage.

    Only runs once the caller is confirmed to be an admin.
    """
    try:
        await database.vacuum()
    except Exception as e:
        logger.error(f"Error vacuuming database: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to vacuum database")

    logger.info(f"Database vacuumed by {admin.email}")
    return {"success": True, "message": "Database vacuumed successfully"}


@router.get("/stats")
async def database_stats(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Row counts per table."""
    tables = {}
    for name, model in EXPORT_TABLES.items():
        tables[name] = (await db.execute(select(func.count()).select_from(model))).scalar() or 0
    return {"stats": {"tables": tables}}


@router.get("/export")
async def export_database(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Download every table as one JSON document."""
    data = {}
    for name, model in EXPORT_TABLES.items():
        rows = (await db.execute(select(model))).scalars().all()
        data[name] = [row_to_dict(row) for row in rows]

    now = datetime.utcnow()
    payload = {"exportedAt": now.isoformat() + "Z", "version": "1.0", "data": data}
    logger.info(f"Database exported by {admin.email}")
    return JSONResponse(
        content=jsonable_encoder(payload),
        headers={"Content-Disposition": f'attachment; filename="database-backup-{now.date().isoformat()}.json"'},
    )
