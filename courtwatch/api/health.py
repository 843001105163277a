"""Health check endpoint."""
import logging
from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.core.database import check_connection, get_db
from courtwatch.services.scheduler import scrape_scheduler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(db: AsyncSession = Depends(get_db)):
    """
    Report whether the database answers a trivial query.

    Returns:
        Status, database state, scheduler state and a timestamp
    """
    timestamp = datetime.utcnow().isoformat() + "Z"
    try:
        connected = await check_connection(db)
    except Exception as e:
        logger.error(f"Health check failed: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "status": "unhealthy",
                "database": "error",
                "error": str(e),
                "timestamp": timestamp,
            },
        )

    return {
        "status": "healthy",
        "database": "connected" if connected else "error",
        "scheduler": {"running": scrape_scheduler.running},
        "timestamp": timestamp,
    }
