"""Availability endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.core.database import get_db
from courtwatch.core.venues import VENUES
from courtwatch.schemas.availability import AvailabilityResponse
from courtwatch.services.availability_service import NotFoundError, availability_service

router = APIRouter(prefix="/api", tags=["availability"])


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
    venue: Optional[str] = Query(default=None, description="Venue slug"),
    date: Optional[str] = Query(default=None, description="Date as YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
):
    """
    Get slot availability for a venue on a date.

    Args:
        venue: Venue slug
        date: Date string
        db: Database session

    Returns:
        Venue display data and every slot stored for that date
    """
    if not venue or not date:
        raise HTTPException(status_code=400, detail="Missing venue or date parameter")

    try:
        return await availability_service.get_availability(db, venue, date)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/venues")
async def list_venues():
    """List the monitored venues and their booking systems."""
    return {"venues": [v.to_dict() for v in VENUES]}
