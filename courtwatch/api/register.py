"""Public registration endpoint."""
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from slowapi import Limiter
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.core.config import settings
from courtwatch.core.database import get_db
from courtwatch.schemas.registration import RegistrationCreate, RegistrationSubmitted
from courtwatch.services.registration_service import InvalidRequestError, registration_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["registration"])

RATE_LIMIT_MESSAGE = "Too many registration requests. Please try again later."


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


# Keyed on the forwarded client address so requests behind the proxy are counted apart
limiter = Limiter(key_func=client_ip)


@router.post("/register", response_model=RegistrationSubmitted)
@limiter.limit(f"{settings.REGISTRATION_LIMIT_PER_HOUR}/hour", error_message=RATE_LIMIT_MESSAGE)
async def register(
    body: RegistrationCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Ask for access.

    Each client address may submit a limited number of requests per hour.
    """
    try:
        created = await registration_service.submit(db, body.email, body.name, body.reason)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Registration error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to process registration request")

    return RegistrationSubmitted(
        message="Your registration request has been submitted for review",
        request_id=created.id,
    )
