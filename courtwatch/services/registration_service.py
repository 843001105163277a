"""Registration requests and their review."""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from courtwatch.core.config import settings
from courtwatch.core.security import normalize_email
from courtwatch.core.templates import render_template
from courtwatch.models.registration_request import (
    APPROVED,
    PENDING,
    REJECTED,
    RegistrationRequest,
)
from courtwatch.models.user import User
from courtwatch.services.availability_service import NotFoundError
from courtwatch.services.email_notifier import EmailNotifier, email_notifier

logger = logging.getLogger(__name__)

MIN_REASON_LENGTH = 10


class InvalidRequestError(ValueError):
    """Input was rejected."""


class RegistrationService:
    """Handles access requests from people without an account."""

    def __init__(self, notifier: EmailNotifier = email_notifier):
        self.notifier = notifier

    async def _send_best_effort(self, to: Optional[str], subject: str, html: str):
        if not to:
            return
        try:
            await self.notifier.send_email(to, subject, html)
        except Exception as e:
            logger.error(f"Failed to send '{subject}' to {to}: {e}", exc_info=True)

    async def submit(
        self,
        db: AsyncSession,
        email: Optional[str],
        name: Optional[str],
        reason: Optional[str],
    ) -> RegistrationRequest:
        """
        Create a pending registration request.

        Raises:
            InvalidRequestError: On bad input, an existing account or a pending request
        """
        if not email or "@" not in email:
            raise InvalidRequestError("Valid email is required")

        if not reason or len(reason.strip()) < MIN_REASON_LENGTH:
            raise InvalidRequestError(
                f"Please provide a reason (at least {MIN_REASON_LENGTH} characters)"
            )

        email = normalize_email(email)

        existing_user = await db.execute(select(User.id).where(User.email == email))
        if existing_user.first() is not None:
            raise InvalidRequestError("An account with this email already exists")

        pending = await db.execute(
            select(RegistrationRequest.id).where(
                RegistrationRequest.email == email,
                RegistrationRequest.status == PENDING,
            )
        )
        if pending.first() is not None:
            raise InvalidRequestError("A registration request for this email is already pending review")

        request = RegistrationRequest(
            email=email,
            name=name or None,
            reason=reason.strip(),
            status=PENDING,
            created_at=datetime.utcnow(),
        )
        db.add(request)
        await db.commit()
        await db.refresh(request)
        logger.info(f"Registration request {request.id} submitted for {email}")

        admin = (
            await db.execute(select(User.email).where(User.is_admin == True).limit(1))  # noqa: E712
        ).scalar_one_or_none()
        await self._send_best_effort(
            admin or settings.ADMIN_EMAIL,
            "New Registration Request - Time for Tennis",
            render_template("emails/registration_admin.html", email=email, name=name, reason=request.reason),
        )
        return request

    async def list_requests(self, db: AsyncSession) -> List[RegistrationRequest]:
        result = await db.execute(
            select(RegistrationRequest).order_by(RegistrationRequest.created_at.desc())
        )
        return result.scalars().all()

    async def get_request(self, db: AsyncSession, request_id: int) -> RegistrationRequest:
        request = await db.get(RegistrationRequest, request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    async def get_pending_request(self, db: AsyncSession, request_id: int) -> RegistrationRequest:
        """
        Raises:
            NotFoundError: If the request does not exist
            InvalidRequestError: If it has already been approved or rejected
        """
        request = await self.get_request(db, request_id)
        if request.status != PENDING:
            raise InvalidRequestError(f"Request has already been {request.status}")
        return request

    async def approve(self, db: AsyncSession, request_id: int, reviewer: User) -> User:
        """
        Approve a request, creating the user or enabling an existing one.

        Returns:
            The allowed user
        """
        request = await self.get_pending_request(db, request_id)

        user = (
            await db.execute(select(User).where(User.email == request.email))
        ).scalar_one_or_none()
        if user is None:
            user = User(email=request.email, name=request.name, is_allowed=True)
            db.add(user)
        else:
            user.is_allowed = True
            user.name = request.name or user.name

        request.status = APPROVED
        request.reviewed_at = datetime.utcnow()
        request.reviewed_by = reviewer.id
        await db.commit()
        await db.refresh(user)
        logger.info(f"Registration request {request_id} approved by {reviewer.email}")

        await self._send_best_effort(
            request.email,
            "Welcome to Time for Tennis!",
            render_template("emails/registration_welcome.html", name=request.name),
        )
        return user

    async def reject(self, db: AsyncSession, request_id: int, reviewer: User) -> RegistrationRequest:
        request = await self.get_pending_request(db, request_id)
        request.status = REJECTED
        request.reviewed_at = datetime.utcnow()
        request.reviewed_by = reviewer.id
        await db.commit()
        logger.info(f"Registration request {request_id} rejected by {reviewer.email}")

        await self._send_best_effort(
            request.email,
            "Time for Tennis - Registration Update",
            render_template("emails/registration_rejected.html"),
        )
        return request

    async def delete(self, db: AsyncSession, request_id: int):
        request = await self.get_request(db, request_id)
        await db.delete(request)
        await db.commit()


# Singleton instance
registration_service = RegistrationService()
