"""Session token handling.

Sign-in itself happens at the external auth provider, which hands the browser
an HS256 JWT carrying the user's email. This module only verifies that token.
"""
import logging
from datetime import datetime, timedelta
from typing import Optional

import jwt

from courtwatch.core.config import settings

logger = logging.getLogger(__name__)

SESSION_MAX_AGE = timedelta(days=30)


def normalize_email(email: str) -> str:
    """Emails are stored and compared lower-cased."""
    return email.strip().lower()


def create_session_token(email: str, expires_in: timedelta = SESSION_MAX_AGE) -> str:
    """Mint a session token in the same shape the auth provider issues."""
    payload = {
        "email": email,
        "iat": datetime.utcnow(),
        "exp": datetime.utcnow() + expires_in,
    }
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm=settings.SESSION_ALGORITHM)


def decode_session_token(token: str) -> Optional[str]:
    """
    Verify a session token.

    Returns:
        The session email, or None when the token is invalid or expired.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SESSION_SECRET,
            algorithms=[settings.SESSION_ALGORITHM],
        )
    except jwt.PyJWTError as e:
        logger.debug(f"Rejected session token: {e}")
        return None

    email = payload.get("email")
    if not email or not isinstance(email, str):
        return None
    return email
