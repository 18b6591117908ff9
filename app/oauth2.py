"""JWT utilities for auth and role enforcement.

Responsibilities:
- Create and verify HMAC-signed access tokens with expirations.
- Resolve the current user (and admin) from the bearer token.
- Surface structured 401/403 errors for missing, invalid or under-privileged callers.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import InvalidTokenException, PermissionDeniedException
from app.modules.users.models import User

logger = logging.getLogger(__name__)

# auto_error is off so a missing token surfaces through the structured error handlers.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


class TokenData(BaseModel):
    id: Optional[int] = None


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    """Create a JWT access token carrying ``user_id`` and an ``exp`` claim."""
    to_encode = data.copy()
    minutes = expires_minutes or settings.access_token_expire_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode.update({"exp": expire})

    if "user_id" in to_encode:
        try:
            to_encode["user_id"] = int(to_encode["user_id"])
        except (TypeError, ValueError):
            logger.error("Invalid user_id format: %s", to_encode["user_id"])
            raise ValueError("Invalid user_id format")

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def verify_access_token(token: str) -> TokenData:
    """Decode a token and return its TokenData, raising InvalidTokenException on failure."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise InvalidTokenException()

    user_id = payload.get("user_id")
    if user_id is None:
        logger.warning("User ID not found in token payload")
        raise InvalidTokenException()
    try:
        return TokenData(id=int(user_id))
    except (TypeError, ValueError):
        raise InvalidTokenException()


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user for the bearer token."""
    if not token:
        raise InvalidTokenException("Not authenticated")

    token_data = verify_access_token(token)
    user = db.query(User).filter(User.id == token_data.id).first()
    if user is None:
        raise InvalidTokenException()

    # Picked up by LoggingMiddleware for the access log line.
    request.state.user_id = user.id
    return user


def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    """Ensure the current user has admin privileges."""
    if not current_user.is_admin:
        logger.warning("User %s denied admin access", current_user.id)
        raise PermissionDeniedException("Access denied. Admin only.")
    return current_user


__all__ = [
    "oauth2_scheme",
    "TokenData",
    "create_access_token",
    "verify_access_token",
    "get_current_user",
    "get_current_admin",
]
