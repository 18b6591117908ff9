"""Application services for the users domain."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.core.exceptions import (
    InvalidCredentialsException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
)
from app.modules.utils.security import hash_password, needs_rehash, verify_password

from .models import User
from .schemas import UserCreate, UserProfileUpdate

logger = logging.getLogger(__name__)


class UserService:
    """Encapsulates user-centric business logic shared across routers."""

    def __init__(self, db: Session):
        self.db = db

    def create_user(self, payload: UserCreate) -> User:
        """Create a new user after validating uniqueness."""
        email = payload.email.lower()
        existing_user = self.db.query(User).filter(User.email == email).first()
        if existing_user:
            raise ResourceAlreadyExistsException("User", field="email")

        new_user = User(
            email=email,
            name=payload.name.strip(),
            hashed_password=hash_password(payload.password),
        )
        self.db.add(new_user)
        self.db.commit()
        self.db.refresh(new_user)
        logger.info("Registered user %s", new_user.id)
        return new_user

    def authenticate(self, email: str, password: str) -> User:
        user = self.db.query(User).filter(User.email == email.lower()).first()
        if not user or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsException()
        if needs_rehash(user.hashed_password):
            user.hashed_password = hash_password(password)
            self.db.commit()
            logger.info("Upgraded password hash for user %s", user.id)
        return user

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_or_404(self, user_id: int) -> User:
        user = self.get_user(user_id)
        if not user:
            raise ResourceNotFoundException("User", user_id)
        return user

    def update_profile(self, user: User, payload: UserProfileUpdate) -> User:
        updates = payload.model_dump(exclude_unset=True)
        if updates.get("name") is not None:
            user.name = updates["name"].strip()
        if "avatar" in updates:
            user.avatar = updates["avatar"]
        self.db.commit()
        self.db.refresh(user)
        return user


__all__ = ["UserService"]
