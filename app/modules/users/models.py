"""SQLAlchemy models and enums for the users domain."""

from __future__ import annotations

import enum

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql.sqltypes import TIMESTAMP

from app.core.database import Base
from app.core.db_defaults import enum_column, timestamp_default


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"


class User(Base):
    """Platform account: learner, project creator, course instructor or admin."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True)
    hashed_password = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    role = Column(
        enum_column(UserRole, "user_role_enum"),
        default=UserRole.USER,
        nullable=False,
    )
    created_at = Column(
        TIMESTAMP(timezone=True), nullable=False, server_default=timestamp_default()
    )

    projects = relationship("Project", back_populates="creator")
    contributions = relationship("Contribution", back_populates="user")
    enrollments = relationship("Enrollment", back_populates="user")
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


__all__ = ["UserRole", "User"]
