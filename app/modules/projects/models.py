"""SQLAlchemy models and enums for SDG projects and their contributions."""

from __future__ import annotations

import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.db_defaults import enum_column, timestamp_default


class ProjectStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class ContributionType(str, enum.Enum):
    MONETARY = "monetary"
    TIME = "time"
    RESOURCE = "resource"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


payment_status_type = enum_column(PaymentStatus, "payment_status_enum")


class Project(Base):
    """A crowdfunded initiative tied to one of the 17 SDGs."""

    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("sdg_id BETWEEN 1 AND 17", name="ck_projects_sdg_range"),
        CheckConstraint("target_amount >= 0", name="ck_projects_target_non_negative"),
        CheckConstraint("current_amount >= 0", name="ck_projects_current_non_negative"),
        CheckConstraint("progress BETWEEN 0 AND 100", name="ck_projects_progress_range"),
    )

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    sdg_id = Column(Integer, nullable=False, index=True)
    creator_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(
        enum_column(ProjectStatus, "project_status_enum"),
        default=ProjectStatus.ACTIVE,
        nullable=False,
        index=True,
    )
    target_amount = Column(Float, default=0, nullable=False)
    current_amount = Column(Float, default=0, nullable=False)
    progress = Column(Integer, default=0, nullable=False)
    image_url = Column(String, default="", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=timestamp_default(),
        onupdate=timestamp_default(),
    )

    creator = relationship("User", back_populates="projects")
    contributions = relationship(
        "Contribution",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Contribution(Base):
    """A pledge of money, time or resources towards a project."""

    __tablename__ = "contributions"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_contributions_amount_non_negative"),
        Index("ix_contributions_status_type", "payment_status", "type"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    project_id = Column(
        Integer,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = Column(Float, nullable=False)
    type = Column(enum_column(ContributionType, "contribution_type_enum"), nullable=False)
    payment_status = Column(
        payment_status_type,
        default=PaymentStatus.PENDING,
        nullable=False,
    )
    transaction_code = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)
    description = Column(Text, default="", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=timestamp_default(),
        onupdate=timestamp_default(),
    )

    user = relationship("User", back_populates="contributions")
    project = relationship("Project", back_populates="contributions")


__all__ = [
    "ProjectStatus",
    "ContributionType",
    "PaymentStatus",
    "Project",
    "Contribution",
]
