"""Project catalog and contribution intake."""

from __future__ import annotations

import logging
import math
from typing import List

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import OwnershipRequiredException, ResourceNotFoundException
from app.modules.users.models import User

from .models import (
    Contribution,
    ContributionType,
    PaymentStatus,
    Project,
    ProjectStatus,
)
from .schemas import ContributionCreate, ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)


def compute_progress(current_amount: float, target_amount: float, previous: int) -> int:
    """Percentage funded, rounded half up and capped at 100.

    A project without a positive target keeps its previous progress.
    """
    if not target_amount or target_amount <= 0:
        return previous
    return min(int(math.floor(current_amount / target_amount * 100 + 0.5)), 100)


class ProjectService:
    """Business logic for SDG projects and the pledges made towards them."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------
    def _project_query(self):
        return self.db.query(Project).options(joinedload(Project.creator))

    def list_projects(self) -> List[Project]:
        return self._project_query().order_by(Project.created_at.desc(), Project.id.desc()).all()

    def list_projects_for_sdg(self, sdg_id: int) -> List[Project]:
        return (
            self._project_query()
            .filter(Project.sdg_id == sdg_id)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )

    def list_user_projects(self, user: User) -> List[Project]:
        return (
            self._project_query()
            .filter(Project.creator_id == user.id)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .all()
        )

    def get_project(self, project_id: int) -> Project:
        project = self._project_query().filter(Project.id == project_id).first()
        if not project:
            raise ResourceNotFoundException("Project", project_id)
        return project

    def create_project(self, user: User, payload: ProjectCreate) -> Project:
        project = Project(
            title=payload.title.strip(),
            description=payload.description,
            sdg_id=payload.sdg_id,
            target_amount=payload.target_amount,
            image_url=payload.image_url,
            creator_id=user.id,
            status=ProjectStatus.ACTIVE,
            current_amount=0,
            progress=0,
        )
        self.db.add(project)
        self.db.commit()
        self.db.refresh(project)
        logger.info("User %s created project %s (sdg=%s)", user.id, project.id, project.sdg_id)
        return project

    def update_project(self, project_id: int, user: User, payload: ProjectUpdate) -> Project:
        project = self.get_project(project_id)
        if project.creator_id != user.id:
            raise OwnershipRequiredException("project")

        updates = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if value is not None
        }
        for field, value in updates.items():
            setattr(project, field, value)
        if "target_amount" in updates:
            # Write the new target first so the total read below is the locked one.
            self.db.flush()
            self.db.query(Project).filter(Project.id == project.id).populate_existing().one()
            project.progress = compute_progress(
                project.current_amount, project.target_amount, project.progress or 0
            )
        self.db.commit()
        self.db.refresh(project)
        return project

    def delete_project(self, project_id: int, user: User) -> None:
        """Delete a project together with every contribution made to it."""
        project = self.get_project(project_id)
        if project.creator_id != user.id:
            raise OwnershipRequiredException("project")
        self.db.delete(project)
        self.db.commit()
        logger.info("User %s deleted project %s", user.id, project_id)

    # ------------------------------------------------------------------
    # Contributions
    # ------------------------------------------------------------------
    def submit_contribution(self, user: User, payload: ContributionCreate) -> Contribution:
        """Record a pledge in pending state without touching project totals."""
        project_exists = (
            self.db.query(Project.id).filter(Project.id == payload.project_id).first()
        )
        if not project_exists:
            raise ResourceNotFoundException("Project", payload.project_id)

        contribution = Contribution(
            user_id=user.id,
            project_id=payload.project_id,
            amount=payload.amount,
            type=payload.type,
            description=payload.description,
            transaction_code=payload.transaction_code,
            payment_method=payload.payment_method,
            payment_status=PaymentStatus.PENDING,
        )
        self.db.add(contribution)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(
                "Failed to persist contribution for project %s", payload.project_id
            )
            raise
        self.db.refresh(contribution)
        logger.info(
            "Contribution %s submitted by user %s for project %s",
            contribution.id,
            user.id,
            payload.project_id,
            extra={"payment_kind": "contribution", "payment_id": contribution.id},
        )
        return contribution

    def list_project_contributions(self, project_id: int) -> List[Contribution]:
        self.get_project(project_id)
        return (
            self.db.query(Contribution)
            .options(joinedload(Contribution.user))
            .filter(Contribution.project_id == project_id)
            .order_by(Contribution.created_at.desc(), Contribution.id.desc())
            .all()
        )

    def list_user_contributions(self, user: User) -> List[Contribution]:
        return (
            self.db.query(Contribution)
            .options(joinedload(Contribution.project))
            .filter(Contribution.user_id == user.id)
            .order_by(Contribution.created_at.desc(), Contribution.id.desc())
            .all()
        )

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------
    def platform_stats(self) -> dict:
        total_projects = self.db.query(func.count(Project.id)).scalar() or 0
        active_projects = (
            self.db.query(func.count(Project.id))
            .filter(Project.status == ProjectStatus.ACTIVE)
            .scalar()
            or 0
        )
        completed_projects = (
            self.db.query(func.count(Project.id))
            .filter(Project.status == ProjectStatus.COMPLETED)
            .scalar()
            or 0
        )
        total_users = self.db.query(func.count(User.id)).scalar() or 0
        total_contributions = self.db.query(func.count(Contribution.id)).scalar() or 0
        # Pending pledges are unverified money; only approved ones count.
        total_funding = (
            self.db.query(func.coalesce(func.sum(Contribution.amount), 0))
            .filter(
                Contribution.type == ContributionType.MONETARY,
                Contribution.payment_status == PaymentStatus.COMPLETED,
            )
            .scalar()
        )
        distribution = (
            self.db.query(Project.sdg_id, func.count(Project.id))
            .group_by(Project.sdg_id)
            .order_by(Project.sdg_id.asc())
            .all()
        )
        return {
            "totalProjects": total_projects,
            "activeProjects": active_projects,
            "completedProjects": completed_projects,
            "totalUsers": total_users,
            "totalContributions": total_contributions,
            "totalFunding": float(total_funding or 0),
            "sdgDistribution": [
                {"sdg_id": sdg_id, "count": count} for sdg_id, count in distribution
            ],
        }


__all__ = ["ProjectService", "compute_progress"]
