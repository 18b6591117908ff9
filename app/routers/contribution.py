"""Contribution intake router."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.projects import ProjectService
from app.modules.projects.schemas import ContributionCreate, ContributionOut
from app.modules.users import User
from app.oauth2 import get_current_user

router = APIRouter(prefix="/contributions", tags=["Contributions"])


@router.post("", response_model=ContributionOut, status_code=status.HTTP_201_CREATED)
def create_contribution(
    payload: ContributionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Record a pledge; project totals move only once an admin approves it."""
    return ProjectService(db).submit_contribution(current_user, payload)
