"""Public platform statistics."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.projects import ProjectService
from app.modules.projects.schemas import PlatformStats

router = APIRouter(prefix="/stats", tags=["Statistics"])


@router.get("", response_model=PlatformStats)
def platform_stats(db: Session = Depends(get_db)):
    return ProjectService(db).platform_stats()
