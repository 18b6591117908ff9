"""Per-user endpoints: profile edits and the caller's own projects, pledges and courses."""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.courses import CourseService
from app.modules.courses.schemas import EnrollmentOut
from app.modules.projects import ProjectService
from app.modules.projects.schemas import ContributionOut, ProjectOut
from app.modules.users import User, UserService
from app.modules.users.schemas import UserOut, UserProfileUpdate
from app.oauth2 import get_current_user

router = APIRouter(prefix="/user", tags=["Users"])


@router.put("/profile", response_model=UserOut)
def update_profile(
    payload: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return UserService(db).update_profile(current_user, payload)


@router.get("/projects", response_model=List[ProjectOut])
def my_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ProjectService(db).list_user_projects(current_user)


@router.get("/contributions", response_model=List[ContributionOut])
def my_contributions(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ProjectService(db).list_user_contributions(current_user)


@router.get("/enrollments", response_model=List[EnrollmentOut])
def my_enrollments(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return CourseService(db).list_user_enrollments(current_user)
