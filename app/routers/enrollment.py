"""Enrollment intake router."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.courses import CourseService
from app.modules.courses.schemas import EnrollmentCreate, EnrollmentOut
from app.modules.users import User
from app.oauth2 import get_current_user

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])


@router.post("", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def enroll(
    payload: EnrollmentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Enroll in a course. Paid courses stay pending until an admin approves the payment."""
    return CourseService(db).submit_enrollment(current_user, payload)
