"""Course catalog router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.courses import CourseCategory, CourseLevel, CourseService
from app.modules.courses.schemas import CourseCreate, CourseOut
from app.modules.users import User
from app.oauth2 import get_current_user

router = APIRouter(prefix="/courses", tags=["Courses"])


@router.get("", response_model=List[CourseOut])
def list_courses(
    category: Optional[CourseCategory] = Query(None),
    level: Optional[CourseLevel] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    db: Session = Depends(get_db),
):
    return CourseService(db).list_courses(category=category, level=level, search=search)


@router.get("/{course_id}", response_model=CourseOut)
def get_course(course_id: int, db: Session = Depends(get_db)):
    return CourseService(db).get_course(course_id)


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    payload: CourseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return CourseService(db).create_course(current_user, payload)
