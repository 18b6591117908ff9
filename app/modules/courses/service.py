"""Course catalog and enrollment intake."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import (
    DuplicateEnrollmentException,
    ResourceNotFoundException,
    ValidationException,
)
from app.modules.projects.models import PaymentStatus
from app.modules.users.models import User

from .models import Course, CourseCategory, CourseLevel, Enrollment, EnrollmentStatus
from .schemas import CourseCreate, EnrollmentCreate

logger = logging.getLogger(__name__)


class CourseService:
    """Catalog queries, course authoring and enrollment submission."""

    def __init__(self, db: Session):
        self.db = db

    def list_courses(
        self,
        category: Optional[CourseCategory] = None,
        level: Optional[CourseLevel] = None,
        search: Optional[str] = None,
    ) -> List[Course]:
        query = self.db.query(Course).options(joinedload(Course.instructor))
        if category is not None:
            query = query.filter(Course.category == category)
        if level is not None:
            query = query.filter(Course.level == level)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Course.title.ilike(pattern),
                    Course.description.ilike(pattern),
                    Course.subject.ilike(pattern),
                )
            )
        return query.order_by(Course.created_at.desc(), Course.id.desc()).all()

    def get_course(self, course_id: int) -> Course:
        course = (
            self.db.query(Course)
            .options(joinedload(Course.instructor))
            .filter(Course.id == course_id)
            .first()
        )
        if not course:
            raise ResourceNotFoundException("Course", course_id)
        return course

    def create_course(self, instructor: User, payload: CourseCreate) -> Course:
        course = Course(instructor_id=instructor.id, **payload.model_dump())
        self.db.add(course)
        self.db.commit()
        self.db.refresh(course)
        logger.info("User %s created course %s", instructor.id, course.id)
        return course

    def submit_enrollment(self, user: User, payload: EnrollmentCreate) -> Enrollment:
        """Enroll a user in a course.

        Free courses are enrolled immediately. Paid courses need the external
        transaction code and wait in ``pending`` until an admin approves them.
        A user can hold at most one enrollment per course; a second attempt
        leaves the original row untouched.
        """
        course = self.get_course(payload.course_id)

        existing = (
            self.db.query(Enrollment.id)
            .filter(Enrollment.user_id == user.id, Enrollment.course_id == course.id)
            .first()
        )
        if existing:
            logger.warning(
                "Duplicate enrollment attempt by user %s for course %s",
                user.id,
                course.id,
            )
            raise DuplicateEnrollmentException(course.id)

        is_free = (course.price or 0) <= 0
        transaction_code = (payload.transaction_code or "").strip()
        if not is_free and not transaction_code:
            raise ValidationException(
                "A transaction code is required for paid courses",
                field="transaction_code",
            )

        enrollment = Enrollment(
            user_id=user.id,
            course_id=course.id,
            total_lessons=course.lessons or 0,
            status=EnrollmentStatus.ACTIVE,
        )
        if is_free:
            enrollment.payment_status = PaymentStatus.COMPLETED
            self.db.execute(
                update(Course)
                .where(Course.id == course.id)
                .values(students_count=func.coalesce(Course.students_count, 0) + 1)
                .execution_options(synchronize_session=False)
            )
        else:
            enrollment.payment_status = PaymentStatus.PENDING
            enrollment.transaction_code = transaction_code
            enrollment.payment_method = payload.payment_method

        self.db.add(enrollment)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request won the unique (user_id, course_id) race.
            self.db.rollback()
            logger.warning(
                "Duplicate enrollment rejected by constraint for user %s course %s",
                user.id,
                course.id,
            )
            raise DuplicateEnrollmentException(course.id)
        self.db.refresh(enrollment)
        logger.info(
            "Enrollment %s created for user %s in course %s (payment_status=%s)",
            enrollment.id,
            user.id,
            course.id,
            enrollment.payment_status.value,
            extra={"payment_kind": "enrollment", "payment_id": enrollment.id},
        )
        return enrollment

    def list_user_enrollments(self, user: User) -> List[Enrollment]:
        return (
            self.db.query(Enrollment)
            .options(joinedload(Enrollment.course))
            .filter(Enrollment.user_id == user.id)
            .order_by(Enrollment.enrollment_date.desc(), Enrollment.id.desc())
            .all()
        )


__all__ = ["CourseService"]
