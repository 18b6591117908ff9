"""SQLAlchemy models for the course catalog and enrollments."""

from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.db_defaults import enum_column, timestamp_default
from app.modules.projects.models import PaymentStatus, payment_status_type


class CourseCategory(str, enum.Enum):
    DIGITAL = "digital"
    PRIMARY = "primary"
    SECONDARY = "secondary"
    VOCATIONAL = "vocational"
    ADULT = "adult"
    LANGUAGE = "language"
    STEM = "stem"


class CourseLevel(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class EnrollmentStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"


class Course(Base):
    """A priced course offered by an instructor."""

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_courses_price_non_negative"),
        CheckConstraint("rating BETWEEN 0 AND 5", name="ck_courses_rating_range"),
    )

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    instructor_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category = Column(
        enum_column(CourseCategory, "course_category_enum"),
        default=CourseCategory.PRIMARY,
        nullable=False,
        index=True,
    )
    subject = Column(String, nullable=False)
    level = Column(
        enum_column(CourseLevel, "course_level_enum"),
        default=CourseLevel.BEGINNER,
        nullable=False,
        index=True,
    )
    duration = Column(Float, default=0, nullable=False)
    price = Column(Float, default=0, nullable=False)
    image_url = Column(String, default="", nullable=False)
    lessons = Column(Integer, default=0, nullable=False)
    certificate = Column(Boolean, default=True, nullable=False)
    rating = Column(Float, default=4.5, nullable=False)
    students_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=timestamp_default(),
        onupdate=timestamp_default(),
    )

    instructor = relationship("User")
    enrollments = relationship(
        "Enrollment",
        back_populates="course",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Enrollment(Base):
    """A learner's purchase of, and progress through, a course."""

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),
        CheckConstraint("progress BETWEEN 0 AND 100", name="ck_enrollments_progress_range"),
        CheckConstraint("grade BETWEEN 0 AND 100", name="ck_enrollments_grade_range"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    course_id = Column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    payment_status = Column(
        payment_status_type,
        default=PaymentStatus.PENDING,
        nullable=False,
        index=True,
    )
    transaction_code = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)
    status = Column(
        enum_column(EnrollmentStatus, "enrollment_status_enum"),
        default=EnrollmentStatus.ACTIVE,
        nullable=False,
    )
    progress = Column(Integer, default=0, nullable=False)
    completed_lessons = Column(Integer, default=0, nullable=False)
    total_lessons = Column(Integer, default=0, nullable=False)
    time_spent = Column(Integer, default=0, nullable=False)
    grade = Column(Float, default=0, nullable=False)
    enrollment_date = Column(DateTime(timezone=True), server_default=timestamp_default())
    completion_date = Column(DateTime(timezone=True), nullable=True)
    last_accessed = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=timestamp_default(),
        onupdate=timestamp_default(),
    )

    user = relationship("User", back_populates="enrollments")
    course = relationship("Course", back_populates="enrollments")


__all__ = [
    "CourseCategory",
    "CourseLevel",
    "EnrollmentStatus",
    "Course",
    "Enrollment",
]
