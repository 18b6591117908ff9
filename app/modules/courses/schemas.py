"""Pydantic schemas for courses and enrollments."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.modules.projects.models import PaymentStatus
from app.modules.users.schemas import UserSummary

from .models import CourseCategory, CourseLevel, EnrollmentStatus


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: CourseCategory = CourseCategory.PRIMARY
    subject: str = Field(..., min_length=1)
    level: CourseLevel = CourseLevel.BEGINNER
    duration: float = Field(0, ge=0)
    price: float = Field(0, ge=0)
    image_url: str = Field("", validation_alias=AliasChoices("image_url", "imageUrl"))
    lessons: int = Field(0, ge=0)
    certificate: bool = True


class CourseOut(BaseModel):
    id: int
    title: str
    description: str
    instructor_id: int
    category: CourseCategory
    subject: str
    level: CourseLevel
    duration: float
    price: float
    image_url: str
    lessons: int
    certificate: bool
    rating: float
    students_count: int
    created_at: Optional[datetime] = None
    instructor: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class CourseSummary(BaseModel):
    id: int
    title: str
    price: float

    model_config = ConfigDict(from_attributes=True)


class EnrollmentCreate(BaseModel):
    course_id: int = Field(..., validation_alias=AliasChoices("course_id", "courseId"))
    transaction_code: Optional[str] = Field(
        None, validation_alias=AliasChoices("transaction_code", "transactionCode")
    )
    payment_method: Optional[str] = Field(
        None, validation_alias=AliasChoices("payment_method", "paymentMethod")
    )


class EnrollmentOut(BaseModel):
    id: int
    user_id: int
    course_id: int
    payment_status: PaymentStatus
    transaction_code: Optional[str] = None
    payment_method: Optional[str] = None
    status: EnrollmentStatus
    progress: int
    completed_lessons: int
    total_lessons: int
    time_spent: int
    grade: float
    enrollment_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    last_accessed: Optional[datetime] = None
    course: Optional[CourseSummary] = None

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "CourseCreate",
    "CourseOut",
    "CourseSummary",
    "EnrollmentCreate",
    "EnrollmentOut",
]
