"""Courses domain package exports."""

from .models import Course, CourseCategory, CourseLevel, Enrollment, EnrollmentStatus
from .service import CourseService

__all__ = [
    "Course",
    "CourseCategory",
    "CourseLevel",
    "Enrollment",
    "EnrollmentStatus",
    "CourseService",
]
