"""Aggregate every ORM model so metadata and mappers see the full schema."""

from app.models.base import Base
from app.modules.courses.models import (
    Course,
    CourseCategory,
    CourseLevel,
    Enrollment,
    EnrollmentStatus,
)
from app.modules.notifications.models import Notification
from app.modules.projects.models import (
    Contribution,
    ContributionType,
    PaymentStatus,
    Project,
    ProjectStatus,
)
from app.modules.users.models import User, UserRole

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Project",
    "ProjectStatus",
    "Contribution",
    "ContributionType",
    "PaymentStatus",
    "Course",
    "CourseCategory",
    "CourseLevel",
    "Enrollment",
    "EnrollmentStatus",
    "Notification",
]
