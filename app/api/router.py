"""Centralized API router registration with feature grouping.

Groups:
- Accounts: auth, user.
- SDG crowdfunding: projects, contributions, stats.
- Learning: courses, enrollments.
- Operations: admin payment approval, notifications.

Everything is mounted under ``/api``.
"""

from fastapi import APIRouter

from app.routers import (
    admin,
    auth,
    contribution,
    course,
    enrollment,
    notifications,
    project,
    stats,
    user,
)

api_router = APIRouter(prefix="/api")

# Accounts
api_router.include_router(auth.router)
api_router.include_router(user.router)

# SDG projects and crowdfunding
api_router.include_router(project.router)
api_router.include_router(contribution.router)
api_router.include_router(stats.router)

# Courses and enrollments
api_router.include_router(course.router)
api_router.include_router(enrollment.router)

# Admin and notifications
api_router.include_router(admin.router)
api_router.include_router(notifications.router)
