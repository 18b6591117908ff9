"""Projects domain package exports."""

from .models import Contribution, ContributionType, PaymentStatus, Project, ProjectStatus
from .service import ProjectService

__all__ = [
    "Contribution",
    "ContributionType",
    "PaymentStatus",
    "Project",
    "ProjectStatus",
    "ProjectService",
]
