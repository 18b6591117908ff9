"""Pydantic schemas for the admin payment approval endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.modules.courses.schemas import CourseSummary
from app.modules.projects.models import ContributionType, PaymentStatus
from app.modules.projects.schemas import ProjectSummary
from app.modules.users.schemas import UserSummary


class PendingEnrollmentOut(BaseModel):
    kind: Literal["enrollment"] = "enrollment"
    id: int
    user: Optional[UserSummary] = None
    course: Optional[CourseSummary] = None
    payment_status: PaymentStatus
    transaction_code: Optional[str] = None
    payment_method: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PendingContributionOut(BaseModel):
    kind: Literal["contribution"] = "contribution"
    id: int
    user: Optional[UserSummary] = None
    project: Optional[ProjectSummary] = None
    amount: float
    type: ContributionType
    payment_status: PaymentStatus
    transaction_code: Optional[str] = None
    payment_method: Optional[str] = None
    description: str = ""
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PendingPaymentsOut(BaseModel):
    enrollments: List[PendingEnrollmentOut]
    contributions: List[PendingContributionOut]


class ApprovePaymentRequest(BaseModel):
    """Admin approval request; ``type`` is validated by the approval gate."""

    type: str = Field(..., validation_alias=AliasChoices("type", "kind"))
    id: int = Field(..., validation_alias=AliasChoices("id", "paymentId", "payment_id"))


class ApprovePaymentResponse(BaseModel):
    message: str
    applied: bool
    data: Any


__all__ = [
    "PendingEnrollmentOut",
    "PendingContributionOut",
    "PendingPaymentsOut",
    "ApprovePaymentRequest",
    "ApprovePaymentResponse",
]
