"""Pydantic schemas for projects, contributions and platform statistics."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.modules.users.schemas import UserSummary

from .models import ContributionType, PaymentStatus, ProjectStatus


class ProjectBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    sdg_id: int = Field(..., ge=1, le=17, validation_alias=AliasChoices("sdg_id", "sdgId"))
    target_amount: float = Field(
        0, ge=0, validation_alias=AliasChoices("target_amount", "targetAmount")
    )
    image_url: str = Field("", validation_alias=AliasChoices("image_url", "imageUrl"))


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    """Editable project fields; funding totals are owned by the approval gate."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    sdg_id: Optional[int] = Field(
        None, ge=1, le=17, validation_alias=AliasChoices("sdg_id", "sdgId")
    )
    status: Optional[ProjectStatus] = None
    target_amount: Optional[float] = Field(
        None, ge=0, validation_alias=AliasChoices("target_amount", "targetAmount")
    )
    image_url: Optional[str] = Field(
        None, validation_alias=AliasChoices("image_url", "imageUrl")
    )


class ProjectOut(BaseModel):
    id: int
    title: str
    description: str
    sdg_id: int
    creator_id: int
    status: ProjectStatus
    target_amount: float
    current_amount: float
    progress: int
    image_url: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    creator: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ProjectSummary(BaseModel):
    id: int
    title: str

    model_config = ConfigDict(from_attributes=True)


class ContributionCreate(BaseModel):
    project_id: int = Field(
        ..., validation_alias=AliasChoices("project_id", "projectId")
    )
    amount: float = Field(..., ge=0)
    type: ContributionType
    description: str = ""
    transaction_code: Optional[str] = Field(
        None, validation_alias=AliasChoices("transaction_code", "transactionCode")
    )
    payment_method: Optional[str] = Field(
        None, validation_alias=AliasChoices("payment_method", "paymentMethod")
    )


class ContributionOut(BaseModel):
    id: int
    user_id: int
    project_id: int
    amount: float
    type: ContributionType
    payment_status: PaymentStatus
    transaction_code: Optional[str] = None
    payment_method: Optional[str] = None
    description: str = ""
    created_at: Optional[datetime] = None
    user: Optional[UserSummary] = None
    project: Optional[ProjectSummary] = None

    model_config = ConfigDict(from_attributes=True)


class SdgCount(BaseModel):
    sdg_id: int
    count: int


class PlatformStats(BaseModel):
    totalProjects: int
    activeProjects: int
    completedProjects: int
    totalUsers: int
    totalContributions: int
    totalFunding: float
    sdgDistribution: List[SdgCount]


__all__ = [
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectOut",
    "ProjectSummary",
    "ContributionCreate",
    "ContributionOut",
    "SdgCount",
    "PlatformStats",
]
