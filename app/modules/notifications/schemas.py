"""Pydantic schemas dedicated to the notifications domain."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class NotificationCreate(BaseModel):
    user_id: int = Field(..., validation_alias=AliasChoices("userId", "user_id"))
    message: str = Field(..., min_length=1, max_length=1000)


class NotificationOut(BaseModel):
    id: int
    user_id: int
    message: str
    read: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


__all__ = ["NotificationCreate", "NotificationOut"]
