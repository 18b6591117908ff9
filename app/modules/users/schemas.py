"""Pydantic schemas for the users domain."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .models import UserRole


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=2, max_length=50)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    avatar: Optional[str] = None


class UserOut(BaseModel):
    id: int
    email: EmailStr
    name: str
    avatar: Optional[str] = None
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    """Minimal display fields joined onto payments and contributions."""

    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(Token):
    user: UserOut


__all__ = [
    "UserCreate",
    "UserLogin",
    "UserProfileUpdate",
    "UserOut",
    "UserSummary",
    "Token",
    "AuthResponse",
]
