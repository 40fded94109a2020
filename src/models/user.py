# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User administration request and response models."""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, EmailStr, Field

from src.models.common import ORMModel, UserRole


class UserStatus(str, Enum):
    """Account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class VerificationType(str, Enum):
    """What an admin verification marks as verified."""

    EMAIL = "email"
    PHONE = "phone"


class BulkAction(str, Enum):
    """Bulk operations on users."""

    UPDATE_STATUS = "update_status"
    DELETE = "delete"


class UserCreateRequest(BaseModel):
    """Request to create a user profile."""

    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    role: UserRole = UserRole.STUDENT
    phone: str | None = Field(default=None, max_length=32)
    avatar: str | None = None
    date_of_birth: date | None = None
    bio: str | None = None
    skills: list[str] = Field(default_factory=list)


class UserUpdateRequest(BaseModel):
    """Request to update a user profile. Only provided fields change."""

    name: str | None = Field(default=None, min_length=2, max_length=255)
    phone: str | None = Field(default=None, max_length=32)
    avatar: str | None = None
    date_of_birth: date | None = None
    bio: str | None = None
    skills: list[str] | None = None
    status: UserStatus | None = None


class UserRoleUpdateRequest(BaseModel):
    """Request to change a user's role."""

    role: UserRole


class UserVerifyRequest(BaseModel):
    """Request to mark a user's email or phone as verified."""

    type: VerificationType = VerificationType.EMAIL


class UserSuspendRequest(BaseModel):
    """Request to suspend a user."""

    reason: str = Field(..., min_length=1)
    duration_days: int | None = Field(default=None, ge=1)


class BulkUserRequest(BaseModel):
    """Bulk status update or delete."""

    action: BulkAction
    user_ids: list[str] = Field(..., min_length=1, max_length=500)
    status: UserStatus | None = None


class BulkUserResult(BaseModel):
    """Number of users affected by a bulk operation."""

    action: str
    affected: int


class UserResponse(ORMModel):
    """Full user profile."""

    id: str
    name: str
    email: str
    avatar: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    role: str
    status: str
    verified: bool
    email_verified: bool
    phone_verified: bool
    bio: str | None = None
    skills: list[str]
    last_login: datetime | None = None
    suspension_reason: str | None = None
    suspension_duration: int | None = None
    created_at: datetime
    updated_at: datetime


class UserStats(BaseModel):
    """User counters for the admin dashboard."""

    total_users: int
    active_users: int
    new_users_this_month: int
    verified_users: int
    by_role: dict[str, int]


class RoleInfo(BaseModel):
    """A role users may hold."""

    role: str
    description: str
