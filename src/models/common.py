# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared API models: the response envelope, pagination and enums.

Every endpoint answers with the same envelope::

    {"success": true, "data": ...}
    {"success": false, "error": "message", "code": "not_found"}
"""

import math
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class UserRole(str, Enum):
    """Roles carried in the bearer token."""

    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    MENTOR = "mentor"
    STUDENT = "student"
    TUTOR = "tutor"
    SUPPORT = "support"


class SortOrder(str, Enum):
    """Sort direction for list endpoints."""

    ASC = "asc"
    DESC = "desc"


class ORMModel(BaseModel):
    """Base for response models built from ORM rows."""

    model_config = ConfigDict(from_attributes=True)


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope."""

    success: bool = True
    data: T


class ErrorResponse(BaseModel):
    """Failure envelope."""

    success: bool = False
    error: str
    code: str | None = None


class Pagination(BaseModel):
    """Pagination block returned by list endpoints."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        """Compute the page count for a result window."""
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


class PaginatedList(BaseModel, Generic[T]):
    """A page of items plus its pagination block."""

    items: list[T]
    pagination: Pagination


class PageParams(BaseModel):
    """Validated page/limit pair."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class MessageResponse(BaseModel):
    """Payload for operations that only report an outcome."""

    message: str
