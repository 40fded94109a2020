# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course request and response models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.models.common import ORMModel


class CourseCategory(str, Enum):
    """Catalogue categories."""

    PROGRAMMING = "programming"
    DATA_SCIENCE = "data_science"
    WEB_DEVELOPMENT = "web_development"
    MOBILE_DEVELOPMENT = "mobile_development"
    CLOUD_COMPUTING = "cloud_computing"
    CYBERSECURITY = "cybersecurity"
    AI_ML = "ai_ml"
    DEVOPS = "devops"
    UI_UX = "ui_ux"
    BUSINESS = "business"
    OTHER = "other"


class CourseLevel(str, Enum):
    """Course difficulty level, also used for assignment difficulty."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class CourseStatus(str, Enum):
    """Course lifecycle status."""

    DRAFT = "draft"
    REVIEW = "review"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    SUSPENDED = "suspended"


class CourseSortField(str, Enum):
    """Columns a course list may be sorted by."""

    TITLE = "title"
    CREATED_AT = "created_at"
    PRICE = "price"
    ENROLLED_STUDENTS = "enrolled_students"
    AVERAGE_RATING = "average_rating"


class CourseCreateRequest(BaseModel):
    """Request to create a course."""

    title: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=10)
    category: CourseCategory
    level: CourseLevel
    duration: int = Field(..., ge=1, description="Duration in hours")
    price: float = Field(..., ge=0)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    thumbnail: str | None = None
    max_students: int = Field(..., ge=1, le=1000)
    is_public: bool = True
    allow_self_enrollment: bool = True
    certificate_enabled: bool = False
    prerequisites: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    instructor_id: str | None = Field(
        default=None,
        description="Owning instructor; admins may create courses on behalf of an instructor",
    )
    instructor_name: str | None = None


class CourseUpdateRequest(BaseModel):
    """Request to update a course. Only provided fields change."""

    title: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = Field(default=None, min_length=10)
    category: CourseCategory | None = None
    level: CourseLevel | None = None
    duration: int | None = Field(default=None, ge=1)
    price: float | None = Field(default=None, ge=0)
    thumbnail: str | None = None
    max_students: int | None = Field(default=None, ge=1, le=1000)
    is_public: bool | None = None
    allow_self_enrollment: bool | None = None
    certificate_enabled: bool | None = None
    prerequisites: list[str] | None = None
    tags: list[str] | None = None


class CourseStatusUpdateRequest(BaseModel):
    """Request to move a course to another status."""

    status: CourseStatus


class CourseResponse(ORMModel):
    """Full course representation."""

    id: str
    title: str
    description: str
    category: str
    level: str
    duration: int
    price: float
    currency: str
    thumbnail: str | None = None
    status: str
    instructor_id: str
    instructor_name: str
    max_students: int
    enrolled_students: int
    completion_rate: float
    average_rating: float
    total_reviews: int
    is_public: bool
    allow_self_enrollment: bool
    certificate_enabled: bool
    prerequisites: list[str]
    tags: list[str]
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class CourseSummary(ORMModel):
    """Short course representation for statistics and dashboards."""

    id: str
    title: str
    category: str
    level: str
    status: str
    instructor_name: str
    enrolled_students: int
    average_rating: float
    created_at: datetime


class CourseStatistics(BaseModel):
    """Catalogue-wide counters."""

    total_courses: int
    published_courses: int
    draft_courses: int
    total_enrollments: int
    by_category: dict[str, int]
    by_level: dict[str, int]
    top_rated: list[CourseSummary]
    recent: list[CourseSummary]
