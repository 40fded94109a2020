# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment request and response models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from src.models.common import ORMModel
from src.models.course import CourseLevel


class AssignmentType(str, Enum):
    """Kind of assignment."""

    ESSAY = "essay"
    PROJECT = "project"
    CODING = "coding"
    PRESENTATION = "presentation"
    QUIZ = "quiz"
    PRACTICAL = "practical"
    RESEARCH = "research"
    CASE_STUDY = "case_study"


class AssignmentStatus(str, Enum):
    """Assignment lifecycle status."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ACTIVE = "active"
    CLOSED = "closed"
    ARCHIVED = "archived"


class AssignmentSortField(str, Enum):
    """Columns an assignment list may be sorted by."""

    TITLE = "title"
    DUE_DATE = "due_date"
    CREATED_AT = "created_at"
    DIFFICULTY = "difficulty"
    MAX_SCORE = "max_score"


class AssignmentCreateRequest(BaseModel):
    """Request to create an assignment."""

    title: str = Field(..., min_length=3, max_length=255)
    description: str | None = None
    instructions: str = Field(..., min_length=1)
    course_id: str
    batch_id: str | None = None
    type: AssignmentType
    difficulty: CourseLevel
    estimated_hours: float = Field(default=1, ge=1)
    max_score: int = Field(default=100, ge=1)
    passing_score: int = Field(default=60, ge=0)
    assigned_date: datetime
    due_date: datetime
    allow_late_submission: bool = True
    late_penalty: float = Field(default=10, ge=0, le=100)
    max_attempts: int = Field(default=1, ge=1)
    is_group_assignment: bool = False

    @model_validator(mode="after")
    def check_consistency(self) -> "AssignmentCreateRequest":
        if self.due_date <= self.assigned_date:
            raise ValueError("due_date must be after assigned_date")
        if self.passing_score > self.max_score:
            raise ValueError("passing_score cannot exceed max_score")
        return self


class AssignmentUpdateRequest(BaseModel):
    """Request to update an assignment. Only provided fields change."""

    title: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = None
    instructions: str | None = None
    type: AssignmentType | None = None
    difficulty: CourseLevel | None = None
    estimated_hours: float | None = Field(default=None, ge=1)
    max_score: int | None = Field(default=None, ge=1)
    passing_score: int | None = Field(default=None, ge=0)
    assigned_date: datetime | None = None
    due_date: datetime | None = None
    allow_late_submission: bool | None = None
    late_penalty: float | None = Field(default=None, ge=0, le=100)
    max_attempts: int | None = Field(default=None, ge=1)
    is_group_assignment: bool | None = None
    status: AssignmentStatus | None = None


class AssignmentResponse(ORMModel):
    """Full assignment representation."""

    id: str
    title: str
    description: str | None = None
    instructions: str
    course_id: str
    course_name: str
    batch_id: str | None = None
    instructor_id: str
    type: str
    difficulty: str
    estimated_hours: float
    max_score: int
    passing_score: int
    assigned_date: datetime
    due_date: datetime
    allow_late_submission: bool
    late_penalty: float
    max_attempts: int
    is_group_assignment: bool
    status: str
    is_published: bool
    total_submissions: int
    graded_submissions: int
    average_score: float
    completion_rate: float
    created_at: datetime
    updated_at: datetime
