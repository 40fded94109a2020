# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch, batch student and tutor models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, EmailStr, Field, model_validator

from src.models.common import ORMModel

TIME_PATTERN = r"^([0-1]\d|2[0-3]):([0-5]\d)$"


class BatchStatus(str, Enum):
    """Batch lifecycle status."""

    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    SUSPENDED = "suspended"


class SessionType(str, Enum):
    """Kind of teaching session."""

    LECTURE = "lecture"
    LAB = "lab"
    SEMINAR = "seminar"
    WORKSHOP = "workshop"
    TUTORIAL = "tutorial"


class BatchSortField(str, Enum):
    """Columns a batch list may be sorted by."""

    NAME = "name"
    START_DATE = "start_date"
    END_DATE = "end_date"
    MAX_STUDENTS = "max_students"
    ENROLLED_STUDENTS = "enrolled_students"
    CREATED_AT = "created_at"


class ScheduleSlot(BaseModel):
    """One slot of a batch's weekly schedule."""

    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday")
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    session_type: SessionType
    topic: str | None = None
    is_recurring: bool = True

    @model_validator(mode="after")
    def check_times(self) -> "ScheduleSlot":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class BatchCreateRequest(BaseModel):
    """Request to create a batch."""

    name: str = Field(..., min_length=3, max_length=255)
    description: str | None = None
    course_id: str
    instructor_id: str | None = None
    instructor_name: str | None = None
    start_date: datetime
    end_date: datetime
    schedule: list[ScheduleSlot] = Field(default_factory=list)
    timezone: str = "UTC"
    max_students: int = Field(..., ge=1, le=1000)
    is_public: bool = True
    allow_waitlist: bool = True
    auto_enroll: bool = False

    @model_validator(mode="after")
    def check_dates(self) -> "BatchCreateRequest":
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        return self


class BatchUpdateRequest(BaseModel):
    """Request to update a batch. Only provided fields change."""

    name: str | None = Field(default=None, min_length=3, max_length=255)
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    schedule: list[ScheduleSlot] | None = None
    timezone: str | None = None
    max_students: int | None = Field(default=None, ge=1, le=1000)
    status: BatchStatus | None = None
    is_public: bool | None = None
    allow_waitlist: bool | None = None
    auto_enroll: bool | None = None


class BatchResponse(ORMModel):
    """Full batch representation."""

    id: str
    name: str
    description: str | None = None
    course_id: str
    course_name: str
    instructor_id: str
    instructor_name: str
    start_date: datetime
    end_date: datetime
    schedule: list[dict]
    timezone: str
    max_students: int
    enrolled_students: int
    waitlist_count: int
    status: str
    is_public: bool
    allow_waitlist: bool
    auto_enroll: bool
    completion_rate: float
    average_progress: float
    created_at: datetime
    updated_at: datetime


class BatchStudentAddRequest(BaseModel):
    """Request to add a student to a batch."""

    student_id: str
    student_name: str = Field(..., min_length=1)
    student_email: EmailStr
    payment_amount: float = Field(default=0, ge=0)


class TutorAssignRequest(BaseModel):
    """Request to assign a tutor to a batch."""

    tutor_id: str


class TutorAssignmentResponse(ORMModel):
    """Tutor assigned to a batch."""

    id: str
    tutor_id: str
    tutor_name: str
    tutor_email: str
    batch_id: str
    course_id: str
    assigned_at: datetime
    status: str


class TutorSummary(ORMModel):
    """Active user with the tutor role."""

    id: str
    name: str
    email: str
