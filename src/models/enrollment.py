# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and response models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, EmailStr, Field

from src.models.common import ORMModel


class EnrollmentStatus(str, Enum):
    """Enrollment status. Everything except DROPPED holds a seat."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"
    SUSPENDED = "suspended"
    WAITLISTED = "waitlisted"


class PaymentStatus(str, Enum):
    """Payment state of an enrollment."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIAL = "partial"


class EnrollRequest(BaseModel):
    """Request to enroll a student in a course, optionally into a batch."""

    student_id: str
    student_name: str = Field(..., min_length=1)
    student_email: EmailStr
    course_id: str
    batch_id: str | None = None
    payment_amount: float = Field(..., ge=0)


class EnrollmentStatusUpdateRequest(BaseModel):
    """Request to change an enrollment's status."""

    status: EnrollmentStatus
    reason: str | None = None


class ProgressUpdateRequest(BaseModel):
    """Request to overwrite an enrollment's progress."""

    progress: int = Field(..., ge=0, le=100)
    completed_lessons: list[str] = Field(default_factory=list)


class EnrollmentResponse(ORMModel):
    """Full enrollment representation."""

    id: str
    student_id: str
    student_name: str
    student_email: str
    course_id: str
    batch_id: str | None = None
    enrolled_at: datetime
    status: str
    status_reason: str | None = None
    dropped_at: datetime | None = None
    progress: int
    completed_lessons: list[str]
    last_accessed_at: datetime | None = None
    certificate_issued: bool
    certificate_issued_at: datetime | None = None
    payment_status: str
    payment_amount: float


class StudentProgressResponse(BaseModel):
    """A student's progress in one course."""

    enrollment_id: str
    student_id: str
    course_id: str
    course_title: str
    batch_id: str | None = None
    status: str
    progress: int
    completed_lessons: list[str]
    last_accessed_at: datetime | None = None
    certificate_issued: bool


class CounterCorrection(BaseModel):
    """A counter the reconcile sweep rewrote."""

    entity: str
    id: str
    stored: int
    actual: int


class ReconcileReport(BaseModel):
    """Outcome of a counter reconcile sweep."""

    courses_checked: int
    batches_checked: int
    corrections: list[CounterCorrection]
