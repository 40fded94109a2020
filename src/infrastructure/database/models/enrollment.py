# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment model."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, UUIDMixin
from src.utils.datetime import utc_now

# Every status except "dropped" holds a seat in the course and batch.
SEAT_RELEASED_STATUS = "dropped"


class Enrollment(Base, UUIDMixin, TimestampMixin):
    """A student's enrollment in a course, optionally within a batch.

    Rows are never deleted by the services. Leaving a course is the
    ``dropped`` status.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_enrollments_progress"),
        Index("ix_enrollments_course_status", "course_id", "status"),
        Index("ix_enrollments_batch_status", "batch_id", "status"),
    )

    student_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    student_email: Mapped[str] = mapped_column(String(255), nullable=False)
    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
    )
    batch_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("batches.id", ondelete="RESTRICT"),
        nullable=True,
    )

    enrolled_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    status_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    dropped_at: Mapped[datetime | None] = mapped_column(nullable=True)
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_lessons: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    last_accessed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    certificate_issued: Mapped[bool] = mapped_column(default=False, nullable=False)
    certificate_issued_at: Mapped[datetime | None] = mapped_column(nullable=True)

    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    payment_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    @property
    def holds_seat(self) -> bool:
        """Whether this enrollment counts against course and batch capacity."""
        return self.status != SEAT_RELEASED_STATUS

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.id}, student_id={self.student_id}, "
            f"course_id={self.course_id}, status={self.status})>"
        )
