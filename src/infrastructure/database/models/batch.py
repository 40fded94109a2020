# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch and tutor assignment models."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Float, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, UUIDMixin
from src.utils.datetime import utc_now

TUTOR_ACTIVE = "active"


class Batch(Base, UUIDMixin, TimestampMixin):
    """A cohort of students taking a course together.

    ``schedule`` holds the weekly slot template as a list of
    ``{day_of_week, start_time, end_time, session_type, topic, is_recurring}``.
    ``waitlist_count`` is stored for clients but nothing moves students in
    or out of a waiting state.
    """

    __tablename__ = "batches"
    __table_args__ = (
        CheckConstraint("max_students >= 1", name="ck_batches_max_students"),
        CheckConstraint("enrolled_students >= 0", name="ck_batches_enrolled_students"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_name: Mapped[str] = mapped_column(String(255), nullable=False)
    instructor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    instructor_name: Mapped[str] = mapped_column(String(255), nullable=False)

    start_date: Mapped[datetime] = mapped_column(nullable=False)
    end_date: Mapped[datetime] = mapped_column(nullable=False)
    schedule: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")

    max_students: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    enrolled_students: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    waitlist_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="upcoming")
    is_public: Mapped[bool] = mapped_column(default=True, nullable=False)
    allow_waitlist: Mapped[bool] = mapped_column(default=True, nullable=False)
    auto_enroll: Mapped[bool] = mapped_column(default=False, nullable=False)
    completion_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    average_progress: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    def __repr__(self) -> str:
        return f"<Batch(id={self.id}, name={self.name!r}, course_id={self.course_id})>"


class TutorAssignment(Base, UUIDMixin):
    """Assignment of a tutor to a batch."""

    __tablename__ = "tutor_assignments"
    __table_args__ = (
        Index(
            "uq_tutor_assignments_active",
            "tutor_id",
            "batch_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    tutor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    tutor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    tutor_email: Mapped[str] = mapped_column(String(255), nullable=False)
    batch_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("batches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(String(36), nullable=False)
    assigned_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=TUTOR_ACTIVE)
