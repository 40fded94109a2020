# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment model."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDMixin


class Assignment(Base, UUIDMixin, TimestampMixin):
    """Coursework set by an instructor for a course or one of its batches."""

    __tablename__ = "assignments"
    __table_args__ = (
        CheckConstraint("late_penalty >= 0 AND late_penalty <= 100", name="ck_assignments_late_penalty"),
        CheckConstraint("passing_score <= max_score", name="ck_assignments_passing_score"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    instructions: Mapped[str] = mapped_column(Text, nullable=False)
    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_name: Mapped[str] = mapped_column(String(255), nullable=False)
    batch_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("batches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    instructor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    type: Mapped[str] = mapped_column(String(20), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)
    estimated_hours: Mapped[float] = mapped_column(Float, nullable=False, default=1)
    max_score: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    passing_score: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    assigned_date: Mapped[datetime] = mapped_column(nullable=False)
    due_date: Mapped[datetime] = mapped_column(nullable=False, index=True)
    allow_late_submission: Mapped[bool] = mapped_column(default=True, nullable=False)
    late_penalty: Mapped[float] = mapped_column(Float, nullable=False, default=10)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_group_assignment: Mapped[bool] = mapped_column(default=False, nullable=False)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")
    is_published: Mapped[bool] = mapped_column(default=False, nullable=False)
    total_submissions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    graded_submissions: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    completion_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
