# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Scheduling models: instructor calendar events and dated batch sessions."""

from datetime import date as date_type
from datetime import datetime

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, UUIDMixin


class ScheduleEvent(Base, UUIDMixin, TimestampMixin):
    """A calendar event owned by an instructor (lecture, exam, office hours...)."""

    __tablename__ = "schedule_events"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    batch_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("batches.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    instructor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(String(20), nullable=False)
    start_time: Mapped[datetime] = mapped_column(nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(nullable=False)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meeting_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_recurring: Mapped[bool] = mapped_column(default=False, nullable=False)
    recurrence_pattern: Mapped[str | None] = mapped_column(String(100), nullable=True)
    attendees: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    max_attendees: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_required: Mapped[bool] = mapped_column(default=True, nullable=False)
    materials: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="scheduled")


class BatchSession(Base, UUIDMixin, TimestampMixin):
    """One dated occurrence of a batch's weekly schedule."""

    __tablename__ = "batch_sessions"

    batch_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("batches.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(String(36), nullable=False)
    date: Mapped[date_type] = mapped_column(Date, nullable=False, index=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    session_type: Mapped[str] = mapped_column(String(20), nullable=False)
    topic: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="scheduled")
    tutor_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    tutor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
