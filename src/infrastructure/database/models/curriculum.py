# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum model.

A course has at most one curriculum. Modules and their lessons are stored
as an embedded JSON document::

    [{"id", "title", "description", "order", "estimated_hours",
      "lessons": [{"id", "title", "type", "duration", "order", ...}]}]

Totals are recomputed by the curriculum service on every write.
"""

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, UUIDMixin


class Curriculum(Base, UUIDMixin, TimestampMixin):
    """Module and lesson structure of a course."""

    __tablename__ = "curricula"

    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    modules: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    total_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_lessons: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
