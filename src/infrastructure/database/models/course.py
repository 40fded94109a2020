# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course model."""

from datetime import datetime

from sqlalchemy import CheckConstraint, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, UUIDMixin


class Course(Base, UUIDMixin, TimestampMixin):
    """A course offered on the platform.

    ``enrolled_students`` mirrors the number of seat-holding enrollments.
    It is only written by the enrollment seat ledger.
    """

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("max_students >= 1", name="ck_courses_max_students"),
        CheckConstraint("enrolled_students >= 0", name="ck_courses_enrolled_students"),
        Index("ix_courses_status_category", "status", "category"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    thumbnail: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft")

    instructor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    instructor_name: Mapped[str] = mapped_column(String(255), nullable=False)

    max_students: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    enrolled_students: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completion_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    is_public: Mapped[bool] = mapped_column(default=True, nullable=False)
    allow_self_enrollment: Mapped[bool] = mapped_column(default=True, nullable=False)
    certificate_enabled: Mapped[bool] = mapped_column(default=False, nullable=False)
    prerequisites: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    tags: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    published_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title={self.title!r}, status={self.status})>"
