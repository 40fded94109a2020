# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Live class recording model."""

from datetime import datetime

from sqlalchemy import BigInteger, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, JSONType, TimestampMixin, UUIDMixin
from src.utils.datetime import utc_now


class LiveClassRecording(Base, UUIDMixin, TimestampMixin):
    """Recording of a live class session with its access lists."""

    __tablename__ = "live_class_recordings"

    course_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    batch_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    module_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    lesson_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    instructor_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    instructor_name: Mapped[str] = mapped_column(String(255), nullable=False)

    recording_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_at: Mapped[datetime] = mapped_column(default=utc_now, nullable=False)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    quality: Mapped[str] = mapped_column(String(10), nullable=False, default="720p")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="processing")

    is_public: Mapped[bool] = mapped_column(default=False, nullable=False)
    allowed_student_ids: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    allowed_batch_ids: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    expires_at: Mapped[datetime | None] = mapped_column(nullable=True)

    topics: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    tags: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    thumbnail: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_watch_time: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
