# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Live class recording request and response models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.models.common import ORMModel


class RecordingQuality(str, Enum):
    """Video quality of a recording."""

    Q480 = "480p"
    Q720 = "720p"
    Q1080 = "1080p"


class RecordingStatus(str, Enum):
    """Processing status of a recording."""

    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"
    ARCHIVED = "archived"


class RecordingCreateRequest(BaseModel):
    """Request to register a live class recording."""

    course_id: str
    batch_id: str
    module_id: str | None = None
    lesson_id: str | None = None
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    recording_url: str = Field(..., min_length=1)
    duration: int = Field(..., ge=0, description="Seconds")
    recorded_at: datetime | None = None
    file_size: int | None = Field(default=None, ge=0)
    quality: RecordingQuality = RecordingQuality.Q720
    is_public: bool = False
    expires_at: datetime | None = None
    topics: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    thumbnail: str | None = None
    instructor_name: str | None = None


class RecordingAccessUpdateRequest(BaseModel):
    """Request to replace a recording's access lists."""

    allowed_student_ids: list[str] | None = None
    allowed_batch_ids: list[str] | None = None
    is_public: bool | None = None
    expires_at: datetime | None = None


class RecordingViewRequest(BaseModel):
    """A finished viewing of a recording."""

    watch_time: float = Field(default=0, ge=0, description="Seconds watched")


class RecordingResponse(ORMModel):
    """Full recording representation."""

    id: str
    course_id: str
    batch_id: str
    module_id: str | None = None
    lesson_id: str | None = None
    title: str
    description: str | None = None
    instructor_id: str
    instructor_name: str
    recording_url: str
    duration: int
    recorded_at: datetime
    file_size: int | None = None
    quality: str
    status: str
    is_public: bool
    allowed_student_ids: list[str]
    allowed_batch_ids: list[str]
    expires_at: datetime | None = None
    topics: list[str]
    tags: list[str]
    thumbnail: str | None = None
    view_count: int
    average_watch_time: float
    created_at: datetime
