# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum (modules and lessons) request and response models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.models.common import ORMModel


class LessonType(str, Enum):
    """Kind of lesson."""

    VIDEO = "video"
    READING = "reading"
    ASSIGNMENT = "assignment"
    QUIZ = "quiz"
    LIVE_CLASS = "live_class"


class ResourceType(str, Enum):
    """Kind of lesson attachment."""

    PDF = "pdf"
    LINK = "link"
    VIDEO = "video"
    DOCUMENT = "document"


class LessonResource(BaseModel):
    """Attachment of a lesson."""

    name: str
    url: str
    type: ResourceType


class LessonInput(BaseModel):
    """Lesson as provided by authors."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    type: LessonType
    duration: int = Field(default=0, ge=0, description="Minutes")
    order: int = Field(default=0, ge=0)
    is_required: bool = True
    video_url: str | None = None
    live_class_id: str | None = None
    content: str | None = None
    resources: list[LessonResource] = Field(default_factory=list)


class LessonUpdateRequest(BaseModel):
    """Partial lesson update."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    type: LessonType | None = None
    duration: int | None = Field(default=None, ge=0)
    order: int | None = Field(default=None, ge=0)
    is_required: bool | None = None
    video_url: str | None = None
    live_class_id: str | None = None
    content: str | None = None
    resources: list[LessonResource] | None = None


class ModuleInput(BaseModel):
    """Module as provided by authors."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    order: int = Field(default=0, ge=0)
    estimated_hours: float = Field(default=0, ge=0)
    lessons: list[LessonInput] = Field(default_factory=list)


class ModuleUpdateRequest(BaseModel):
    """Partial module update. Lessons are edited through lesson endpoints."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    order: int | None = Field(default=None, ge=0)
    estimated_hours: float | None = Field(default=None, ge=0)


class CurriculumCreateRequest(BaseModel):
    """Request to create or replace a course curriculum."""

    modules: list[ModuleInput] = Field(..., min_length=1)


class LessonResponse(BaseModel):
    """Lesson as stored, plus the recording link in the student view."""

    id: str
    title: str
    description: str | None = None
    type: str
    duration: int
    order: int
    is_required: bool
    video_url: str | None = None
    live_class_id: str | None = None
    content: str | None = None
    resources: list[LessonResource] = Field(default_factory=list)
    recording_url: str | None = None
    recording_id: str | None = None


class ModuleResponse(BaseModel):
    """Module with its lessons."""

    id: str
    title: str
    description: str | None = None
    order: int
    estimated_hours: float
    lessons: list[LessonResponse]


class CurriculumResponse(ORMModel):
    """Full curriculum of a course."""

    id: str
    course_id: str
    modules: list[ModuleResponse]
    total_duration: int
    total_lessons: int
    created_at: datetime
    updated_at: datetime
