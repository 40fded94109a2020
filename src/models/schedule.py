# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schedule event and batch session models."""

from datetime import date as date_type
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from src.models.batch import TIME_PATTERN, SessionType
from src.models.common import ORMModel


class EventType(str, Enum):
    """Kind of calendar event."""

    LECTURE = "lecture"
    LAB = "lab"
    SEMINAR = "seminar"
    WORKSHOP = "workshop"
    TUTORIAL = "tutorial"
    EXAM = "exam"
    OFFICE_HOURS = "office_hours"
    OTHER = "other"


class EventStatus(str, Enum):
    """Calendar event status."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionStatus(str, Enum):
    """Batch session status."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ScheduleEventCreateRequest(BaseModel):
    """Request to create a calendar event."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    course_id: str
    batch_id: str | None = None
    event_type: EventType
    start_time: datetime
    end_time: datetime
    location: str | None = None
    meeting_url: str | None = None
    is_recurring: bool = False
    recurrence_pattern: str | None = None
    attendees: list[str] = Field(default_factory=list)
    max_attendees: int | None = Field(default=None, ge=1)
    is_required: bool = True
    materials: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_times(self) -> "ScheduleEventCreateRequest":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class ScheduleEventUpdateRequest(BaseModel):
    """Request to update a calendar event. Only provided fields change."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    event_type: EventType | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = None
    meeting_url: str | None = None
    is_recurring: bool | None = None
    recurrence_pattern: str | None = None
    attendees: list[str] | None = None
    max_attendees: int | None = Field(default=None, ge=1)
    is_required: bool | None = None
    materials: list[str] | None = None


class ScheduleEventStatusRequest(BaseModel):
    """Request to change an event's status."""

    status: EventStatus


class ScheduleEventResponse(ORMModel):
    """Full calendar event representation."""

    id: str
    title: str
    description: str | None = None
    course_id: str
    batch_id: str | None = None
    instructor_id: str
    event_type: str
    start_time: datetime
    end_time: datetime
    location: str | None = None
    meeting_url: str | None = None
    is_recurring: bool
    recurrence_pattern: str | None = None
    attendees: list[str]
    max_attendees: int | None = None
    is_required: bool
    materials: list[str]
    status: str
    created_at: datetime
    updated_at: datetime


class BatchSessionCreateRequest(BaseModel):
    """Request to add a dated session to a batch."""

    batch_id: str
    date: date_type
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)
    session_type: SessionType
    topic: str | None = None
    tutor_id: str | None = None


class SessionTutorUpdateRequest(BaseModel):
    """Request to (re)assign the tutor of a session. None clears it."""

    tutor_id: str | None = None


class BatchSessionResponse(ORMModel):
    """Dated batch session."""

    id: str
    batch_id: str
    course_id: str
    date: date_type
    day_of_week: int
    start_time: str
    end_time: str
    session_type: str
    topic: str | None = None
    status: str
    tutor_id: str | None = None
    tutor_name: str | None = None
