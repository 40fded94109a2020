# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models for the LMS record store.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.assignment import Assignment
from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDMixin, new_id
from src.infrastructure.database.models.batch import TUTOR_ACTIVE, Batch, TutorAssignment
from src.infrastructure.database.models.course import Course
from src.infrastructure.database.models.curriculum import Curriculum
from src.infrastructure.database.models.enrollment import SEAT_RELEASED_STATUS, Enrollment
from src.infrastructure.database.models.live_class import LiveClassRecording
from src.infrastructure.database.models.schedule import BatchSession, ScheduleEvent
from src.infrastructure.database.models.user import User

__all__ = [
    "Assignment",
    "Base",
    "Batch",
    "BatchSession",
    "Course",
    "Curriculum",
    "Enrollment",
    "LiveClassRecording",
    "ScheduleEvent",
    "SEAT_RELEASED_STATUS",
    "TimestampMixin",
    "TUTOR_ACTIVE",
    "TutorAssignment",
    "UUIDMixin",
    "User",
    "new_id",
]
