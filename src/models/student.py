# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student self-service views."""

from pydantic import BaseModel

from src.models.assignment import AssignmentResponse
from src.models.enrollment import EnrollmentResponse
from src.models.schedule import ScheduleEventResponse


class StudentDashboard(BaseModel):
    """Aggregated view for a student's home page."""

    student_id: str
    enrollments: list[EnrollmentResponse]
    upcoming_events: list[ScheduleEventResponse]
    pending_assignments: list[AssignmentResponse]
    recent_progress: list[EnrollmentResponse]
