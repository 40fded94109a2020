# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student self-service endpoints.

- GET /me/dashboard - Enrollments, next week's events, open assignments
- GET /me/enrollments - Caller's enrollments
- GET /me/schedules - Events of the caller's courses
- GET /me/assignments - Published assignments of the caller's courses
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import (
    StudentUser,
    get_enrollment_service,
    get_student_service,
)
from src.api.responses import ok
from src.domains.enrollment import EnrollmentService
from src.domains.student import StudentService
from src.models.assignment import AssignmentResponse
from src.models.common import ApiResponse
from src.models.enrollment import EnrollmentResponse
from src.models.schedule import ScheduleEventResponse
from src.models.student import StudentDashboard

router = APIRouter()


@router.get("/me/dashboard", response_model=ApiResponse[StudentDashboard], summary="Dashboard")
async def get_dashboard(
    current_user: StudentUser,
    service: StudentService = Depends(get_student_service),
) -> ApiResponse[StudentDashboard]:
    return ok(await service.get_dashboard(current_user.id))


@router.get(
    "/me/enrollments",
    response_model=ApiResponse[list[EnrollmentResponse]],
    summary="My enrollments",
)
async def get_my_enrollments(
    current_user: StudentUser,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[list[EnrollmentResponse]]:
    return ok(await service.list_student_enrollments(current_user.id))


@router.get(
    "/me/schedules",
    response_model=ApiResponse[list[ScheduleEventResponse]],
    summary="My schedule",
)
async def get_my_schedules(
    current_user: StudentUser,
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    course_id: str | None = Query(default=None),
    service: StudentService = Depends(get_student_service),
) -> ApiResponse[list[ScheduleEventResponse]]:
    events = await service.get_schedules(
        current_user.id, start=start_date, end=end_date, course_id=course_id
    )
    return ok(events)


@router.get(
    "/me/assignments",
    response_model=ApiResponse[list[AssignmentResponse]],
    summary="My assignments",
)
async def get_my_assignments(
    current_user: StudentUser,
    course_id: str | None = Query(default=None),
    pending_only: bool = Query(default=False, description="Only assignments not yet due"),
    service: StudentService = Depends(get_student_service),
) -> ApiResponse[list[AssignmentResponse]]:
    assignments = await service.get_assignments(
        current_user.id, course_id=course_id, pending_only=pending_only
    )
    return ok(assignments)
