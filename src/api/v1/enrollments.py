# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API endpoints.

This module provides endpoints for enrollment management:
- POST / - Enroll a student (capacity checked)
- GET / - List enrollments
- GET /progress - A student's progress in a course
- POST /reconcile - Recompute seat counters (admin only)
- GET /{enrollment_id} - Get enrollment
- PUT /{enrollment_id}/status - Change status
- PUT /{enrollment_id}/progress - Overwrite progress
- POST /{enrollment_id}/certificate - Issue certificate
- POST /{enrollment_id}/drop - Drop enrollment (idempotent)

Students may enroll themselves and read, update progress on, or drop only
their own enrollments. Staff roles act on any enrollment.

Example:
    POST /api/v1/enrollments
    {
        "student_id": "u-1",
        "student_name": "Ada",
        "student_email": "ada@example.com",
        "course_id": "c-1",
        "batch_id": "b-1",
        "payment_amount": 0
    }
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status

from src.api.dependencies import (
    AdminUser,
    AuthenticatedUser,
    InstructorUser,
    Mailer,
    Page,
    RequireRole,
    get_course_service,
    get_enrollment_service,
)
from src.api.middleware.auth import CurrentUser
from src.api.responses import ok, paginated
from src.domains.course import CourseService
from src.domains.enrollment import EnrollmentService
from src.models.common import ApiResponse, PaginatedList, UserRole
from src.models.enrollment import (
    EnrollmentResponse,
    EnrollmentStatusUpdateRequest,
    EnrollRequest,
    ProgressUpdateRequest,
    ReconcileReport,
    StudentProgressResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

ENROLLMENT_MANAGERS = (
    UserRole.ADMIN.value,
    UserRole.INSTRUCTOR.value,
    UserRole.MENTOR.value,
    UserRole.SUPPORT.value,
)

require_enrollment_manager = RequireRole(*ENROLLMENT_MANAGERS)


def _is_manager(user: CurrentUser) -> bool:
    return user.has_any_role(*ENROLLMENT_MANAGERS)


def _ensure_self_or_manager(user: CurrentUser, student_id: str) -> None:
    """Students may only act on their own enrollments."""
    if user.id != student_id and not _is_manager(user):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only access your own enrollments",
        )


@router.post(
    "",
    response_model=ApiResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Enroll student",
    description=(
        "Fails with 404 for an unknown course or batch, 409 for a duplicate "
        "enrollment or a full batch without waitlist."
    ),
)
async def enroll(
    data: EnrollRequest,
    current_user: AuthenticatedUser,
    background_tasks: BackgroundTasks,
    mailer: Mailer,
    service: EnrollmentService = Depends(get_enrollment_service),
    course_service: CourseService = Depends(get_course_service),
) -> ApiResponse[EnrollmentResponse]:
    _ensure_self_or_manager(current_user, data.student_id)

    enrollment = await service.enroll(data, enrolled_by=current_user.id)

    course = await course_service.get_course(enrollment.course_id)
    background_tasks.add_task(
        mailer.send_enrollment_confirmation,
        enrollment.student_email,
        enrollment.student_name,
        course.title,
    )
    return ok(enrollment)


@router.get(
    "",
    response_model=ApiResponse[PaginatedList[EnrollmentResponse]],
    summary="List enrollments",
)
async def list_enrollments(
    current_user: AuthenticatedUser,
    page: Page,
    student_id: str | None = Query(default=None),
    course_id: str | None = Query(default=None),
    batch_id: str | None = Query(default=None),
    enrollment_status: str | None = Query(default=None, alias="status"),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[PaginatedList[EnrollmentResponse]]:
    """Non-staff callers only ever see their own enrollments."""
    if not _is_manager(current_user):
        student_id = current_user.id

    enrollments, total = await service.list_enrollments(
        student_id=student_id,
        course_id=course_id,
        batch_id=batch_id,
        status=enrollment_status,
        limit=page.limit,
        offset=page.offset,
    )
    return paginated(enrollments, total, page)


@router.get(
    "/progress",
    response_model=ApiResponse[StudentProgressResponse],
    summary="Student progress in a course",
)
async def get_student_progress(
    current_user: AuthenticatedUser,
    course_id: str = Query(...),
    student_id: str | None = Query(default=None, description="Defaults to the caller"),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[StudentProgressResponse]:
    student_id = student_id or current_user.id
    _ensure_self_or_manager(current_user, student_id)
    return ok(await service.get_student_progress(student_id, course_id))


@router.post(
    "/reconcile",
    response_model=ApiResponse[ReconcileReport],
    summary="Reconcile seat counters",
    description="Recomputes course and batch counters from enrollment rows.",
)
async def reconcile_counters(
    current_user: AdminUser,
    course_id: str | None = Query(default=None),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[ReconcileReport]:
    return ok(await service.reconcile_counters(course_id))


@router.get(
    "/{enrollment_id}",
    response_model=ApiResponse[EnrollmentResponse],
    summary="Get enrollment",
)
async def get_enrollment(
    enrollment_id: str,
    current_user: AuthenticatedUser,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[EnrollmentResponse]:
    enrollment = await service.get_enrollment(enrollment_id)
    _ensure_self_or_manager(current_user, enrollment.student_id)
    return ok(enrollment)


@router.put(
    "/{enrollment_id}/status",
    response_model=ApiResponse[EnrollmentResponse],
    summary="Change enrollment status",
    description="Moving to dropped frees the seat. Leaving dropped claims it again.",
)
async def update_enrollment_status(
    enrollment_id: str,
    data: EnrollmentStatusUpdateRequest,
    current_user: CurrentUser = Depends(require_enrollment_manager),
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[EnrollmentResponse]:
    enrollment = await service.update_status(
        enrollment_id, data.status, data.reason, updated_by=current_user.id
    )
    return ok(enrollment)


@router.put(
    "/{enrollment_id}/progress",
    response_model=ApiResponse[EnrollmentResponse],
    summary="Update progress",
)
async def update_enrollment_progress(
    enrollment_id: str,
    data: ProgressUpdateRequest,
    current_user: AuthenticatedUser,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[EnrollmentResponse]:
    existing = await service.get_enrollment(enrollment_id)
    _ensure_self_or_manager(current_user, existing.student_id)

    enrollment = await service.update_progress(
        enrollment_id, data.progress, data.completed_lessons
    )
    return ok(enrollment)


@router.post(
    "/{enrollment_id}/certificate",
    response_model=ApiResponse[EnrollmentResponse],
    summary="Issue certificate",
    description="400 before progress reaches 100, 409 when already issued.",
)
async def issue_certificate(
    enrollment_id: str,
    current_user: InstructorUser,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[EnrollmentResponse]:
    return ok(await service.issue_certificate(enrollment_id, issued_by=current_user.id))


@router.post(
    "/{enrollment_id}/drop",
    response_model=ApiResponse[EnrollmentResponse],
    summary="Drop enrollment",
    description="Dropping an already dropped enrollment is a successful no-op.",
)
async def drop_enrollment(
    enrollment_id: str,
    current_user: AuthenticatedUser,
    service: EnrollmentService = Depends(get_enrollment_service),
) -> ApiResponse[EnrollmentResponse]:
    existing = await service.get_enrollment(enrollment_id)
    _ensure_self_or_manager(current_user, existing.student_id)
    return ok(await service.drop(enrollment_id, dropped_by=current_user.id))
