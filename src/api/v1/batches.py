# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch API endpoints.

This module provides endpoints for batch management:
- POST / - Create batch for a course
- GET / - List batches with filtering and sorting
- GET /{batch_id} - Get batch details
- PUT /{batch_id} - Update batch
- DELETE /{batch_id} - Delete batch (refused while enrollments exist)
- GET /{batch_id}/students - List batch students
- POST /{batch_id}/students - Enroll a student into the batch
- DELETE /{batch_id}/students/{student_id} - Drop a student from the batch
- GET /{batch_id}/tutors - List assigned tutors
- POST /{batch_id}/tutors - Assign tutor (admin only)
- DELETE /{batch_id}/tutors/{tutor_id} - Unassign tutor (admin only)
- GET /{batch_id}/sessions - Dated sessions of the batch

Adding and removing students share the capacity-checked enroll and drop
paths of the enrollments API.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from src.api.dependencies import (
    AdminUser,
    AuthenticatedUser,
    InstructorUser,
    Mailer,
    Page,
    get_batch_service,
    get_schedule_service,
    owner_scope,
)
from src.api.responses import ok, paginated
from src.domains.batch import BatchService
from src.domains.schedule import ScheduleService
from src.models.batch import (
    BatchCreateRequest,
    BatchResponse,
    BatchSortField,
    BatchStudentAddRequest,
    BatchUpdateRequest,
    TutorAssignmentResponse,
    TutorAssignRequest,
)
from src.models.common import ApiResponse, MessageResponse, PaginatedList, SortOrder
from src.models.enrollment import EnrollmentResponse
from src.models.schedule import BatchSessionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[BatchResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create batch",
)
async def create_batch(
    data: BatchCreateRequest,
    current_user: InstructorUser,
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[BatchResponse]:
    return ok(await service.create_batch(data, owner_scope(current_user)))


@router.get(
    "",
    response_model=ApiResponse[PaginatedList[BatchResponse]],
    summary="List batches",
)
async def list_batches(
    current_user: AuthenticatedUser,
    page: Page,
    course_id: str | None = Query(default=None),
    instructor_id: str | None = Query(default=None),
    batch_status: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None),
    sort_by: BatchSortField = Query(default=BatchSortField.CREATED_AT),
    sort_order: SortOrder = Query(default=SortOrder.DESC),
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[PaginatedList[BatchResponse]]:
    batches, total = await service.list_batches(
        course_id=course_id,
        instructor_id=instructor_id,
        status=batch_status,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=page.limit,
        offset=page.offset,
    )
    return paginated(batches, total, page)


@router.get("/{batch_id}", response_model=ApiResponse[BatchResponse], summary="Get batch")
async def get_batch(
    batch_id: str,
    current_user: AuthenticatedUser,
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[BatchResponse]:
    return ok(await service.get_batch(batch_id))


@router.put("/{batch_id}", response_model=ApiResponse[BatchResponse], summary="Update batch")
async def update_batch(
    batch_id: str,
    data: BatchUpdateRequest,
    current_user: InstructorUser,
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[BatchResponse]:
    return ok(await service.update_batch(batch_id, data, owner_scope(current_user)))


@router.delete(
    "/{batch_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete batch",
    description="Fails with 409 while any enrollment references the batch.",
)
async def delete_batch(
    batch_id: str,
    current_user: InstructorUser,
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[MessageResponse]:
    await service.delete_batch(batch_id, owner_scope(current_user))
    return ok(MessageResponse(message="Batch deleted"))


# =========================================================================
# Students
# =========================================================================


@router.get(
    "/{batch_id}/students",
    response_model=ApiResponse[list[EnrollmentResponse]],
    summary="List batch students",
)
async def list_batch_students(
    batch_id: str,
    current_user: InstructorUser,
    include_dropped: bool = Query(default=False),
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[list[EnrollmentResponse]]:
    students = await service.list_students(batch_id, owner_scope(current_user), include_dropped)
    return ok(students)


@router.post(
    "/{batch_id}/students",
    response_model=ApiResponse[EnrollmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add student to batch",
    description="Enrolls the student into the batch's course. 409 when the batch is full.",
)
async def add_batch_student(
    batch_id: str,
    data: BatchStudentAddRequest,
    current_user: InstructorUser,
    background_tasks: BackgroundTasks,
    mailer: Mailer,
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[EnrollmentResponse]:
    enrollment = await service.add_student(
        batch_id, data, owner_scope(current_user), added_by=current_user.id
    )
    batch = await service.get_batch(batch_id)
    background_tasks.add_task(
        mailer.send_enrollment_confirmation,
        enrollment.student_email,
        enrollment.student_name,
        batch.course_name,
    )
    return ok(enrollment)


@router.delete(
    "/{batch_id}/students/{student_id}",
    response_model=ApiResponse[EnrollmentResponse],
    summary="Remove student from batch",
    description="Drops the student's enrollment and frees the seat.",
)
async def remove_batch_student(
    batch_id: str,
    student_id: str,
    current_user: InstructorUser,
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[EnrollmentResponse]:
    enrollment = await service.remove_student(
        batch_id, student_id, owner_scope(current_user), removed_by=current_user.id
    )
    return ok(enrollment)


# =========================================================================
# Tutors
# =========================================================================


@router.get(
    "/{batch_id}/tutors",
    response_model=ApiResponse[list[TutorAssignmentResponse]],
    summary="List batch tutors",
)
async def get_batch_tutors(
    batch_id: str,
    current_user: InstructorUser,
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[list[TutorAssignmentResponse]]:
    return ok(await service.get_batch_tutors(batch_id, owner_scope(current_user)))


@router.post(
    "/{batch_id}/tutors",
    response_model=ApiResponse[TutorAssignmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Assign tutor to batch",
)
async def add_batch_tutor(
    batch_id: str,
    data: TutorAssignRequest,
    current_user: AdminUser,
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[TutorAssignmentResponse]:
    return ok(await service.add_tutor(batch_id, data.tutor_id, owner_id=None))


@router.delete(
    "/{batch_id}/tutors/{tutor_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Unassign tutor from batch",
)
async def remove_batch_tutor(
    batch_id: str,
    tutor_id: str,
    current_user: AdminUser,
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[MessageResponse]:
    await service.remove_tutor(batch_id, tutor_id, owner_id=None)
    return ok(MessageResponse(message="Tutor removed from batch"))


@router.get(
    "/{batch_id}/sessions",
    response_model=ApiResponse[list[BatchSessionResponse]],
    summary="Batch sessions",
)
async def get_batch_sessions(
    batch_id: str,
    current_user: AuthenticatedUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[list[BatchSessionResponse]]:
    return ok(await service.get_schedule_for_batch(batch_id))
