# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment API endpoints.

This module provides endpoints for assignment management:
- POST / - Create assignment (starts as draft)
- GET / - List assignments with filtering and sorting
- GET /due-date - Published assignments due within a window
- GET /{assignment_id} - Get assignment details
- PUT /{assignment_id} - Update assignment
- DELETE /{assignment_id} - Delete assignment
- POST /{assignment_id}/publish - Publish assignment
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    AuthenticatedUser,
    InstructorUser,
    Page,
    get_assignment_service,
    owner_scope,
)
from src.api.responses import ok, paginated
from src.domains.assignment import AssignmentService
from src.models.assignment import (
    AssignmentCreateRequest,
    AssignmentResponse,
    AssignmentSortField,
    AssignmentUpdateRequest,
)
from src.models.common import ApiResponse, MessageResponse, PaginatedList, SortOrder

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[AssignmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create assignment",
)
async def create_assignment(
    data: AssignmentCreateRequest,
    current_user: InstructorUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[AssignmentResponse]:
    assignment = await service.create_assignment(
        data,
        instructor_id=current_user.id,
        owner_id=owner_scope(current_user),
    )
    return ok(assignment)


@router.get(
    "",
    response_model=ApiResponse[PaginatedList[AssignmentResponse]],
    summary="List assignments",
)
async def list_assignments(
    current_user: AuthenticatedUser,
    page: Page,
    course_id: str | None = Query(default=None),
    batch_id: str | None = Query(default=None),
    instructor_id: str | None = Query(default=None),
    assignment_type: str | None = Query(default=None, alias="type"),
    assignment_status: str | None = Query(default=None, alias="status"),
    difficulty: str | None = Query(default=None),
    search: str | None = Query(default=None),
    sort_by: AssignmentSortField = Query(default=AssignmentSortField.DUE_DATE),
    sort_order: SortOrder = Query(default=SortOrder.DESC),
    service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[PaginatedList[AssignmentResponse]]:
    assignments, total = await service.list_assignments(
        course_id=course_id,
        batch_id=batch_id,
        instructor_id=instructor_id,
        assignment_type=assignment_type,
        status=assignment_status,
        difficulty=difficulty,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=page.limit,
        offset=page.offset,
    )
    return paginated(assignments, total, page)


@router.get(
    "/due-date",
    response_model=ApiResponse[list[AssignmentResponse]],
    summary="Assignments due in a window",
)
async def list_assignments_by_due_date(
    current_user: AuthenticatedUser,
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    instructor_id: str | None = Query(default=None),
    service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[list[AssignmentResponse]]:
    """Published assignments with a due date in [start_date, end_date], soonest first."""
    return ok(await service.list_by_due_date(start_date, end_date, instructor_id))


@router.get(
    "/{assignment_id}",
    response_model=ApiResponse[AssignmentResponse],
    summary="Get assignment",
)
async def get_assignment(
    assignment_id: str,
    current_user: AuthenticatedUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[AssignmentResponse]:
    return ok(await service.get_assignment(assignment_id))


@router.put(
    "/{assignment_id}",
    response_model=ApiResponse[AssignmentResponse],
    summary="Update assignment",
)
async def update_assignment(
    assignment_id: str,
    data: AssignmentUpdateRequest,
    current_user: InstructorUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[AssignmentResponse]:
    return ok(await service.update_assignment(assignment_id, data, owner_scope(current_user)))


@router.delete(
    "/{assignment_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete assignment",
)
async def delete_assignment(
    assignment_id: str,
    current_user: InstructorUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[MessageResponse]:
    await service.delete_assignment(assignment_id, owner_scope(current_user))
    return ok(MessageResponse(message="Assignment deleted"))


@router.post(
    "/{assignment_id}/publish",
    response_model=ApiResponse[AssignmentResponse],
    summary="Publish assignment",
)
async def publish_assignment(
    assignment_id: str,
    current_user: InstructorUser,
    service: AssignmentService = Depends(get_assignment_service),
) -> ApiResponse[AssignmentResponse]:
    return ok(await service.publish_assignment(assignment_id, owner_scope(current_user)))
