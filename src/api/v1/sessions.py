# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch session and tutor endpoints.

Sessions router:
- GET / - List sessions across batches
- POST / - Add a dated session to a batch
- PUT /{session_id}/tutor - Assign or clear the session tutor (admin only)

Tutors router:
- GET / - Active users with the tutor role
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    AdminUser,
    AuthenticatedUser,
    InstructorUser,
    Page,
    RequireRole,
    get_batch_service,
    get_schedule_service,
    owner_scope,
)
from src.api.middleware.auth import CurrentUser
from src.api.responses import ok, paginated
from src.domains.batch import BatchService
from src.domains.schedule import ScheduleService
from src.models.batch import TutorSummary
from src.models.common import ApiResponse, PaginatedList, UserRole
from src.models.schedule import (
    BatchSessionCreateRequest,
    BatchSessionResponse,
    SessionTutorUpdateRequest,
)

router = APIRouter()
tutors_router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[PaginatedList[BatchSessionResponse]],
    summary="List sessions",
)
async def list_sessions(
    current_user: AuthenticatedUser,
    page: Page,
    batch_id: str | None = Query(default=None),
    tutor_id: str | None = Query(default=None),
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[PaginatedList[BatchSessionResponse]]:
    sessions, total = await service.list_all_sessions(
        batch_id=batch_id,
        tutor_id=tutor_id,
        start_date=start_date,
        end_date=end_date,
        limit=page.limit,
        offset=page.offset,
    )
    return paginated(sessions, total, page)


@router.post(
    "",
    response_model=ApiResponse[BatchSessionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create session",
)
async def create_session(
    data: BatchSessionCreateRequest,
    current_user: InstructorUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[BatchSessionResponse]:
    return ok(await service.create_session(data, owner_scope(current_user)))


@router.put(
    "/{session_id}/tutor",
    response_model=ApiResponse[BatchSessionResponse],
    summary="Assign session tutor",
)
async def update_session_tutor(
    session_id: str,
    data: SessionTutorUpdateRequest,
    current_user: AdminUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[BatchSessionResponse]:
    return ok(await service.update_session_tutor(session_id, data.tutor_id))


@tutors_router.get(
    "",
    response_model=ApiResponse[list[TutorSummary]],
    summary="List tutors",
)
async def list_tutors(
    current_user: CurrentUser = Depends(
        RequireRole(UserRole.ADMIN.value, UserRole.SUPPORT.value)
    ),
    service: BatchService = Depends(get_batch_service),
) -> ApiResponse[list[TutorSummary]]:
    return ok(await service.list_tutors())
