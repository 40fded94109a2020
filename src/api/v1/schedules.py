# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schedule event API endpoints.

This module provides endpoints for calendar events:
- POST / - Create event
- GET / - List events with filters
- GET /upcoming - Caller's next scheduled events
- GET /{event_id} - Get event
- PUT /{event_id} - Update event
- DELETE /{event_id} - Delete event
- PATCH /{event_id}/status - Change event status

Single-event operations are scoped to the owning instructor. Admins see and
change every event.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    AuthenticatedUser,
    InstructorUser,
    Page,
    get_schedule_service,
    owner_scope,
)
from src.api.responses import ok, paginated
from src.domains.schedule import ScheduleService
from src.models.common import ApiResponse, MessageResponse, PaginatedList, SortOrder
from src.models.schedule import (
    ScheduleEventCreateRequest,
    ScheduleEventResponse,
    ScheduleEventStatusRequest,
    ScheduleEventUpdateRequest,
)

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[ScheduleEventResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create event",
)
async def create_event(
    data: ScheduleEventCreateRequest,
    current_user: InstructorUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[ScheduleEventResponse]:
    return ok(await service.create_event(data, instructor_id=current_user.id))


@router.get(
    "",
    response_model=ApiResponse[PaginatedList[ScheduleEventResponse]],
    summary="List events",
)
async def list_events(
    current_user: AuthenticatedUser,
    page: Page,
    course_id: str | None = Query(default=None),
    batch_id: str | None = Query(default=None),
    instructor_id: str | None = Query(default=None),
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    event_type: str | None = Query(default=None),
    event_status: str | None = Query(default=None, alias="status"),
    sort_order: SortOrder = Query(default=SortOrder.ASC),
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[PaginatedList[ScheduleEventResponse]]:
    events, total = await service.list_events(
        course_id=course_id,
        batch_id=batch_id,
        instructor_id=instructor_id,
        start_date=start_date,
        end_date=end_date,
        event_type=event_type,
        status=event_status,
        sort_order=sort_order,
        limit=page.limit,
        offset=page.offset,
    )
    return paginated(events, total, page)


@router.get(
    "/upcoming",
    response_model=ApiResponse[list[ScheduleEventResponse]],
    summary="Upcoming events",
)
async def get_upcoming_events(
    current_user: InstructorUser,
    limit: int = Query(default=10, ge=1, le=100),
    instructor_id: str | None = Query(default=None, description="Admins may look up others"),
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[list[ScheduleEventResponse]]:
    target = instructor_id if current_user.is_admin and instructor_id else current_user.id
    return ok(await service.get_upcoming_events(target, limit=limit))


@router.get(
    "/{event_id}",
    response_model=ApiResponse[ScheduleEventResponse],
    summary="Get event",
)
async def get_event(
    event_id: str,
    current_user: InstructorUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[ScheduleEventResponse]:
    return ok(await service.get_event(event_id, owner_scope(current_user)))


@router.put(
    "/{event_id}",
    response_model=ApiResponse[ScheduleEventResponse],
    summary="Update event",
)
async def update_event(
    event_id: str,
    data: ScheduleEventUpdateRequest,
    current_user: InstructorUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[ScheduleEventResponse]:
    return ok(await service.update_event(event_id, data, owner_scope(current_user)))


@router.delete(
    "/{event_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete event",
)
async def delete_event(
    event_id: str,
    current_user: InstructorUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[MessageResponse]:
    await service.delete_event(event_id, owner_scope(current_user))
    return ok(MessageResponse(message="Event deleted"))


@router.patch(
    "/{event_id}/status",
    response_model=ApiResponse[ScheduleEventResponse],
    summary="Change event status",
)
async def update_event_status(
    event_id: str,
    data: ScheduleEventStatusRequest,
    current_user: InstructorUser,
    service: ScheduleService = Depends(get_schedule_service),
) -> ApiResponse[ScheduleEventResponse]:
    return ok(await service.update_event_status(event_id, data.status, owner_scope(current_user)))
