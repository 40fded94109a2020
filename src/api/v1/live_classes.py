# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Live-class recording API endpoints.

This module provides endpoints for recording access control:
- POST /recordings - Register a finished recording
- GET /recordings/{recording_id} - Get recording (students need access)
- GET /courses/{course_id}/recordings - Recordings of a course
- GET /students/me/recordings - Recordings the caller may watch
- PUT /recordings/{recording_id}/access - Replace access lists
- DELETE /recordings/{recording_id} - Delete recording
- POST /recordings/{recording_id}/views - Record a viewing
"""

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    AuthenticatedUser,
    InstructorUser,
    get_live_class_service,
    owner_scope,
)
from src.api.responses import ok
from src.domains.live_class import LiveClassService
from src.models.common import ApiResponse, MessageResponse, UserRole
from src.models.live_class import (
    RecordingAccessUpdateRequest,
    RecordingCreateRequest,
    RecordingResponse,
    RecordingViewRequest,
)

router = APIRouter()


@router.post(
    "/recordings",
    response_model=ApiResponse[RecordingResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create recording",
    description="Grants access to every active enrollment of the course and batch.",
)
async def create_recording(
    data: RecordingCreateRequest,
    current_user: InstructorUser,
    service: LiveClassService = Depends(get_live_class_service),
) -> ApiResponse[RecordingResponse]:
    recording = await service.create_recording(
        data,
        instructor_id=current_user.id,
        instructor_name=current_user.name,
        owner_id=owner_scope(current_user),
    )
    return ok(recording)


@router.get(
    "/recordings/{recording_id}",
    response_model=ApiResponse[RecordingResponse],
    summary="Get recording",
)
async def get_recording(
    recording_id: str,
    current_user: AuthenticatedUser,
    service: LiveClassService = Depends(get_live_class_service),
) -> ApiResponse[RecordingResponse]:
    student_id = current_user.id if current_user.is_student else None
    tutor_id = current_user.id if current_user.has_any_role(UserRole.TUTOR.value) else None
    return ok(await service.get_recording(recording_id, student_id=student_id, tutor_id=tutor_id))


@router.get(
    "/courses/{course_id}/recordings",
    response_model=ApiResponse[list[RecordingResponse]],
    summary="Course recordings",
)
async def list_course_recordings(
    course_id: str,
    current_user: AuthenticatedUser,
    instructor_id: str | None = Query(default=None),
    service: LiveClassService = Depends(get_live_class_service),
) -> ApiResponse[list[RecordingResponse]]:
    """Students get the recordings they may watch, tutors those of their batches."""
    if current_user.is_student:
        return ok(await service.list_student_recordings(current_user.id, course_id))
    if current_user.has_any_role(UserRole.TUTOR.value):
        return ok(await service.list_tutor_recordings(current_user.id, course_id))
    return ok(await service.list_course_recordings(course_id, instructor_id))


@router.get(
    "/students/me/recordings",
    response_model=ApiResponse[list[RecordingResponse]],
    summary="My recordings",
)
async def list_my_recordings(
    current_user: AuthenticatedUser,
    course_id: str | None = Query(default=None),
    service: LiveClassService = Depends(get_live_class_service),
) -> ApiResponse[list[RecordingResponse]]:
    return ok(await service.list_student_recordings(current_user.id, course_id))


@router.put(
    "/recordings/{recording_id}/access",
    response_model=ApiResponse[RecordingResponse],
    summary="Update recording access",
)
async def update_recording_access(
    recording_id: str,
    data: RecordingAccessUpdateRequest,
    current_user: InstructorUser,
    service: LiveClassService = Depends(get_live_class_service),
) -> ApiResponse[RecordingResponse]:
    return ok(await service.update_access(recording_id, data, owner_scope(current_user)))


@router.delete(
    "/recordings/{recording_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete recording",
)
async def delete_recording(
    recording_id: str,
    current_user: InstructorUser,
    service: LiveClassService = Depends(get_live_class_service),
) -> ApiResponse[MessageResponse]:
    await service.delete_recording(recording_id, owner_scope(current_user))
    return ok(MessageResponse(message="Recording deleted"))


@router.post(
    "/recordings/{recording_id}/views",
    response_model=ApiResponse[RecordingResponse],
    summary="Record a viewing",
)
async def record_view(
    recording_id: str,
    data: RecordingViewRequest,
    current_user: AuthenticatedUser,
    service: LiveClassService = Depends(get_live_class_service),
) -> ApiResponse[RecordingResponse]:
    if current_user.is_student:
        await service.get_recording(recording_id, student_id=current_user.id)
    return ok(await service.record_view(recording_id, data.watch_time))
