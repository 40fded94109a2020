# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum API endpoints.

This module provides endpoints for authoring a course curriculum:
- GET /{course_id} - Get curriculum (students get the recording-enriched view)
- POST /{course_id} - Create or replace curriculum
- POST /{course_id}/modules - Add module
- PUT /{course_id}/modules/{module_id} - Update module
- DELETE /{course_id}/modules/{module_id} - Delete module
- POST /{course_id}/modules/{module_id}/lessons - Add lesson
- PUT /{course_id}/modules/{module_id}/lessons/{lesson_id} - Update lesson
- DELETE /{course_id}/modules/{module_id}/lessons/{lesson_id} - Delete lesson

Every write returns the whole curriculum with recomputed totals.

Example:
    POST /api/v1/curriculum/{course_id}/modules
    {
        "title": "Getting started",
        "order": 1,
        "lessons": [{"title": "Intro", "type": "video", "duration": 10, "order": 1}]
    }
"""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import (
    AuthenticatedUser,
    InstructorUser,
    get_curriculum_service,
    owner_scope,
)
from src.api.responses import ok
from src.domains.curriculum import CurriculumService
from src.models.common import ApiResponse
from src.models.curriculum import (
    CurriculumCreateRequest,
    CurriculumResponse,
    LessonInput,
    LessonUpdateRequest,
    ModuleInput,
    ModuleUpdateRequest,
)

router = APIRouter()

CurriculumEnvelope = ApiResponse[CurriculumResponse]


@router.get("/{course_id}", response_model=CurriculumEnvelope, summary="Get curriculum")
async def get_curriculum(
    course_id: str,
    current_user: AuthenticatedUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> CurriculumEnvelope:
    """Students see ``recording_url`` on live-class lessons they may watch."""
    if current_user.is_student:
        return ok(await service.get_student_curriculum(course_id, current_user.id))
    return ok(await service.get_curriculum(course_id))


@router.post(
    "/{course_id}",
    response_model=CurriculumEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create or replace curriculum",
)
async def create_curriculum(
    course_id: str,
    data: CurriculumCreateRequest,
    current_user: InstructorUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> CurriculumEnvelope:
    return ok(await service.create_curriculum(course_id, data, owner_scope(current_user)))


@router.post(
    "/{course_id}/modules",
    response_model=CurriculumEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Add module",
)
async def add_module(
    course_id: str,
    data: ModuleInput,
    current_user: InstructorUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> CurriculumEnvelope:
    return ok(await service.add_module(course_id, data, owner_scope(current_user)))


@router.put(
    "/{course_id}/modules/{module_id}",
    response_model=CurriculumEnvelope,
    summary="Update module",
)
async def update_module(
    course_id: str,
    module_id: str,
    data: ModuleUpdateRequest,
    current_user: InstructorUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> CurriculumEnvelope:
    return ok(await service.update_module(course_id, module_id, data, owner_scope(current_user)))


@router.delete(
    "/{course_id}/modules/{module_id}",
    response_model=CurriculumEnvelope,
    summary="Delete module",
)
async def delete_module(
    course_id: str,
    module_id: str,
    current_user: InstructorUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> CurriculumEnvelope:
    return ok(await service.delete_module(course_id, module_id, owner_scope(current_user)))


@router.post(
    "/{course_id}/modules/{module_id}/lessons",
    response_model=CurriculumEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Add lesson",
)
async def add_lesson(
    course_id: str,
    module_id: str,
    data: LessonInput,
    current_user: InstructorUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> CurriculumEnvelope:
    return ok(await service.add_lesson(course_id, module_id, data, owner_scope(current_user)))


@router.put(
    "/{course_id}/modules/{module_id}/lessons/{lesson_id}",
    response_model=CurriculumEnvelope,
    summary="Update lesson",
)
async def update_lesson(
    course_id: str,
    module_id: str,
    lesson_id: str,
    data: LessonUpdateRequest,
    current_user: InstructorUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> CurriculumEnvelope:
    curriculum = await service.update_lesson(
        course_id, module_id, lesson_id, data, owner_scope(current_user)
    )
    return ok(curriculum)


@router.delete(
    "/{course_id}/modules/{module_id}/lessons/{lesson_id}",
    response_model=CurriculumEnvelope,
    summary="Delete lesson",
)
async def delete_lesson(
    course_id: str,
    module_id: str,
    lesson_id: str,
    current_user: InstructorUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> CurriculumEnvelope:
    curriculum = await service.delete_lesson(
        course_id, module_id, lesson_id, owner_scope(current_user)
    )
    return ok(curriculum)
