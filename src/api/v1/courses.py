# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course API endpoints.

This module provides endpoints for course management:
- POST / - Create a course
- GET / - List courses with filtering and sorting
- GET /statistics - Catalogue statistics
- GET /{course_id} - Get course details
- PUT /{course_id} - Update course
- DELETE /{course_id} - Delete course (refused while enrollments exist)
- PATCH /{course_id}/status - Move course to another status
- POST /{course_id}/publish - Publish course
- POST /{course_id}/archive - Archive course
- GET /{course_id}/curriculum - Get the course curriculum
- POST /{course_id}/curriculum - Create or replace the course curriculum

Mutations are limited to the owning instructor. Admins may change any course.

Example:
    POST /api/v1/courses
    {
        "title": "Python Fundamentals",
        "category": "programming",
        "level": "beginner",
        "max_students": 40
    }
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    AuthenticatedUser,
    InstructorUser,
    Page,
    StatsUser,
    get_course_service,
    get_curriculum_service,
    owner_scope,
)
from src.api.responses import ok, paginated
from src.domains.course import CourseService
from src.domains.curriculum import CurriculumService
from src.models.common import ApiResponse, MessageResponse, PaginatedList, SortOrder
from src.models.course import (
    CourseCreateRequest,
    CourseResponse,
    CourseSortField,
    CourseStatistics,
    CourseStatusUpdateRequest,
    CourseUpdateRequest,
)
from src.models.curriculum import CurriculumCreateRequest, CurriculumResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ApiResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create course",
)
async def create_course(
    data: CourseCreateRequest,
    current_user: InstructorUser,
    service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseResponse]:
    """Create a course owned by the caller."""
    course = await service.create_course(data, current_user.id, current_user.name)
    return ok(course)


@router.get(
    "",
    response_model=ApiResponse[PaginatedList[CourseResponse]],
    summary="List courses",
)
async def list_courses(
    current_user: AuthenticatedUser,
    page: Page,
    search: str | None = Query(default=None, description="Search title, description and tags"),
    category: str | None = Query(default=None),
    level: str | None = Query(default=None),
    course_status: str | None = Query(default=None, alias="status"),
    instructor_id: str | None = Query(default=None),
    sort_by: CourseSortField = Query(default=CourseSortField.CREATED_AT),
    sort_order: SortOrder = Query(default=SortOrder.DESC),
    service: CourseService = Depends(get_course_service),
) -> ApiResponse[PaginatedList[CourseResponse]]:
    """List courses. ``all`` disables a filter."""
    courses, total = await service.list_courses(
        search=search,
        category=category,
        level=level,
        status=course_status,
        instructor_id=instructor_id,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=page.limit,
        offset=page.offset,
    )
    return paginated(courses, total, page)


@router.get(
    "/statistics",
    response_model=ApiResponse[CourseStatistics],
    summary="Course statistics",
)
async def get_course_statistics(
    current_user: StatsUser,
    service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseStatistics]:
    return ok(await service.get_statistics())


@router.get(
    "/{course_id}",
    response_model=ApiResponse[CourseResponse],
    summary="Get course",
)
async def get_course(
    course_id: str,
    current_user: AuthenticatedUser,
    service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseResponse]:
    return ok(await service.get_course(course_id))


@router.put(
    "/{course_id}",
    response_model=ApiResponse[CourseResponse],
    summary="Update course",
)
async def update_course(
    course_id: str,
    data: CourseUpdateRequest,
    current_user: InstructorUser,
    service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseResponse]:
    course = await service.update_course(course_id, data, owner_scope(current_user))
    return ok(course)


@router.delete(
    "/{course_id}",
    response_model=ApiResponse[MessageResponse],
    summary="Delete course",
    description="Fails with 409 while any enrollment references the course.",
)
async def delete_course(
    course_id: str,
    current_user: InstructorUser,
    service: CourseService = Depends(get_course_service),
) -> ApiResponse[MessageResponse]:
    await service.delete_course(course_id, owner_scope(current_user))
    return ok(MessageResponse(message="Course deleted"))


@router.patch(
    "/{course_id}/status",
    response_model=ApiResponse[CourseResponse],
    summary="Change course status",
)
async def update_course_status(
    course_id: str,
    data: CourseStatusUpdateRequest,
    current_user: InstructorUser,
    service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseResponse]:
    course = await service.update_status(course_id, data.status, owner_scope(current_user))
    return ok(course)


@router.post(
    "/{course_id}/publish",
    response_model=ApiResponse[CourseResponse],
    summary="Publish course",
)
async def publish_course(
    course_id: str,
    current_user: InstructorUser,
    service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseResponse]:
    return ok(await service.publish_course(course_id, owner_scope(current_user)))


@router.post(
    "/{course_id}/archive",
    response_model=ApiResponse[CourseResponse],
    summary="Archive course",
)
async def archive_course(
    course_id: str,
    current_user: InstructorUser,
    service: CourseService = Depends(get_course_service),
) -> ApiResponse[CourseResponse]:
    return ok(await service.archive_course(course_id, owner_scope(current_user)))


@router.get(
    "/{course_id}/curriculum",
    response_model=ApiResponse[CurriculumResponse],
    summary="Get course curriculum",
)
async def get_course_curriculum(
    course_id: str,
    current_user: AuthenticatedUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> ApiResponse[CurriculumResponse]:
    if current_user.is_student:
        return ok(await service.get_student_curriculum(course_id, current_user.id))
    return ok(await service.get_curriculum(course_id))


@router.post(
    "/{course_id}/curriculum",
    response_model=ApiResponse[CurriculumResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create or replace course curriculum",
)
async def create_course_curriculum(
    course_id: str,
    data: CurriculumCreateRequest,
    current_user: InstructorUser,
    service: CurriculumService = Depends(get_curriculum_service),
) -> ApiResponse[CurriculumResponse]:
    curriculum = await service.create_curriculum(course_id, data, owner_scope(current_user))
    return ok(curriculum)
