# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course service for catalogue management.

This module provides the CourseService class for:
- Course CRUD and status transitions (publish, archive)
- Filtered, sorted, paginated catalogue listing
- Catalogue statistics

Mutations accept an ``owner_id``. When set, the course must belong to that
instructor; admins pass None.
"""

import logging
from enum import Enum

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from src.infrastructure.database.models import Course, Enrollment
from src.models.course import (
    CourseCreateRequest,
    CourseResponse,
    CourseSortField,
    CourseStatistics,
    CourseStatus,
    CourseSummary,
    CourseUpdateRequest,
)
from src.models.common import SortOrder
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class CourseServiceError(Exception):
    """Base exception for course service errors."""

    pass


class CourseNotFoundError(CourseServiceError, NotFoundError):
    """Raised when course is not found."""

    pass


class CourseAccessDeniedError(CourseServiceError, ForbiddenError):
    """Raised when the caller does not own the course."""

    pass


class CourseHasEnrollmentsError(CourseServiceError, ConflictError):
    """Raised when deleting a course that still has enrollments."""

    pass


class CourseCapacityError(CourseServiceError, ValidationError):
    """Raised when max_students would drop below the enrolled count."""

    pass


_SORT_COLUMNS = {
    CourseSortField.TITLE: Course.title,
    CourseSortField.CREATED_AT: Course.created_at,
    CourseSortField.PRICE: Course.price,
    CourseSortField.ENROLLED_STUDENTS: Course.enrolled_students,
    CourseSortField.AVERAGE_RATING: Course.average_rating,
}


class CourseService:
    """Service for managing courses.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize course service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def create_course(
        self,
        request: CourseCreateRequest,
        instructor_id: str,
        instructor_name: str,
    ) -> CourseResponse:
        """Create a new course in draft status.

        Args:
            request: Course creation data.
            instructor_id: Owning instructor.
            instructor_name: Display name of the owning instructor.

        Returns:
            Created course.
        """
        course = Course(
            title=request.title,
            description=request.description,
            category=request.category.value,
            level=request.level.value,
            duration=request.duration,
            price=request.price,
            currency=request.currency.upper(),
            thumbnail=request.thumbnail,
            status=CourseStatus.DRAFT.value,
            instructor_id=instructor_id,
            instructor_name=instructor_name,
            max_students=request.max_students,
            enrolled_students=0,
            completion_rate=0.0,
            average_rating=0.0,
            total_reviews=0,
            is_public=request.is_public,
            allow_self_enrollment=request.allow_self_enrollment,
            certificate_enabled=request.certificate_enabled,
            prerequisites=list(request.prerequisites),
            tags=list(request.tags),
        )

        self.db.add(course)
        await self.db.commit()
        await self.db.refresh(course)

        logger.info("Created course: id=%s, title=%s, by=%s", course.id, course.title, instructor_id)

        return self._to_response(course)

    async def list_courses(
        self,
        search: str | None = None,
        category: str | None = None,
        level: str | None = None,
        status: str | None = None,
        instructor_id: str | None = None,
        sort_by: CourseSortField = CourseSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[CourseResponse], int]:
        """List courses with optional filtering.

        Args:
            search: Substring matched against title, description and tags.
            category: Filter by category ("all" disables the filter).
            level: Filter by level ("all" disables the filter).
            status: Filter by status ("all" disables the filter).
            instructor_id: Filter by owning instructor.
            sort_by: Sort column.
            sort_order: Sort direction.
            limit: Maximum number of results.
            offset: Number of results to skip.

        Returns:
            Tuple of (courses, total_count).
        """
        query = select(Course)

        if search:
            search_pattern = f"%{search}%"
            query = query.where(
                or_(
                    Course.title.ilike(search_pattern),
                    Course.description.ilike(search_pattern),
                    cast(Course.tags, String).ilike(search_pattern),
                )
            )
        if category and category != "all":
            query = query.where(Course.category == category)
        if level and level != "all":
            query = query.where(Course.level == level)
        if status and status != "all":
            query = query.where(Course.status == status)
        if instructor_id:
            query = query.where(Course.instructor_id == instructor_id)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        column = _SORT_COLUMNS[sort_by]
        ordering = column.asc() if sort_order == SortOrder.ASC else column.desc()
        query = query.order_by(ordering, Course.id).limit(limit).offset(offset)

        result = await self.db.execute(query)
        courses = result.scalars().all()

        return [self._to_response(c) for c in courses], total

    async def get_course(self, course_id: str) -> CourseResponse:
        """Get course by ID.

        Raises:
            CourseNotFoundError: If course not found.
        """
        course = await self._get_by_id(course_id)
        return self._to_response(course)

    async def update_course(
        self,
        course_id: str,
        request: CourseUpdateRequest,
        owner_id: str | None,
    ) -> CourseResponse:
        """Update a course.

        Args:
            course_id: Course identifier.
            request: Fields to change.
            owner_id: Instructor the course must belong to, None for admins.

        Returns:
            Updated course.

        Raises:
            CourseNotFoundError: If course not found.
            CourseAccessDeniedError: If the caller does not own the course.
            CourseCapacityError: If max_students is below enrolled_students.
        """
        course = await self._get_owned(course_id, owner_id)

        update_data = request.model_dump(exclude_unset=True)
        new_max = update_data.get("max_students")
        if new_max is not None and new_max < course.enrolled_students:
            raise CourseCapacityError(
                f"max_students cannot be lower than the {course.enrolled_students} enrolled students"
            )

        for field, value in update_data.items():
            if value is None:
                continue
            setattr(course, field, value.value if isinstance(value, Enum) else value)

        await self.db.commit()
        await self.db.refresh(course)

        logger.info("Updated course: id=%s, fields=%s", course_id, sorted(update_data))

        return self._to_response(course)

    async def delete_course(self, course_id: str, owner_id: str | None) -> None:
        """Delete a course that has never had enrollments.

        Raises:
            CourseNotFoundError: If course not found.
            CourseAccessDeniedError: If the caller does not own the course.
            CourseHasEnrollmentsError: If any enrollment references the course.
        """
        course = await self._get_owned(course_id, owner_id)

        enrollment_count = await self._count_enrollments(course_id)
        if enrollment_count > 0:
            raise CourseHasEnrollmentsError(
                f"Cannot delete course with {enrollment_count} enrollments"
            )

        await self.db.delete(course)
        await self.db.commit()

        logger.info("Deleted course: id=%s", course_id)

    async def update_status(
        self,
        course_id: str,
        status: CourseStatus,
        owner_id: str | None,
    ) -> CourseResponse:
        """Move a course to another status.

        Publishing stamps ``published_at`` the first time.

        Raises:
            CourseNotFoundError: If course not found.
            CourseAccessDeniedError: If the caller does not own the course.
        """
        course = await self._get_owned(course_id, owner_id)

        previous = course.status
        course.status = status.value
        if status == CourseStatus.PUBLISHED and course.published_at is None:
            course.published_at = utc_now()

        await self.db.commit()
        await self.db.refresh(course)

        logger.info("Course status changed: id=%s, %s -> %s", course_id, previous, status.value)

        return self._to_response(course)

    async def publish_course(self, course_id: str, owner_id: str | None) -> CourseResponse:
        """Publish a course."""
        return await self.update_status(course_id, CourseStatus.PUBLISHED, owner_id)

    async def archive_course(self, course_id: str, owner_id: str | None) -> CourseResponse:
        """Archive a course."""
        return await self.update_status(course_id, CourseStatus.ARCHIVED, owner_id)

    async def get_statistics(self) -> CourseStatistics:
        """Compute catalogue statistics.

        Returns:
            Totals, per-category and per-level counts, the five best rated
            published courses and the five most recent courses.
        """
        totals = await self.db.execute(
            select(
                func.count(Course.id),
                func.coalesce(func.sum(Course.enrolled_students), 0),
            )
        )
        total_courses, total_enrollments = totals.one()

        by_status = dict(
            (await self.db.execute(select(Course.status, func.count()).group_by(Course.status))).all()
        )
        by_category = dict(
            (await self.db.execute(select(Course.category, func.count()).group_by(Course.category))).all()
        )
        by_level = dict(
            (await self.db.execute(select(Course.level, func.count()).group_by(Course.level))).all()
        )

        top_rated = await self.db.execute(
            select(Course)
            .where(Course.status == CourseStatus.PUBLISHED.value)
            .order_by(Course.average_rating.desc(), Course.total_reviews.desc())
            .limit(5)
        )
        recent = await self.db.execute(select(Course).order_by(Course.created_at.desc()).limit(5))

        return CourseStatistics(
            total_courses=total_courses,
            published_courses=by_status.get(CourseStatus.PUBLISHED.value, 0),
            draft_courses=by_status.get(CourseStatus.DRAFT.value, 0),
            total_enrollments=int(total_enrollments),
            by_category=by_category,
            by_level=by_level,
            top_rated=[CourseSummary.model_validate(c) for c in top_rated.scalars().all()],
            recent=[CourseSummary.model_validate(c) for c in recent.scalars().all()],
        )

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _get_by_id(self, course_id: str) -> Course:
        result = await self.db.execute(select(Course).where(Course.id == course_id))
        course = result.scalar_one_or_none()
        if course is None:
            raise CourseNotFoundError(f"Course {course_id} not found")
        return course

    async def _get_owned(self, course_id: str, owner_id: str | None) -> Course:
        course = await self._get_by_id(course_id)
        if owner_id is not None and course.instructor_id != owner_id:
            raise CourseAccessDeniedError("You do not own this course")
        return course

    async def _count_enrollments(self, course_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Enrollment).where(Enrollment.course_id == course_id)
        )
        return result.scalar() or 0

    def _to_response(self, course: Course) -> CourseResponse:
        return CourseResponse.model_validate(course)
