# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment service for course coursework.

This module provides the AssignmentService class for:
- Assignment CRUD scoped to the owning instructor
- Publishing
- Due-date window queries for calendars
"""

import logging
from datetime import datetime
from enum import Enum

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ForbiddenError, NotFoundError, ValidationError
from src.infrastructure.database.models import Assignment, Batch, Course
from src.models.assignment import (
    AssignmentCreateRequest,
    AssignmentResponse,
    AssignmentSortField,
    AssignmentStatus,
    AssignmentUpdateRequest,
)
from src.models.common import SortOrder
from src.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)


class AssignmentServiceError(Exception):
    """Base exception for assignment service errors."""

    pass


class AssignmentNotFoundError(AssignmentServiceError, NotFoundError):
    """Raised when assignment is not found."""

    pass


class AssignmentCourseNotFoundError(AssignmentServiceError, NotFoundError):
    """Raised when the course or batch referenced by an assignment does not exist."""

    pass


class AssignmentAccessDeniedError(AssignmentServiceError, ForbiddenError):
    """Raised when the caller does not own the assignment or its course."""

    pass


class AssignmentValidationError(AssignmentServiceError, ValidationError):
    """Raised when an update leaves the assignment inconsistent."""

    pass


_SORT_COLUMNS = {
    AssignmentSortField.TITLE: Assignment.title,
    AssignmentSortField.DUE_DATE: Assignment.due_date,
    AssignmentSortField.CREATED_AT: Assignment.created_at,
    AssignmentSortField.DIFFICULTY: Assignment.difficulty,
    AssignmentSortField.MAX_SCORE: Assignment.max_score,
}


class AssignmentService:
    """Service for managing assignments.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_assignment(
        self,
        request: AssignmentCreateRequest,
        instructor_id: str,
        owner_id: str | None,
    ) -> AssignmentResponse:
        """Create a draft assignment for a course.

        Args:
            request: Assignment data.
            instructor_id: Instructor recorded as the author.
            owner_id: Instructor the course must belong to, None for admins.

        Returns:
            Created assignment.

        Raises:
            AssignmentCourseNotFoundError: If the course or batch does not exist.
            AssignmentAccessDeniedError: If the caller does not own the course.
        """
        result = await self.db.execute(select(Course).where(Course.id == request.course_id))
        course = result.scalar_one_or_none()
        if course is None:
            raise AssignmentCourseNotFoundError(f"Course {request.course_id} not found")
        if owner_id is not None and course.instructor_id != owner_id:
            raise AssignmentAccessDeniedError("You do not own this course")

        if request.batch_id:
            batch_result = await self.db.execute(
                select(Batch.id).where(Batch.id == request.batch_id, Batch.course_id == course.id)
            )
            if batch_result.scalar_one_or_none() is None:
                raise AssignmentCourseNotFoundError(
                    f"Batch {request.batch_id} not found in course {course.id}"
                )

        assignment = Assignment(
            **request.model_dump(mode="python", exclude={"type", "difficulty"}),
            type=request.type.value,
            difficulty=request.difficulty.value,
            course_name=course.title,
            instructor_id=instructor_id,
            status=AssignmentStatus.DRAFT.value,
            is_published=False,
            total_submissions=0,
            graded_submissions=0,
            average_score=0.0,
            completion_rate=0.0,
        )

        self.db.add(assignment)
        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info(
            "Created assignment: id=%s, course=%s, due=%s",
            assignment.id,
            course.id,
            assignment.due_date,
        )

        return self._to_response(assignment)

    async def list_assignments(
        self,
        course_id: str | None = None,
        batch_id: str | None = None,
        instructor_id: str | None = None,
        assignment_type: str | None = None,
        status: str | None = None,
        difficulty: str | None = None,
        search: str | None = None,
        sort_by: AssignmentSortField = AssignmentSortField.DUE_DATE,
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[AssignmentResponse], int]:
        """List assignments with optional filtering.

        Returns:
            Tuple of (assignments, total_count).
        """
        query = select(Assignment)

        if course_id:
            query = query.where(Assignment.course_id == course_id)
        if batch_id:
            query = query.where(Assignment.batch_id == batch_id)
        if instructor_id:
            query = query.where(Assignment.instructor_id == instructor_id)
        if assignment_type and assignment_type != "all":
            query = query.where(Assignment.type == assignment_type)
        if status and status != "all":
            query = query.where(Assignment.status == status)
        if difficulty and difficulty != "all":
            query = query.where(Assignment.difficulty == difficulty)
        if search:
            search_pattern = f"%{search}%"
            query = query.where(
                or_(
                    Assignment.title.ilike(search_pattern),
                    Assignment.description.ilike(search_pattern),
                )
            )

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        column = _SORT_COLUMNS[sort_by]
        ordering = column.asc() if sort_order == SortOrder.ASC else column.desc()
        query = query.order_by(ordering, Assignment.id).limit(limit).offset(offset)

        result = await self.db.execute(query)
        return [self._to_response(a) for a in result.scalars().all()], total

    async def get_assignment(self, assignment_id: str) -> AssignmentResponse:
        """Get assignment by ID.

        Raises:
            AssignmentNotFoundError: If assignment not found.
        """
        assignment = await self._get_by_id(assignment_id)
        return self._to_response(assignment)

    async def update_assignment(
        self,
        assignment_id: str,
        request: AssignmentUpdateRequest,
        owner_id: str | None,
    ) -> AssignmentResponse:
        """Update an assignment.

        The merged result must still have due_date after assigned_date and
        passing_score no greater than max_score.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            AssignmentAccessDeniedError: If the caller does not own it.
            AssignmentValidationError: If the merged values are inconsistent.
        """
        assignment = await self._get_owned(assignment_id, owner_id)

        update_data = {
            field: value
            for field, value in request.model_dump(exclude_unset=True).items()
            if value is not None
        }

        assigned_date = ensure_utc(update_data.get("assigned_date", assignment.assigned_date))
        due_date = ensure_utc(update_data.get("due_date", assignment.due_date))
        if due_date <= assigned_date:
            raise AssignmentValidationError("due_date must be after assigned_date")

        max_score = update_data.get("max_score", assignment.max_score)
        passing_score = update_data.get("passing_score", assignment.passing_score)
        if passing_score > max_score:
            raise AssignmentValidationError("passing_score cannot exceed max_score")

        for field, value in update_data.items():
            setattr(assignment, field, value.value if isinstance(value, Enum) else value)
        if update_data.get("status") == AssignmentStatus.PUBLISHED:
            assignment.is_published = True

        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info("Updated assignment: id=%s, fields=%s", assignment_id, sorted(update_data))

        return self._to_response(assignment)

    async def delete_assignment(self, assignment_id: str, owner_id: str | None) -> None:
        """Delete an assignment.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            AssignmentAccessDeniedError: If the caller does not own it.
        """
        assignment = await self._get_owned(assignment_id, owner_id)

        await self.db.delete(assignment)
        await self.db.commit()

        logger.info("Deleted assignment: id=%s", assignment_id)

    async def publish_assignment(self, assignment_id: str, owner_id: str | None) -> AssignmentResponse:
        """Publish an assignment so students can see it.

        Raises:
            AssignmentNotFoundError: If assignment not found.
            AssignmentAccessDeniedError: If the caller does not own it.
        """
        assignment = await self._get_owned(assignment_id, owner_id)

        assignment.status = AssignmentStatus.PUBLISHED.value
        assignment.is_published = True

        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info("Published assignment: id=%s", assignment_id)

        return self._to_response(assignment)

    async def list_by_due_date(
        self,
        start: datetime,
        end: datetime,
        instructor_id: str | None = None,
    ) -> list[AssignmentResponse]:
        """List published assignments due within [start, end], soonest first.

        Raises:
            AssignmentValidationError: If end is before start.
        """
        if ensure_utc(end) < ensure_utc(start):
            raise AssignmentValidationError("end_date must not be before start_date")

        query = select(Assignment).where(
            Assignment.due_date >= start,
            Assignment.due_date <= end,
            Assignment.status == AssignmentStatus.PUBLISHED.value,
        )
        if instructor_id:
            query = query.where(Assignment.instructor_id == instructor_id)

        result = await self.db.execute(query.order_by(Assignment.due_date.asc()))
        return [self._to_response(a) for a in result.scalars().all()]

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _get_by_id(self, assignment_id: str) -> Assignment:
        result = await self.db.execute(select(Assignment).where(Assignment.id == assignment_id))
        assignment = result.scalar_one_or_none()
        if assignment is None:
            raise AssignmentNotFoundError(f"Assignment {assignment_id} not found")
        return assignment

    async def _get_owned(self, assignment_id: str, owner_id: str | None) -> Assignment:
        assignment = await self._get_by_id(assignment_id)
        if owner_id is not None and assignment.instructor_id != owner_id:
            raise AssignmentAccessDeniedError("You do not own this assignment")
        return assignment

    def _to_response(self, assignment: Assignment) -> AssignmentResponse:
        return AssignmentResponse.model_validate(assignment)
