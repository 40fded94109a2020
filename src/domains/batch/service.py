# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch service for cohort management.

This module provides the BatchService class for:
- Batch CRUD scoped to the owning instructor
- Batch roster management (add/remove students)
- Tutor assignment

Roster changes go through the EnrollmentService so that batch seat
counters are only ever written by the seat ledger.
"""

import logging
from enum import Enum

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.enrollment import EnrollmentService
from src.domains.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from src.infrastructure.database.models import (
    SEAT_RELEASED_STATUS,
    TUTOR_ACTIVE,
    Batch,
    Course,
    Enrollment,
    TutorAssignment,
    User,
)
from src.models.batch import (
    BatchCreateRequest,
    BatchResponse,
    BatchSortField,
    BatchStatus,
    BatchStudentAddRequest,
    BatchUpdateRequest,
    TutorAssignmentResponse,
    TutorSummary,
)
from src.models.common import SortOrder, UserRole
from src.models.enrollment import EnrollmentResponse, EnrollRequest
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class BatchServiceError(Exception):
    """Base exception for batch service errors."""

    pass


class BatchNotFoundError(BatchServiceError, NotFoundError):
    """Raised when batch is not found."""

    pass


class BatchCourseNotFoundError(BatchServiceError, NotFoundError):
    """Raised when the batch's course does not exist."""

    pass


class BatchAccessDeniedError(BatchServiceError, ForbiddenError):
    """Raised when the caller does not own the batch or its course."""

    pass


class BatchHasEnrollmentsError(BatchServiceError, ConflictError):
    """Raised when deleting a batch that still has enrollments."""

    pass


class BatchValidationError(BatchServiceError, ValidationError):
    """Raised when an update leaves the batch inconsistent."""

    pass


class TutorNotFoundError(BatchServiceError, NotFoundError):
    """Raised when the tutor user or assignment does not exist."""

    pass


class TutorAlreadyAssignedError(BatchServiceError, ConflictError):
    """Raised when the tutor is already assigned to the batch."""

    pass


_SORT_COLUMNS = {
    BatchSortField.NAME: Batch.name,
    BatchSortField.START_DATE: Batch.start_date,
    BatchSortField.END_DATE: Batch.end_date,
    BatchSortField.MAX_STUDENTS: Batch.max_students,
    BatchSortField.ENROLLED_STUDENTS: Batch.enrolled_students,
    BatchSortField.CREATED_AT: Batch.created_at,
}


class BatchService:
    """Service for managing batches, their rosters and tutors.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize batch service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def create_batch(
        self,
        request: BatchCreateRequest,
        owner_id: str | None,
    ) -> BatchResponse:
        """Create a batch for a course.

        The course title and instructor name are copied onto the batch.

        Args:
            request: Batch creation data.
            owner_id: Instructor the course must belong to, None for admins.

        Returns:
            Created batch.

        Raises:
            BatchCourseNotFoundError: If the course does not exist.
            BatchAccessDeniedError: If the caller does not own the course.
        """
        result = await self.db.execute(select(Course).where(Course.id == request.course_id))
        course = result.scalar_one_or_none()
        if course is None:
            raise BatchCourseNotFoundError(f"Course {request.course_id} not found")
        if owner_id is not None and course.instructor_id != owner_id:
            raise BatchAccessDeniedError("You do not own this course")

        batch = Batch(
            name=request.name,
            description=request.description,
            course_id=course.id,
            course_name=course.title,
            instructor_id=request.instructor_id or course.instructor_id,
            instructor_name=request.instructor_name or course.instructor_name,
            start_date=request.start_date,
            end_date=request.end_date,
            schedule=[slot.model_dump(mode="json") for slot in request.schedule],
            timezone=request.timezone,
            max_students=request.max_students,
            enrolled_students=0,
            waitlist_count=0,
            status=BatchStatus.UPCOMING.value,
            is_public=request.is_public,
            allow_waitlist=request.allow_waitlist,
            auto_enroll=request.auto_enroll,
            completion_rate=0.0,
            average_progress=0.0,
        )

        self.db.add(batch)
        await self.db.commit()
        await self.db.refresh(batch)

        logger.info("Created batch: id=%s, course=%s, name=%s", batch.id, course.id, batch.name)

        return self._to_response(batch)

    async def list_batches(
        self,
        course_id: str | None = None,
        instructor_id: str | None = None,
        status: str | None = None,
        search: str | None = None,
        sort_by: BatchSortField = BatchSortField.CREATED_AT,
        sort_order: SortOrder = SortOrder.DESC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[BatchResponse], int]:
        """List batches with optional filtering.

        Args:
            course_id: Filter by course.
            instructor_id: Filter by owning instructor.
            status: Filter by status ("all" disables the filter).
            search: Substring matched against name, description and course name.
            sort_by: Sort column.
            sort_order: Sort direction.
            limit: Maximum number of results.
            offset: Number of results to skip.

        Returns:
            Tuple of (batches, total_count).
        """
        query = select(Batch)

        if course_id:
            query = query.where(Batch.course_id == course_id)
        if instructor_id:
            query = query.where(Batch.instructor_id == instructor_id)
        if status and status != "all":
            query = query.where(Batch.status == status)
        if search and search.strip():
            search_pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Batch.name.ilike(search_pattern),
                    Batch.description.ilike(search_pattern),
                    Batch.course_name.ilike(search_pattern),
                )
            )

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        column = _SORT_COLUMNS[sort_by]
        ordering = column.asc() if sort_order == SortOrder.ASC else column.desc()
        query = query.order_by(ordering, Batch.id).limit(limit).offset(offset)

        result = await self.db.execute(query)
        batches = result.scalars().all()

        return [self._to_response(b) for b in batches], total

    async def get_batch(self, batch_id: str) -> BatchResponse:
        """Get batch by ID.

        Raises:
            BatchNotFoundError: If batch not found.
        """
        batch = await self._get_by_id(batch_id)
        return self._to_response(batch)

    async def update_batch(
        self,
        batch_id: str,
        request: BatchUpdateRequest,
        owner_id: str | None,
    ) -> BatchResponse:
        """Update a batch.

        Raises:
            BatchNotFoundError: If batch not found.
            BatchAccessDeniedError: If the caller does not own the batch.
            BatchValidationError: If max_students drops below the enrolled
                count or the dates end up inverted.
        """
        batch = await self._get_owned(batch_id, owner_id)

        update_data = request.model_dump(exclude_unset=True)
        new_max = update_data.get("max_students")
        if new_max is not None and new_max < batch.enrolled_students:
            raise BatchValidationError(
                f"max_students cannot be lower than the {batch.enrolled_students} enrolled students"
            )

        start_date = ensure_utc(update_data.get("start_date") or batch.start_date)
        end_date = ensure_utc(update_data.get("end_date") or batch.end_date)
        if end_date <= start_date:
            raise BatchValidationError("end_date must be after start_date")

        for field, value in update_data.items():
            if value is None:
                continue
            if field == "schedule":
                value = [slot.model_dump(mode="json") for slot in request.schedule or []]
            setattr(batch, field, value.value if isinstance(value, Enum) else value)

        await self.db.commit()
        await self.db.refresh(batch)

        logger.info("Updated batch: id=%s, fields=%s", batch_id, sorted(update_data))

        return self._to_response(batch)

    async def delete_batch(self, batch_id: str, owner_id: str | None) -> None:
        """Delete a batch that has never had enrollments.

        Raises:
            BatchNotFoundError: If batch not found.
            BatchAccessDeniedError: If the caller does not own the batch.
            BatchHasEnrollmentsError: If any enrollment references the batch.
        """
        batch = await self._get_owned(batch_id, owner_id)

        result = await self.db.execute(
            select(func.count()).select_from(Enrollment).where(Enrollment.batch_id == batch_id)
        )
        enrollment_count = result.scalar() or 0
        if enrollment_count > 0:
            raise BatchHasEnrollmentsError(
                f"Cannot delete batch with {enrollment_count} enrollments"
            )

        await self.db.delete(batch)
        await self.db.commit()

        logger.info("Deleted batch: id=%s", batch_id)

    # =========================================================================
    # Roster
    # =========================================================================

    async def list_students(
        self,
        batch_id: str,
        owner_id: str | None,
        include_dropped: bool = False,
    ) -> list[EnrollmentResponse]:
        """List the enrollments of a batch, newest first.

        Raises:
            BatchNotFoundError: If batch not found.
            BatchAccessDeniedError: If the caller does not own the batch.
        """
        await self._get_owned(batch_id, owner_id)

        query = select(Enrollment).where(Enrollment.batch_id == batch_id)
        if not include_dropped:
            query = query.where(Enrollment.status != SEAT_RELEASED_STATUS)
        query = query.order_by(Enrollment.enrolled_at.desc())

        result = await self.db.execute(query)
        return [EnrollmentResponse.model_validate(e) for e in result.scalars().all()]

    async def add_student(
        self,
        batch_id: str,
        request: BatchStudentAddRequest,
        owner_id: str | None,
        added_by: str,
    ) -> EnrollmentResponse:
        """Enroll a student into the batch's course and the batch.

        Raises:
            BatchNotFoundError: If batch not found.
            BatchAccessDeniedError: If the caller does not own the batch.
            AlreadyEnrolledError: If the student is already in the course.
            BatchFullError: If the batch is full and has no waitlist.
        """
        batch = await self._get_owned(batch_id, owner_id)

        enroll_request = EnrollRequest(
            student_id=request.student_id,
            student_name=request.student_name,
            student_email=request.student_email,
            course_id=batch.course_id,
            batch_id=batch.id,
            payment_amount=request.payment_amount,
        )
        return await EnrollmentService(self.db).enroll(enroll_request, enrolled_by=added_by)

    async def remove_student(
        self,
        batch_id: str,
        student_id: str,
        owner_id: str | None,
        removed_by: str,
    ) -> EnrollmentResponse:
        """Drop a student's enrollment in the batch, releasing the seat.

        Raises:
            BatchNotFoundError: If batch not found.
            BatchAccessDeniedError: If the caller does not own the batch.
            EnrollmentNotFoundError: If the student is not in the batch.
        """
        await self._get_owned(batch_id, owner_id)
        return await EnrollmentService(self.db).drop_from_batch(
            batch_id, student_id, dropped_by=removed_by
        )

    # =========================================================================
    # Tutors
    # =========================================================================

    async def list_tutors(self) -> list[TutorSummary]:
        """List active users holding the tutor role."""
        result = await self.db.execute(
            select(User)
            .where(
                func.lower(User.role) == UserRole.TUTOR.value,
                User.status == "active",
            )
            .order_by(User.name)
        )
        return [TutorSummary.model_validate(u) for u in result.scalars().all()]

    async def get_batch_tutors(
        self,
        batch_id: str,
        owner_id: str | None,
    ) -> list[TutorAssignmentResponse]:
        """List tutors actively assigned to a batch.

        Raises:
            BatchNotFoundError: If batch not found.
            BatchAccessDeniedError: If the caller does not own the batch.
        """
        await self._get_owned(batch_id, owner_id)

        result = await self.db.execute(
            select(TutorAssignment)
            .where(
                TutorAssignment.batch_id == batch_id,
                TutorAssignment.status == TUTOR_ACTIVE,
            )
            .order_by(TutorAssignment.assigned_at)
        )
        return [TutorAssignmentResponse.model_validate(t) for t in result.scalars().all()]

    async def add_tutor(
        self,
        batch_id: str,
        tutor_id: str,
        owner_id: str | None,
    ) -> TutorAssignmentResponse:
        """Assign a tutor to a batch.

        Raises:
            BatchNotFoundError: If batch not found.
            BatchAccessDeniedError: If the caller does not own the batch.
            TutorNotFoundError: If no active tutor user has this ID.
            TutorAlreadyAssignedError: If the tutor is already assigned.
        """
        batch = await self._get_owned(batch_id, owner_id)

        result = await self.db.execute(select(User).where(User.id == tutor_id))
        tutor = result.scalar_one_or_none()
        if tutor is None or tutor.role.lower() != UserRole.TUTOR.value or tutor.status != "active":
            raise TutorNotFoundError(f"Tutor {tutor_id} not found")

        existing = await self._find_assignment(batch_id, tutor_id)
        if existing is not None:
            raise TutorAlreadyAssignedError("Tutor is already assigned to this batch")

        assignment = TutorAssignment(
            tutor_id=tutor.id,
            tutor_name=tutor.name,
            tutor_email=tutor.email,
            batch_id=batch.id,
            course_id=batch.course_id,
            assigned_at=utc_now(),
            status=TUTOR_ACTIVE,
        )
        self.db.add(assignment)
        await self.db.commit()
        await self.db.refresh(assignment)

        logger.info("Assigned tutor: batch=%s, tutor=%s", batch_id, tutor_id)

        return TutorAssignmentResponse.model_validate(assignment)

    async def remove_tutor(self, batch_id: str, tutor_id: str, owner_id: str | None) -> None:
        """Remove a tutor from a batch.

        Raises:
            BatchNotFoundError: If batch not found.
            BatchAccessDeniedError: If the caller does not own the batch.
            TutorNotFoundError: If the tutor is not assigned to the batch.
        """
        await self._get_owned(batch_id, owner_id)

        assignment = await self._find_assignment(batch_id, tutor_id)
        if assignment is None:
            raise TutorNotFoundError("Tutor not found in batch")

        await self.db.delete(assignment)
        await self.db.commit()

        logger.info("Removed tutor: batch=%s, tutor=%s", batch_id, tutor_id)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _get_by_id(self, batch_id: str) -> Batch:
        result = await self.db.execute(select(Batch).where(Batch.id == batch_id))
        batch = result.scalar_one_or_none()
        if batch is None:
            raise BatchNotFoundError(f"Batch {batch_id} not found")
        return batch

    async def _get_owned(self, batch_id: str, owner_id: str | None) -> Batch:
        batch = await self._get_by_id(batch_id)
        if owner_id is not None and batch.instructor_id != owner_id:
            raise BatchAccessDeniedError("You do not own this batch")
        return batch

    async def _find_assignment(self, batch_id: str, tutor_id: str) -> TutorAssignment | None:
        result = await self.db.execute(
            select(TutorAssignment).where(
                TutorAssignment.batch_id == batch_id,
                TutorAssignment.tutor_id == tutor_id,
                TutorAssignment.status == TUTOR_ACTIVE,
            )
        )
        return result.scalar_one_or_none()

    def _to_response(self, batch: Batch) -> BatchResponse:
        return BatchResponse.model_validate(batch)
