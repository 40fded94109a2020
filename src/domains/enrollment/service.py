# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for managing student course enrollments.

This module provides the EnrollmentService class for:
- Capacity-aware enrollment into a course and optional batch
- Idempotent drops and status transitions
- Progress tracking and certificate issuance
- Seat counter reconciliation

Every operation that changes seat-holding state writes the enrollment and
the course/batch counters through the SeatLedger and commits once.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.enrollment.seats import BatchFullError, EnrollmentServiceError, SeatLedger
from src.domains.errors import ConflictError, InvalidStateError, NotFoundError
from src.infrastructure.database.models import SEAT_RELEASED_STATUS, Batch, Course, Enrollment
from src.models.enrollment import (
    EnrollmentResponse,
    EnrollmentStatus,
    EnrollRequest,
    PaymentStatus,
    ReconcileReport,
    StudentProgressResponse,
)
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class CourseNotFoundError(EnrollmentServiceError, NotFoundError):
    """Raised when the course to enroll in does not exist."""

    pass


class BatchNotFoundError(EnrollmentServiceError, NotFoundError):
    """Raised when the batch does not exist or belongs to another course."""

    pass


class EnrollmentNotFoundError(EnrollmentServiceError, NotFoundError):
    """Raised when an enrollment is not found."""

    pass


class AlreadyEnrolledError(EnrollmentServiceError, ConflictError):
    """Raised when the student already has an enrollment in the course."""

    pass


class CourseNotCompletedError(EnrollmentServiceError, InvalidStateError):
    """Raised when a certificate is requested before progress reaches 100."""

    pass


class CertificateAlreadyIssuedError(EnrollmentServiceError, ConflictError):
    """Raised when a certificate was already issued for the enrollment."""

    pass


class EnrollmentService:
    """Service for managing student enrollments.

    Attributes:
        db: Async database session.
        seats: Seat ledger sharing the same session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize enrollment service.

        Args:
            db: Async database session.
        """
        self.db = db
        self.seats = SeatLedger(db)

    async def enroll(
        self,
        request: EnrollRequest,
        enrolled_by: str,
    ) -> EnrollmentResponse:
        """Enroll a student in a course and, optionally, one of its batches.

        Checks run in order: course exists, no existing enrollment for the
        (student, course) pair, batch exists within the course, batch has
        a free seat or allows a waitlist.

        Args:
            request: Enrollment request data.
            enrolled_by: ID of user performing enrollment.

        Returns:
            The created enrollment.

        Raises:
            CourseNotFoundError: If course not found.
            AlreadyEnrolledError: If the student already has an enrollment.
            BatchNotFoundError: If batch not found in this course.
            BatchFullError: If the batch is full and has no waitlist.
        """
        course = await self.seats.lock_course(request.course_id)
        if course is None:
            raise CourseNotFoundError(f"Course {request.course_id} not found")

        existing = await self._find_enrollment(request.student_id, request.course_id)
        if existing is not None:
            raise AlreadyEnrolledError("Student is already enrolled in this course")

        batch = await self._lock_course_batch(course, request.batch_id)

        self.seats.claim(course, batch)

        enrollment = Enrollment(
            student_id=request.student_id,
            student_name=request.student_name,
            student_email=str(request.student_email),
            course_id=course.id,
            batch_id=batch.id if batch is not None else None,
            enrolled_at=utc_now(),
            status=EnrollmentStatus.ACTIVE.value,
            progress=0,
            completed_lessons=[],
            certificate_issued=False,
            payment_amount=request.payment_amount,
            payment_status=(
                PaymentStatus.PENDING.value
                if request.payment_amount > 0
                else PaymentStatus.PAID.value
            ),
        )
        self.db.add(enrollment)

        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise AlreadyEnrolledError("Student is already enrolled in this course") from e

        await self.db.refresh(enrollment)

        logger.info(
            "Enrolled student: student=%s, course=%s, batch=%s, by=%s",
            request.student_id,
            course.id,
            enrollment.batch_id,
            enrolled_by,
        )

        return self._to_response(enrollment)

    async def get_enrollment(self, enrollment_id: str) -> EnrollmentResponse:
        """Get an enrollment by ID.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
        """
        enrollment = await self._get_enrollment(enrollment_id)
        return self._to_response(enrollment)

    async def list_enrollments(
        self,
        student_id: str | None = None,
        course_id: str | None = None,
        batch_id: str | None = None,
        status: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[EnrollmentResponse], int]:
        """List enrollments, newest first.

        Args:
            student_id: Filter by student.
            course_id: Filter by course.
            batch_id: Filter by batch.
            status: Filter by status. "all" disables the filter.
            limit: Maximum number of results.
            offset: Number of results to skip.

        Returns:
            Tuple of (enrollments, total_count).
        """
        query = select(Enrollment)

        if student_id:
            query = query.where(Enrollment.student_id == student_id)
        if course_id:
            query = query.where(Enrollment.course_id == course_id)
        if batch_id:
            query = query.where(Enrollment.batch_id == batch_id)
        if status and status != "all":
            query = query.where(Enrollment.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(Enrollment.enrolled_at.desc()).limit(limit).offset(offset)
        result = await self.db.execute(query)
        enrollments = result.scalars().all()

        return [self._to_response(e) for e in enrollments], total

    async def list_student_enrollments(self, student_id: str) -> list[EnrollmentResponse]:
        """List every enrollment of a student, newest first."""
        result = await self.db.execute(
            select(Enrollment)
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.enrolled_at.desc())
        )
        return [self._to_response(e) for e in result.scalars().all()]

    async def update_status(
        self,
        enrollment_id: str,
        status: EnrollmentStatus,
        reason: str | None,
        updated_by: str,
    ) -> EnrollmentResponse:
        """Change an enrollment's status.

        Moving into ``dropped`` releases the seat. Moving out of ``dropped``
        claims a seat again and is subject to the batch capacity check.

        Args:
            enrollment_id: Enrollment identifier.
            status: Target status.
            reason: Optional reason recorded on the enrollment.
            updated_by: ID of user performing the change.

        Returns:
            Updated enrollment.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            BatchFullError: If reactivating into a full batch without waitlist.
        """
        enrollment = await self._get_enrollment(enrollment_id, for_update=True)
        previous = enrollment.status

        if status.value == SEAT_RELEASED_STATUS:
            course, batch = await self._lock_seat_rows(enrollment)
            self.seats.release(enrollment, course, batch)
        elif previous == SEAT_RELEASED_STATUS:
            course, batch = await self._lock_seat_rows(enrollment)
            self.seats.claim(course, batch)
            enrollment.status = status.value
            enrollment.dropped_at = None
        else:
            enrollment.status = status.value

        if reason is not None:
            enrollment.status_reason = reason

        await self.db.commit()
        await self.db.refresh(enrollment)

        logger.info(
            "Enrollment status changed: enrollment=%s, %s -> %s, by=%s",
            enrollment_id,
            previous,
            enrollment.status,
            updated_by,
        )

        return self._to_response(enrollment)

    async def update_progress(
        self,
        enrollment_id: str,
        progress: int,
        completed_lessons: list[str],
    ) -> EnrollmentResponse:
        """Overwrite progress and completed lessons.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
        """
        enrollment = await self._get_enrollment(enrollment_id)

        enrollment.progress = progress
        enrollment.completed_lessons = list(completed_lessons)
        enrollment.last_accessed_at = utc_now()

        await self.db.commit()
        await self.db.refresh(enrollment)

        logger.debug("Progress updated: enrollment=%s, progress=%s", enrollment_id, progress)

        return self._to_response(enrollment)

    async def issue_certificate(self, enrollment_id: str, issued_by: str) -> EnrollmentResponse:
        """Issue the completion certificate of an enrollment, exactly once.

        Args:
            enrollment_id: Enrollment identifier.
            issued_by: ID of user issuing the certificate.

        Returns:
            Updated enrollment.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
            CourseNotCompletedError: If progress is below 100.
            CertificateAlreadyIssuedError: If already issued.
        """
        enrollment = await self._get_enrollment(enrollment_id)

        if enrollment.progress < 100:
            raise CourseNotCompletedError("Student has not completed the course")
        if enrollment.certificate_issued:
            raise CertificateAlreadyIssuedError("Certificate already issued")

        enrollment.certificate_issued = True
        enrollment.certificate_issued_at = utc_now()

        await self.db.commit()
        await self.db.refresh(enrollment)

        logger.info("Certificate issued: enrollment=%s, by=%s", enrollment_id, issued_by)

        return self._to_response(enrollment)

    async def get_student_progress(
        self,
        student_id: str,
        course_id: str,
    ) -> StudentProgressResponse:
        """Get a student's progress in a course.

        Raises:
            EnrollmentNotFoundError: If the student is not enrolled.
        """
        result = await self.db.execute(
            select(Enrollment, Course.title)
            .join(Course, Course.id == Enrollment.course_id)
            .where(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
        )
        row = result.first()
        if row is None:
            raise EnrollmentNotFoundError("Enrollment not found")

        enrollment, course_title = row
        return StudentProgressResponse(
            enrollment_id=enrollment.id,
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            course_title=course_title,
            batch_id=enrollment.batch_id,
            status=enrollment.status,
            progress=enrollment.progress,
            completed_lessons=enrollment.completed_lessons or [],
            last_accessed_at=enrollment.last_accessed_at,
            certificate_issued=enrollment.certificate_issued,
        )

    async def drop(self, enrollment_id: str, dropped_by: str) -> EnrollmentResponse:
        """Drop an enrollment and release its seat.

        Dropping an enrollment that is already dropped succeeds without
        touching the counters.

        Raises:
            EnrollmentNotFoundError: If enrollment not found.
        """
        enrollment = await self._get_enrollment(enrollment_id, for_update=True)
        return await self._release(enrollment, dropped_by)

    async def drop_from_batch(
        self,
        batch_id: str,
        student_id: str,
        dropped_by: str,
    ) -> EnrollmentResponse:
        """Drop a student's enrollment in a batch.

        Raises:
            EnrollmentNotFoundError: If the student has no enrollment in the batch.
        """
        result = await self.db.execute(
            select(Enrollment)
            .where(
                Enrollment.batch_id == batch_id,
                Enrollment.student_id == student_id,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        enrollment = result.scalar_one_or_none()
        if enrollment is None:
            raise EnrollmentNotFoundError("Student is not enrolled in this batch")
        return await self._release(enrollment, dropped_by)

    async def reconcile_counters(self, course_id: str | None = None) -> ReconcileReport:
        """Recompute course and batch seat counters from enrollment rows.

        Args:
            course_id: Limit the sweep to one course.

        Returns:
            Report of corrected counters.
        """
        report = await self.seats.reconcile(course_id)
        await self.db.commit()

        logger.info(
            "Seat counters reconciled: courses=%s, batches=%s, corrections=%s",
            report.courses_checked,
            report.batches_checked,
            len(report.corrections),
        )
        return report

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _release(self, enrollment: Enrollment, dropped_by: str) -> EnrollmentResponse:
        if not enrollment.holds_seat:
            logger.info("Enrollment already dropped: enrollment=%s", enrollment.id)
            return self._to_response(enrollment)

        course, batch = await self._lock_seat_rows(enrollment)
        self.seats.release(enrollment, course, batch)

        await self.db.commit()
        await self.db.refresh(enrollment)

        logger.info(
            "Dropped enrollment: enrollment=%s, student=%s, course=%s, batch=%s, by=%s",
            enrollment.id,
            enrollment.student_id,
            enrollment.course_id,
            enrollment.batch_id,
            dropped_by,
        )

        return self._to_response(enrollment)

    async def _lock_course_batch(self, course: Course, batch_id: str | None) -> Batch | None:
        if not batch_id:
            return None

        batch = await self.seats.lock_batch(batch_id)
        if batch is None or batch.course_id != course.id:
            raise BatchNotFoundError(f"Batch {batch_id} not found in course {course.id}")
        return batch

    async def _lock_seat_rows(self, enrollment: Enrollment) -> tuple[Course, Batch | None]:
        course = await self.seats.lock_course(enrollment.course_id)
        if course is None:
            raise CourseNotFoundError(f"Course {enrollment.course_id} not found")

        batch = None
        if enrollment.batch_id:
            batch = await self.seats.lock_batch(enrollment.batch_id)
        return course, batch

    async def _find_enrollment(self, student_id: str, course_id: str) -> Enrollment | None:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.student_id == student_id,
                Enrollment.course_id == course_id,
            )
        )
        return result.scalar_one_or_none()

    async def _get_enrollment(self, enrollment_id: str, for_update: bool = False) -> Enrollment:
        query = select(Enrollment).where(Enrollment.id == enrollment_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        enrollment = result.scalar_one_or_none()
        if enrollment is None:
            raise EnrollmentNotFoundError(f"Enrollment {enrollment_id} not found")
        return enrollment

    def _to_response(self, enrollment: Enrollment) -> EnrollmentResponse:
        return EnrollmentResponse.model_validate(enrollment)


__all__ = [
    "AlreadyEnrolledError",
    "BatchFullError",
    "BatchNotFoundError",
    "CertificateAlreadyIssuedError",
    "CourseNotCompletedError",
    "CourseNotFoundError",
    "EnrollmentNotFoundError",
    "EnrollmentService",
    "EnrollmentServiceError",
]
