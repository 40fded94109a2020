# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Seat accounting for courses and batches.

``Course.enrolled_students`` and ``Batch.enrolled_students`` are kept equal
to the number of seat-holding enrollments (every status but ``dropped``)
that reference them. The SeatLedger is the only code that writes those
counters:

- claim(): capacity check plus increment, used by enroll and reactivation
- release(): idempotent drop plus decrement, used by drop, batch removal
  and status changes into ``dropped``
- reconcile(): recount from enrollment rows and rewrite drifted counters

The ledger never commits. Callers write the enrollment row and the counter
deltas in the same session and commit once, so a failure before the commit
rolls both back together. Rows are read with SELECT ... FOR UPDATE, always
course before batch, which serializes concurrent enrolls into the same
course on PostgreSQL. Locked reads refresh rows the session already holds,
so counters read earlier in the request are never reused.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import CapacityExceededError
from src.infrastructure.database.models import SEAT_RELEASED_STATUS, Batch, Course, Enrollment
from src.models.enrollment import CounterCorrection, ReconcileReport
from src.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class EnrollmentServiceError(Exception):
    """Base exception for enrollment service errors."""

    pass


class BatchFullError(EnrollmentServiceError, CapacityExceededError):
    """Raised when a batch is at capacity and does not allow a waitlist."""

    pass


class SeatLedger:
    """Maintains course and batch seat counters inside the caller's transaction.

    Attributes:
        db: Async database session shared with the calling service.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def lock_course(self, course_id: str) -> Course | None:
        """Load a course row for update.

        Args:
            course_id: Course identifier.

        Returns:
            The locked course, or None if it does not exist.
        """
        result = await self.db.execute(
            select(Course)
            .where(Course.id == course_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def lock_batch(self, batch_id: str) -> Batch | None:
        """Load a batch row for update. Lock its course first."""
        result = await self.db.execute(
            select(Batch)
            .where(Batch.id == batch_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    def claim(self, course: Course, batch: Batch | None) -> None:
        """Take one seat in the course and, if given, the batch.

        A full batch admits the student anyway when ``allow_waitlist`` is
        set. No waiting state exists: the enrollment is active and the
        counter exceeds ``max_students``.

        Args:
            course: Locked course row.
            batch: Locked batch row, or None for a course-only enrollment.

        Raises:
            BatchFullError: If the batch is full and has no waitlist.
        """
        if batch is not None and batch.enrolled_students >= batch.max_students:
            if not batch.allow_waitlist:
                raise BatchFullError(
                    f"Batch '{batch.name}' is full ({batch.enrolled_students}/{batch.max_students})"
                )
            logger.warning(
                "Admitting over capacity via waitlist flag: batch=%s, enrolled=%s, max=%s",
                batch.id,
                batch.enrolled_students,
                batch.max_students,
            )

        course.enrolled_students += 1
        if batch is not None:
            batch.enrolled_students += 1

    def release(
        self,
        enrollment: Enrollment,
        course: Course,
        batch: Batch | None,
    ) -> bool:
        """Give up the seat held by an enrollment.

        Marks the enrollment dropped and decrements the counters. Releasing
        an enrollment that is already dropped changes nothing.

        Args:
            enrollment: Enrollment to release.
            course: Locked course row the enrollment references.
            batch: Locked batch row the enrollment references, if any.

        Returns:
            True if a seat was released, False if it was already released.
        """
        if not enrollment.holds_seat:
            return False

        enrollment.status = SEAT_RELEASED_STATUS
        enrollment.dropped_at = utc_now()

        course.enrolled_students = self._decrement(course.enrolled_students, "course", course.id)
        if batch is not None:
            batch.enrolled_students = self._decrement(batch.enrolled_students, "batch", batch.id)
        return True

    async def reconcile(self, course_id: str | None = None) -> ReconcileReport:
        """Recount seat-holding enrollments and repair drifted counters.

        Args:
            course_id: Limit the sweep to one course and its batches.

        Returns:
            Report of what was checked and corrected.
        """
        course_query = (
            select(Course).order_by(Course.id).with_for_update().execution_options(populate_existing=True)
        )
        batch_query = (
            select(Batch).order_by(Batch.id).with_for_update().execution_options(populate_existing=True)
        )
        course_counts_query = (
            select(Enrollment.course_id, func.count())
            .where(Enrollment.status != SEAT_RELEASED_STATUS)
            .group_by(Enrollment.course_id)
        )
        batch_counts_query = (
            select(Enrollment.batch_id, func.count())
            .where(Enrollment.status != SEAT_RELEASED_STATUS)
            .where(Enrollment.batch_id.is_not(None))
            .group_by(Enrollment.batch_id)
        )
        if course_id:
            course_query = course_query.where(Course.id == course_id)
            batch_query = batch_query.where(Batch.course_id == course_id)
            course_counts_query = course_counts_query.where(Enrollment.course_id == course_id)
            batch_counts_query = batch_counts_query.where(Enrollment.course_id == course_id)

        courses = (await self.db.execute(course_query)).scalars().all()
        batches = (await self.db.execute(batch_query)).scalars().all()
        course_counts = dict((await self.db.execute(course_counts_query)).all())
        batch_counts = dict((await self.db.execute(batch_counts_query)).all())

        corrections: list[CounterCorrection] = []
        for course in courses:
            actual = course_counts.get(course.id, 0)
            if course.enrolled_students != actual:
                corrections.append(
                    CounterCorrection(
                        entity="course", id=course.id, stored=course.enrolled_students, actual=actual
                    )
                )
                course.enrolled_students = actual

        for batch in batches:
            actual = batch_counts.get(batch.id, 0)
            if batch.enrolled_students != actual:
                corrections.append(
                    CounterCorrection(
                        entity="batch", id=batch.id, stored=batch.enrolled_students, actual=actual
                    )
                )
                batch.enrolled_students = actual

        for correction in corrections:
            logger.warning(
                "Seat counter drift repaired: %s=%s, stored=%s, actual=%s",
                correction.entity,
                correction.id,
                correction.stored,
                correction.actual,
            )

        return ReconcileReport(
            courses_checked=len(courses),
            batches_checked=len(batches),
            corrections=corrections,
        )

    @staticmethod
    def _decrement(value: int, entity: str, entity_id: str) -> int:
        if value <= 0:
            logger.warning(
                "Seat counter already at zero on release: %s=%s", entity, entity_id
            )
            return 0
        return value - 1
