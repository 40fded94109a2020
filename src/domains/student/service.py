# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student self-service views.

Everything here is read-only and scoped to the courses the student holds
a seat in. Events and assignments attached to a batch are only shown to
students of that batch.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.models import (
    SEAT_RELEASED_STATUS,
    Assignment,
    Enrollment,
    ScheduleEvent,
)
from src.models.assignment import AssignmentResponse, AssignmentStatus
from src.models.enrollment import EnrollmentResponse
from src.models.schedule import EventStatus, ScheduleEventResponse
from src.models.student import StudentDashboard
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)

DASHBOARD_EVENT_DAYS = 7
DASHBOARD_ITEM_LIMIT = 10


class StudentService:
    """Read models for a student's own data.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_dashboard(self, student_id: str) -> StudentDashboard:
        """Enrollments, events of the next week, open assignments and recent progress."""
        enrollments = await self._seat_holding_enrollments(student_id)
        now = utc_now()

        events = await self._events(
            enrollments,
            start=now,
            end=now + timedelta(days=DASHBOARD_EVENT_DAYS),
            limit=DASHBOARD_ITEM_LIMIT,
        )
        assignments = await self.get_assignments(
            student_id, pending_only=True, limit=DASHBOARD_ITEM_LIMIT
        )

        recent = sorted(
            enrollments,
            key=lambda e: ensure_utc(e.last_accessed_at or e.enrolled_at),
            reverse=True,
        )[:5]

        logger.debug(
            "Built dashboard: student=%s, enrollments=%s, events=%s, assignments=%s",
            student_id,
            len(enrollments),
            len(events),
            len(assignments),
        )

        return StudentDashboard(
            student_id=student_id,
            enrollments=[EnrollmentResponse.model_validate(e) for e in enrollments],
            upcoming_events=events,
            pending_assignments=assignments,
            recent_progress=[EnrollmentResponse.model_validate(e) for e in recent],
        )

    async def get_schedules(
        self,
        student_id: str,
        start: datetime | None = None,
        end: datetime | None = None,
        course_id: str | None = None,
    ) -> list[ScheduleEventResponse]:
        """Events of the student's courses, optionally within [start, end]."""
        enrollments = await self._seat_holding_enrollments(student_id)
        if course_id:
            enrollments = [e for e in enrollments if e.course_id == course_id]
        return await self._events(enrollments, start=start, end=end)

    async def get_assignments(
        self,
        student_id: str,
        course_id: str | None = None,
        pending_only: bool = False,
        limit: int = 50,
    ) -> list[AssignmentResponse]:
        """Published assignments of the student's courses, soonest due first."""
        enrollments = await self._seat_holding_enrollments(student_id)
        if course_id:
            enrollments = [e for e in enrollments if e.course_id == course_id]
        if not enrollments:
            return []

        course_ids = {e.course_id for e in enrollments}
        batch_ids = {e.batch_id for e in enrollments if e.batch_id}

        query = select(Assignment).where(
            Assignment.course_id.in_(course_ids),
            Assignment.status == AssignmentStatus.PUBLISHED.value,
            or_(Assignment.batch_id.is_(None), Assignment.batch_id.in_(batch_ids)),
        )
        if pending_only:
            query = query.where(Assignment.due_date >= utc_now())

        result = await self.db.execute(query.order_by(Assignment.due_date.asc()).limit(limit))
        return [AssignmentResponse.model_validate(a) for a in result.scalars().all()]

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _seat_holding_enrollments(self, student_id: str) -> list[Enrollment]:
        result = await self.db.execute(
            select(Enrollment)
            .where(
                Enrollment.student_id == student_id,
                Enrollment.status != SEAT_RELEASED_STATUS,
            )
            .order_by(Enrollment.enrolled_at.desc())
        )
        return list(result.scalars().all())

    async def _events(
        self,
        enrollments: list[Enrollment],
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
    ) -> list[ScheduleEventResponse]:
        if not enrollments:
            return []

        course_ids = {e.course_id for e in enrollments}
        batch_ids = {e.batch_id for e in enrollments if e.batch_id}

        query = select(ScheduleEvent).where(
            ScheduleEvent.course_id.in_(course_ids),
            ScheduleEvent.status != EventStatus.CANCELLED.value,
            or_(ScheduleEvent.batch_id.is_(None), ScheduleEvent.batch_id.in_(batch_ids)),
        )
        if start:
            query = query.where(ScheduleEvent.start_time >= start)
        if end:
            query = query.where(ScheduleEvent.start_time <= end)

        query = query.order_by(ScheduleEvent.start_time.asc())
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return [ScheduleEventResponse.model_validate(e) for e in result.scalars().all()]
