# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schedule service for instructor calendars and batch sessions.

This module provides the ScheduleService class for:
- Calendar events (lectures, exams, office hours...) owned by instructors
- Upcoming event lookups
- Dated batch sessions and their tutor assignment
"""

import logging
from datetime import date, datetime
from enum import Enum

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ForbiddenError, NotFoundError, ValidationError
from src.infrastructure.database.models import Batch, BatchSession, Course, ScheduleEvent, User
from src.models.common import SortOrder, UserRole
from src.models.schedule import (
    BatchSessionCreateRequest,
    BatchSessionResponse,
    EventStatus,
    ScheduleEventCreateRequest,
    ScheduleEventResponse,
    ScheduleEventUpdateRequest,
    SessionStatus,
)
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


class ScheduleServiceError(Exception):
    """Base exception for schedule service errors."""

    pass


class ScheduleEventNotFoundError(ScheduleServiceError, NotFoundError):
    """Raised when a schedule event is not found."""

    pass


class ScheduleTargetNotFoundError(ScheduleServiceError, NotFoundError):
    """Raised when the course, batch or tutor referenced does not exist."""

    pass


class BatchSessionNotFoundError(ScheduleServiceError, NotFoundError):
    """Raised when a batch session is not found."""

    pass


class ScheduleAccessDeniedError(ScheduleServiceError, ForbiddenError):
    """Raised when the caller does not own the event or batch."""

    pass


class ScheduleValidationError(ScheduleServiceError, ValidationError):
    """Raised when an update leaves the event inconsistent."""

    pass


_EVENT_SORT_COLUMNS = {
    "start_time": ScheduleEvent.start_time,
    "end_time": ScheduleEvent.end_time,
    "title": ScheduleEvent.title,
    "created_at": ScheduleEvent.created_at,
}


class ScheduleService:
    """Service for schedule events and batch sessions.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # =========================================================================
    # Calendar events
    # =========================================================================

    async def create_event(
        self,
        request: ScheduleEventCreateRequest,
        instructor_id: str,
    ) -> ScheduleEventResponse:
        """Create a calendar event.

        Args:
            request: Event data.
            instructor_id: Owning instructor.

        Returns:
            Created event in ``scheduled`` status.

        Raises:
            ScheduleTargetNotFoundError: If the course does not exist or the
                batch does not belong to it.
        """
        course_result = await self.db.execute(select(Course.id).where(Course.id == request.course_id))
        if course_result.scalar_one_or_none() is None:
            raise ScheduleTargetNotFoundError(f"Course {request.course_id} not found")

        if request.batch_id:
            batch_result = await self.db.execute(
                select(Batch.id).where(
                    Batch.id == request.batch_id,
                    Batch.course_id == request.course_id,
                )
            )
            if batch_result.scalar_one_or_none() is None:
                raise ScheduleTargetNotFoundError(
                    "Batch not found or does not belong to this course"
                )

        event = ScheduleEvent(
            **request.model_dump(mode="python", exclude={"event_type"}),
            event_type=request.event_type.value,
            instructor_id=instructor_id,
            status=EventStatus.SCHEDULED.value,
        )

        self.db.add(event)
        await self.db.commit()
        await self.db.refresh(event)

        logger.info(
            "Created schedule event: id=%s, course=%s, start=%s",
            event.id,
            event.course_id,
            event.start_time,
        )

        return self._to_response(event)

    async def get_event(self, event_id: str, owner_id: str | None) -> ScheduleEventResponse:
        """Get an event owned by the caller.

        Raises:
            ScheduleEventNotFoundError: If event not found.
            ScheduleAccessDeniedError: If the caller does not own it.
        """
        event = await self._get_owned(event_id, owner_id)
        return self._to_response(event)

    async def update_event(
        self,
        event_id: str,
        request: ScheduleEventUpdateRequest,
        owner_id: str | None,
    ) -> ScheduleEventResponse:
        """Update an event.

        Raises:
            ScheduleEventNotFoundError: If event not found.
            ScheduleAccessDeniedError: If the caller does not own it.
            ScheduleValidationError: If end_time ends up before start_time.
        """
        event = await self._get_owned(event_id, owner_id)

        update_data = {
            field: value
            for field, value in request.model_dump(exclude_unset=True).items()
            if value is not None
        }

        start_time = ensure_utc(update_data.get("start_time", event.start_time))
        end_time = ensure_utc(update_data.get("end_time", event.end_time))
        if end_time <= start_time:
            raise ScheduleValidationError("end_time must be after start_time")

        for field, value in update_data.items():
            setattr(event, field, value.value if isinstance(value, Enum) else value)

        await self.db.commit()
        await self.db.refresh(event)

        logger.info("Updated schedule event: id=%s, fields=%s", event_id, sorted(update_data))

        return self._to_response(event)

    async def delete_event(self, event_id: str, owner_id: str | None) -> None:
        """Delete an event.

        Raises:
            ScheduleEventNotFoundError: If event not found.
            ScheduleAccessDeniedError: If the caller does not own it.
        """
        event = await self._get_owned(event_id, owner_id)

        await self.db.delete(event)
        await self.db.commit()

        logger.info("Deleted schedule event: id=%s", event_id)

    async def update_event_status(
        self,
        event_id: str,
        status: EventStatus,
        owner_id: str | None,
    ) -> ScheduleEventResponse:
        """Move an event to another status.

        Raises:
            ScheduleEventNotFoundError: If event not found.
            ScheduleAccessDeniedError: If the caller does not own it.
        """
        event = await self._get_owned(event_id, owner_id)
        event.status = status.value

        await self.db.commit()
        await self.db.refresh(event)

        logger.info("Schedule event status changed: id=%s, status=%s", event_id, status.value)

        return self._to_response(event)

    async def list_events(
        self,
        course_id: str | None = None,
        batch_id: str | None = None,
        instructor_id: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        event_type: str | None = None,
        status: str | None = None,
        sort_by: str = "start_time",
        sort_order: SortOrder = SortOrder.ASC,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ScheduleEventResponse], int]:
        """List events with optional filtering.

        The date range filters on start time and applies only when both
        bounds are given.

        Returns:
            Tuple of (events, total_count).
        """
        query = select(ScheduleEvent)

        if course_id:
            query = query.where(ScheduleEvent.course_id == course_id)
        if batch_id:
            query = query.where(ScheduleEvent.batch_id == batch_id)
        if instructor_id:
            query = query.where(ScheduleEvent.instructor_id == instructor_id)
        if start_date and end_date:
            query = query.where(
                ScheduleEvent.start_time >= start_date,
                ScheduleEvent.start_time <= end_date,
            )
        if event_type and event_type != "all":
            query = query.where(ScheduleEvent.event_type == event_type)
        if status and status != "all":
            query = query.where(ScheduleEvent.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        column = _EVENT_SORT_COLUMNS.get(sort_by, ScheduleEvent.start_time)
        ordering = column.desc() if sort_order == SortOrder.DESC else column.asc()
        query = query.order_by(ordering, ScheduleEvent.id).limit(limit).offset(offset)

        result = await self.db.execute(query)
        return [self._to_response(e) for e in result.scalars().all()], total

    async def get_upcoming_events(
        self,
        instructor_id: str,
        limit: int = 10,
    ) -> list[ScheduleEventResponse]:
        """Next scheduled events of an instructor, soonest first."""
        result = await self.db.execute(
            select(ScheduleEvent)
            .where(
                ScheduleEvent.instructor_id == instructor_id,
                ScheduleEvent.start_time >= utc_now(),
                ScheduleEvent.status == EventStatus.SCHEDULED.value,
            )
            .order_by(ScheduleEvent.start_time.asc())
            .limit(limit)
        )
        return [self._to_response(e) for e in result.scalars().all()]

    # =========================================================================
    # Batch sessions
    # =========================================================================

    async def create_session(
        self,
        request: BatchSessionCreateRequest,
        owner_id: str | None,
    ) -> BatchSessionResponse:
        """Add a dated session to a batch.

        Raises:
            ScheduleTargetNotFoundError: If the batch or tutor does not exist.
            ScheduleAccessDeniedError: If the caller does not own the batch.
            ScheduleValidationError: If end_time is not after start_time.
        """
        if request.end_time <= request.start_time:
            raise ScheduleValidationError("end_time must be after start_time")

        result = await self.db.execute(select(Batch).where(Batch.id == request.batch_id))
        batch = result.scalar_one_or_none()
        if batch is None:
            raise ScheduleTargetNotFoundError(f"Batch {request.batch_id} not found")
        if owner_id is not None and batch.instructor_id != owner_id:
            raise ScheduleAccessDeniedError("You do not own this batch")

        tutor = await self._get_tutor(request.tutor_id) if request.tutor_id else None

        session = BatchSession(
            batch_id=batch.id,
            course_id=batch.course_id,
            date=request.date,
            day_of_week=_day_of_week(request.date),
            start_time=request.start_time,
            end_time=request.end_time,
            session_type=request.session_type.value,
            topic=request.topic,
            status=SessionStatus.SCHEDULED.value,
            tutor_id=tutor.id if tutor else None,
            tutor_name=tutor.name if tutor else None,
        )

        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(session)

        logger.info("Created batch session: id=%s, batch=%s, date=%s", session.id, batch.id, session.date)

        return BatchSessionResponse.model_validate(session)

    async def get_schedule_for_batch(self, batch_id: str) -> list[BatchSessionResponse]:
        """All sessions of a batch in date order.

        Raises:
            ScheduleTargetNotFoundError: If the batch does not exist.
        """
        batch_result = await self.db.execute(select(Batch.id).where(Batch.id == batch_id))
        if batch_result.scalar_one_or_none() is None:
            raise ScheduleTargetNotFoundError(f"Batch {batch_id} not found")

        result = await self.db.execute(
            select(BatchSession)
            .where(BatchSession.batch_id == batch_id)
            .order_by(BatchSession.date.asc(), BatchSession.start_time.asc())
        )
        return [BatchSessionResponse.model_validate(s) for s in result.scalars().all()]

    async def list_all_sessions(
        self,
        batch_id: str | None = None,
        tutor_id: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[BatchSessionResponse], int]:
        """List batch sessions across batches.

        Returns:
            Tuple of (sessions, total_count).
        """
        query = select(BatchSession)

        if batch_id:
            query = query.where(BatchSession.batch_id == batch_id)
        if tutor_id:
            query = query.where(BatchSession.tutor_id == tutor_id)
        if start_date:
            query = query.where(BatchSession.date >= start_date)
        if end_date:
            query = query.where(BatchSession.date <= end_date)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.order_by(BatchSession.date.asc(), BatchSession.start_time.asc(), BatchSession.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(query)
        return [BatchSessionResponse.model_validate(s) for s in result.scalars().all()], total

    async def update_session_tutor(
        self,
        session_id: str,
        tutor_id: str | None,
    ) -> BatchSessionResponse:
        """Assign a tutor to a session, or clear it with None.

        Raises:
            BatchSessionNotFoundError: If session not found.
            ScheduleTargetNotFoundError: If the tutor does not exist.
        """
        result = await self.db.execute(select(BatchSession).where(BatchSession.id == session_id))
        session = result.scalar_one_or_none()
        if session is None:
            raise BatchSessionNotFoundError(f"Session {session_id} not found")

        if tutor_id:
            tutor = await self._get_tutor(tutor_id)
            session.tutor_id = tutor.id
            session.tutor_name = tutor.name
        else:
            session.tutor_id = None
            session.tutor_name = None

        await self.db.commit()
        await self.db.refresh(session)

        logger.info("Session tutor updated: session=%s, tutor=%s", session_id, tutor_id)

        return BatchSessionResponse.model_validate(session)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _get_owned(self, event_id: str, owner_id: str | None) -> ScheduleEvent:
        result = await self.db.execute(select(ScheduleEvent).where(ScheduleEvent.id == event_id))
        event = result.scalar_one_or_none()
        if event is None:
            raise ScheduleEventNotFoundError(f"Schedule event {event_id} not found")
        if owner_id is not None and event.instructor_id != owner_id:
            raise ScheduleAccessDeniedError("You do not own this schedule event")
        return event

    async def _get_tutor(self, tutor_id: str) -> User:
        result = await self.db.execute(select(User).where(User.id == tutor_id))
        tutor = result.scalar_one_or_none()
        if tutor is None or tutor.role.lower() != UserRole.TUTOR.value:
            raise ScheduleTargetNotFoundError(f"Tutor {tutor_id} not found")
        return tutor

    def _to_response(self, event: ScheduleEvent) -> ScheduleEventResponse:
        return ScheduleEventResponse.model_validate(event)


def _day_of_week(value: date) -> int:
    """Day index with Sunday as 0."""
    return (value.weekday() + 1) % 7
