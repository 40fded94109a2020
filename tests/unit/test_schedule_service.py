# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Schedule service."""

from datetime import date, timedelta

import pytest

from src.domains.schedule import (
    BatchSessionNotFoundError,
    ScheduleAccessDeniedError,
    ScheduleEventNotFoundError,
    ScheduleService,
    ScheduleTargetNotFoundError,
    ScheduleValidationError,
)
from src.models.schedule import (
    BatchSessionCreateRequest,
    EventStatus,
    ScheduleEventCreateRequest,
    ScheduleEventUpdateRequest,
)
from src.utils.datetime import utc_now


@pytest.fixture
def service(db_session) -> ScheduleService:
    """Create schedule service over the test database."""
    return ScheduleService(db_session)


def _event(course_id: str, starts_in_hours: int = 24, **overrides) -> ScheduleEventCreateRequest:
    start = utc_now() + timedelta(hours=starts_in_hours)
    values = {
        "title": "Intro Lecture",
        "course_id": course_id,
        "event_type": "lecture",
        "start_time": start,
        "end_time": start + timedelta(hours=2),
    }
    values.update(overrides)
    return ScheduleEventCreateRequest(**values)


def _session(batch_id: str, **overrides) -> BatchSessionCreateRequest:
    values = {
        "batch_id": batch_id,
        "date": date(2024, 6, 2),
        "start_time": "18:00",
        "end_time": "20:00",
        "session_type": "lecture",
        "topic": "Variables and types",
    }
    values.update(overrides)
    return BatchSessionCreateRequest(**values)


class TestEvents:
    """Tests for calendar events."""

    async def test_create_event(self, service, make_course) -> None:
        """Test that a new event is scheduled and owned by its instructor."""
        course = await make_course()

        event = await service.create_event(_event(course.id), instructor_id="instructor-1")

        assert event.status == "scheduled"
        assert event.instructor_id == "instructor-1"
        assert event.event_type == "lecture"
        assert event.attendees == []

    async def test_create_event_unknown_course(self, service) -> None:
        """Test creating an event for a missing course."""
        with pytest.raises(ScheduleTargetNotFoundError):
            await service.create_event(_event("missing"), instructor_id="instructor-1")

    async def test_create_event_foreign_batch(self, service, make_course, make_batch) -> None:
        """Test that the batch must belong to the course."""
        course = await make_course()
        other = await make_course(title="Rust in Depth")
        batch = await make_batch(other)

        with pytest.raises(ScheduleTargetNotFoundError):
            await service.create_event(_event(course.id, batch_id=batch.id), instructor_id="instructor-1")

    def test_event_times_validated(self) -> None:
        """Test that an event must end after it starts."""
        start = utc_now()

        with pytest.raises(ValueError):
            _event("c1", start_time=start, end_time=start)

    async def test_get_event_ownership(self, service, make_course) -> None:
        """Test that other instructors cannot read an event."""
        course = await make_course()
        event = await service.create_event(_event(course.id), instructor_id="instructor-1")

        assert (await service.get_event(event.id, owner_id="instructor-1")).id == event.id
        with pytest.raises(ScheduleAccessDeniedError):
            await service.get_event(event.id, owner_id="instructor-2")

    async def test_update_event(self, service, make_course) -> None:
        """Test a partial update."""
        course = await make_course()
        event = await service.create_event(_event(course.id), instructor_id="instructor-1")

        updated = await service.update_event(
            event.id, ScheduleEventUpdateRequest(title="Moved Lecture", location="Room 4"), owner_id="instructor-1"
        )

        assert updated.title == "Moved Lecture"
        assert updated.location == "Room 4"

    async def test_update_event_inverted_times(self, service, make_course) -> None:
        """Test that the merged times are checked."""
        course = await make_course()
        event = await service.create_event(_event(course.id), instructor_id="instructor-1")

        with pytest.raises(ScheduleValidationError):
            await service.update_event(
                event.id, ScheduleEventUpdateRequest(end_time=utc_now()), owner_id=None
            )

    async def test_status_and_delete(self, service, make_course) -> None:
        """Test status change and deletion."""
        course = await make_course()
        event = await service.create_event(_event(course.id), instructor_id="instructor-1")

        cancelled = await service.update_event_status(event.id, EventStatus.CANCELLED, owner_id=None)
        await service.delete_event(event.id, owner_id="instructor-1")

        assert cancelled.status == "cancelled"
        with pytest.raises(ScheduleEventNotFoundError):
            await service.get_event(event.id, owner_id=None)

    async def test_list_events_in_range(self, service, make_course) -> None:
        """Test the date range filter."""
        course = await make_course()
        await service.create_event(_event(course.id, starts_in_hours=24, title="Tomorrow"), instructor_id="instructor-1")
        await service.create_event(_event(course.id, starts_in_hours=24 * 20, title="Later"), instructor_id="instructor-1")
        await service.create_event(_event(course.id, event_type="exam", title="Exam"), instructor_id="instructor-2")

        now = utc_now()
        window, total = await service.list_events(start_date=now, end_date=now + timedelta(days=7))
        exams, _ = await service.list_events(event_type="exam")
        mine, mine_total = await service.list_events(instructor_id="instructor-1")

        assert total == 2
        assert {e.title for e in window} == {"Tomorrow", "Exam"}
        assert [e.title for e in exams] == ["Exam"]
        assert mine_total == 2

    async def test_upcoming_events(self, service, make_course) -> None:
        """Test that only future scheduled events are returned, soonest first."""
        course = await make_course()
        await service.create_event(_event(course.id, starts_in_hours=48, title="Second"), instructor_id="instructor-1")
        await service.create_event(_event(course.id, starts_in_hours=2, title="First"), instructor_id="instructor-1")
        await service.create_event(_event(course.id, starts_in_hours=-48, title="Past"), instructor_id="instructor-1")
        cancelled = await service.create_event(_event(course.id, starts_in_hours=5, title="Cancelled"), instructor_id="instructor-1")
        await service.update_event_status(cancelled.id, EventStatus.CANCELLED, owner_id=None)

        upcoming = await service.get_upcoming_events("instructor-1", limit=5)

        assert [e.title for e in upcoming] == ["First", "Second"]


class TestSessions:
    """Tests for dated batch sessions."""

    async def test_create_session_day_of_week(self, service, make_course, make_batch) -> None:
        """Test that the weekday is derived with Sunday as 0."""
        course = await make_course()
        batch = await make_batch(course)

        sunday = await service.create_session(_session(batch.id), owner_id="instructor-1")
        saturday = await service.create_session(_session(batch.id, date=date(2024, 6, 8)), owner_id=None)

        assert sunday.day_of_week == 0
        assert saturday.day_of_week == 6
        assert sunday.course_id == course.id
        assert sunday.status == "scheduled"

    async def test_create_session_with_tutor(self, service, make_course, make_batch, make_user) -> None:
        """Test that the tutor name is copied onto the session."""
        course = await make_course()
        batch = await make_batch(course)
        tutor = await make_user(name="Tina Tutor", role="tutor")

        session = await service.create_session(_session(batch.id, tutor_id=tutor.id), owner_id=None)

        assert session.tutor_id == tutor.id
        assert session.tutor_name == "Tina Tutor"

    async def test_create_session_validation(self, service, make_course, make_batch, make_user) -> None:
        """Test time, batch, ownership and tutor checks."""
        course = await make_course()
        batch = await make_batch(course)
        student = await make_user(role="student")

        with pytest.raises(ScheduleValidationError):
            await service.create_session(_session(batch.id, start_time="20:00", end_time="18:00"), owner_id=None)
        with pytest.raises(ScheduleTargetNotFoundError):
            await service.create_session(_session("missing"), owner_id=None)
        with pytest.raises(ScheduleAccessDeniedError):
            await service.create_session(_session(batch.id), owner_id="instructor-2")
        with pytest.raises(ScheduleTargetNotFoundError):
            await service.create_session(_session(batch.id, tutor_id=student.id), owner_id=None)

    async def test_batch_schedule_in_order(self, service, make_course, make_batch) -> None:
        """Test that a batch's sessions come back by date then start time."""
        course = await make_course()
        batch = await make_batch(course)
        await service.create_session(_session(batch.id, date=date(2024, 6, 9), topic="Third"), owner_id=None)
        await service.create_session(_session(batch.id, start_time="20:00", end_time="21:00", topic="Second"), owner_id=None)
        await service.create_session(_session(batch.id, topic="First"), owner_id=None)

        sessions = await service.get_schedule_for_batch(batch.id)

        assert [s.topic for s in sessions] == ["First", "Second", "Third"]

    async def test_batch_schedule_unknown_batch(self, service) -> None:
        """Test the schedule of a missing batch."""
        with pytest.raises(ScheduleTargetNotFoundError):
            await service.get_schedule_for_batch("missing")

    async def test_list_all_sessions_filters(self, service, make_course, make_batch, make_user) -> None:
        """Test tutor and date filters across batches."""
        course = await make_course()
        first = await make_batch(course)
        second = await make_batch(course, name="Second Cohort")
        tutor = await make_user(role="tutor")
        await service.create_session(_session(first.id, tutor_id=tutor.id), owner_id=None)
        await service.create_session(_session(second.id, date=date(2024, 7, 1)), owner_id=None)

        by_tutor, tutor_total = await service.list_all_sessions(tutor_id=tutor.id)
        july, _ = await service.list_all_sessions(start_date=date(2024, 7, 1))
        everything, total = await service.list_all_sessions()

        assert tutor_total == 1
        assert by_tutor[0].batch_id == first.id
        assert [s.batch_id for s in july] == [second.id]
        assert total == 2

    async def test_update_session_tutor(self, service, make_course, make_batch, make_user) -> None:
        """Test assigning and clearing a session's tutor."""
        course = await make_course()
        batch = await make_batch(course)
        tutor = await make_user(name="Tina Tutor", role="tutor")
        session = await service.create_session(_session(batch.id), owner_id=None)

        assigned = await service.update_session_tutor(session.id, tutor.id)
        cleared = await service.update_session_tutor(session.id, None)

        assert assigned.tutor_name == "Tina Tutor"
        assert cleared.tutor_id is None
        assert cleared.tutor_name is None

    async def test_update_unknown_session(self, service) -> None:
        """Test updating a missing session."""
        with pytest.raises(BatchSessionNotFoundError):
            await service.update_session_tutor("missing", None)
