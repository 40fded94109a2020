# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for seat counters across enroll, drop and reconcile.

The invariant under test: a course or batch counter always equals the
number of its enrollments that are not dropped.
"""

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.domains.batch import BatchService
from src.domains.enrollment import (
    AlreadyEnrolledError,
    BatchFullError,
    CertificateAlreadyIssuedError,
    CourseNotCompletedError,
    EnrollmentService,
)
from src.infrastructure.database import create_sessionmaker
from src.infrastructure.database.models import SEAT_RELEASED_STATUS, Base, Batch, Course, Enrollment
from src.models.batch import BatchStudentAddRequest
from src.models.enrollment import EnrollmentStatus, EnrollRequest

pytestmark = pytest.mark.integration


def _request(course_id: str, batch_id: str | None, student_id: str) -> EnrollRequest:
    return EnrollRequest(
        student_id=student_id,
        student_name=student_id.title(),
        student_email=f"{student_id}@example.com",
        course_id=course_id,
        batch_id=batch_id,
        payment_amount=0,
    )


async def _seat_holders(db_session, column, value) -> int:
    result = await db_session.execute(
        select(func.count())
        .select_from(Enrollment)
        .where(column == value, Enrollment.status != SEAT_RELEASED_STATUS)
    )
    return result.scalar() or 0


async def assert_counters_match(db_session, course: Course, *batches: Batch) -> None:
    await db_session.refresh(course)
    assert course.enrolled_students == await _seat_holders(db_session, Enrollment.course_id, course.id)
    for batch in batches:
        await db_session.refresh(batch)
        assert batch.enrolled_students == await _seat_holders(db_session, Enrollment.batch_id, batch.id)


class TestCounterInvariant:
    """Counters follow the enrollment rows through every transition."""

    async def test_interleaved_enroll_and_drop(self, db_session, make_course, make_batch) -> None:
        """Test the invariant after a mixed sequence of operations."""
        course = await make_course()
        morning = await make_batch(course, name="Morning Cohort")
        evening = await make_batch(course, name="Evening Cohort")
        service = EnrollmentService(db_session)

        a = await service.enroll(_request(course.id, morning.id, "a"), enrolled_by="admin-1")
        b = await service.enroll(_request(course.id, evening.id, "b"), enrolled_by="admin-1")
        await service.enroll(_request(course.id, None, "c"), enrolled_by="admin-1")
        await service.drop(a.id, dropped_by="admin-1")
        await service.enroll(_request(course.id, morning.id, "d"), enrolled_by="admin-1")
        await service.update_status(b.id, EnrollmentStatus.SUSPENDED, None, updated_by="admin-1")
        await service.update_status(a.id, EnrollmentStatus.ACTIVE, "Came back", updated_by="admin-1")
        await service.drop(b.id, dropped_by="admin-1")

        await assert_counters_match(db_session, course, morning, evening)
        assert course.enrolled_students == 3
        assert morning.enrolled_students == 2
        assert evening.enrolled_students == 0

    async def test_double_drop_releases_once(self, db_session, make_course, make_batch) -> None:
        """Test that dropping twice leaves the counters as after one drop."""
        course = await make_course()
        batch = await make_batch(course)
        service = EnrollmentService(db_session)
        await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="admin-1")
        enrollment = await service.enroll(_request(course.id, batch.id, "b"), enrolled_by="admin-1")

        first = await service.drop(enrollment.id, dropped_by="admin-1")
        second = await service.drop(enrollment.id, dropped_by="admin-1")

        assert first.status == second.status == "dropped"
        assert second.dropped_at == first.dropped_at
        await assert_counters_match(db_session, course, batch)
        assert batch.enrolled_students == 1

    async def test_duplicate_enrollment_leaves_counters(self, db_session, make_course, make_batch) -> None:
        """Test that a rejected duplicate does not move any counter."""
        course = await make_course()
        batch = await make_batch(course)
        service = EnrollmentService(db_session)
        await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="admin-1")

        with pytest.raises(AlreadyEnrolledError):
            await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="admin-1")

        await assert_counters_match(db_session, course, batch)
        assert course.enrolled_students == 1

    async def test_failed_commit_rolls_back_counters(self, db_session, make_course, make_batch) -> None:
        """Test that a crash at commit leaves neither the row nor the seat behind."""
        course = await make_course()
        batch = await make_batch(course)
        service = EnrollmentService(db_session)
        failure = OperationalError("COMMIT", {}, Exception("connection lost"))

        with patch.object(db_session, "commit", AsyncMock(side_effect=failure)):
            with pytest.raises(OperationalError):
                await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="admin-1")
        await db_session.rollback()

        await assert_counters_match(db_session, course, batch)
        assert course.enrolled_students == 0
        assert batch.enrolled_students == 0


class TestBatchCapacity:
    """Batch capacity and waitlist behaviour."""

    async def test_full_batch_without_waitlist(self, db_session, make_course, make_batch) -> None:
        """Test that the batch never exceeds max_students."""
        course = await make_course()
        batch = await make_batch(course, max_students=2, allow_waitlist=False)
        service = EnrollmentService(db_session)
        await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="admin-1")
        await service.enroll(_request(course.id, batch.id, "b"), enrolled_by="admin-1")

        with pytest.raises(BatchFullError):
            await service.enroll(_request(course.id, batch.id, "c"), enrolled_by="admin-1")

        await assert_counters_match(db_session, course, batch)
        assert batch.enrolled_students == batch.max_students

    async def test_drop_frees_seat_for_next_student(self, db_session, make_course, make_batch) -> None:
        """Test that a drop makes room in a full batch."""
        course = await make_course()
        batch = await make_batch(course, max_students=1, allow_waitlist=False)
        service = EnrollmentService(db_session)
        first = await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="admin-1")
        await service.drop(first.id, dropped_by="admin-1")

        second = await service.enroll(_request(course.id, batch.id, "b"), enrolled_by="admin-1")

        assert second.status == "active"
        await assert_counters_match(db_session, course, batch)

    async def test_waitlist_admits_over_capacity(self, db_session, make_course, make_batch) -> None:
        """Test that a waitlist batch admits students beyond max_students."""
        course = await make_course()
        batch = await make_batch(course, max_students=1, allow_waitlist=True)
        service = EnrollmentService(db_session)
        await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="admin-1")

        extra = await service.enroll(_request(course.id, batch.id, "b"), enrolled_by="admin-1")

        assert extra.status == "active"
        await assert_counters_match(db_session, course, batch)
        assert batch.enrolled_students == 2


class TestConcurrentSessions:
    """Two sessions interleaving on one database file.

    Session A reads rows, session B commits a change to them, and A then
    carries on with what it read. The counters must follow the rows B
    committed, not the copies A still holds.
    """

    @pytest.fixture
    async def engine(self, tmp_path) -> AsyncIterator[AsyncEngine]:
        """File-backed database so that two connections share state."""
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'seats.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        yield engine

        await engine.dispose()

    async def test_late_enroll_into_last_seat(self, engine, db_session, make_course, make_batch) -> None:
        """Test that a stale view of the last seat cannot overfill the batch."""
        course = await make_course()
        batch = await make_batch(course, max_students=1, allow_waitlist=False)
        assert batch.enrolled_students == 0

        async with create_sessionmaker(engine)() as other:
            await EnrollmentService(other).enroll(_request(course.id, batch.id, "b"), enrolled_by="b")

        with pytest.raises(BatchFullError):
            await EnrollmentService(db_session).enroll(_request(course.id, batch.id, "a"), enrolled_by="a")
        await db_session.rollback()

        await assert_counters_match(db_session, course, batch)
        assert batch.enrolled_students == 1

    async def test_enroll_after_concurrent_drop(self, engine, db_session, make_course, make_batch) -> None:
        """Test that a seat freed by another session can be taken."""
        course = await make_course()
        batch = await make_batch(course, max_students=1, allow_waitlist=False)
        first = await EnrollmentService(db_session).enroll(_request(course.id, batch.id, "a"), enrolled_by="a")
        assert batch.enrolled_students == 1

        async with create_sessionmaker(engine)() as other:
            await EnrollmentService(other).drop(first.id, dropped_by="a")

        second = await EnrollmentService(db_session).enroll(_request(course.id, batch.id, "b"), enrolled_by="b")

        assert second.status == "active"
        await assert_counters_match(db_session, course, batch)
        assert (course.enrolled_students, batch.enrolled_students) == (1, 1)

    async def test_drop_raced_by_other_session(self, engine, db_session, make_course, make_batch) -> None:
        """Test that two sessions dropping the same enrollment release one seat."""
        course = await make_course()
        batch = await make_batch(course)
        service = EnrollmentService(db_session)
        target = await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="a")
        await service.enroll(_request(course.id, batch.id, "b"), enrolled_by="b")
        loaded = await db_session.get(Enrollment, target.id)
        assert loaded.status == "active"

        async with create_sessionmaker(engine)() as other:
            await EnrollmentService(other).drop(target.id, dropped_by="support-1")

        result = await service.drop(target.id, dropped_by="a")

        assert result.status == "dropped"
        await assert_counters_match(db_session, course, batch)
        assert (course.enrolled_students, batch.enrolled_students) == (1, 1)


class TestReconcile:
    """Counter repair."""

    async def test_reconcile_repairs_drift(self, db_session, make_course, make_batch) -> None:
        """Test that drifted counters are rewritten from enrollment rows."""
        course = await make_course()
        batch = await make_batch(course)
        service = EnrollmentService(db_session)
        await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="admin-1")
        await service.enroll(_request(course.id, None, "b"), enrolled_by="admin-1")

        course.enrolled_students = 7
        batch.enrolled_students = 0
        await db_session.commit()

        report = await service.reconcile_counters()

        assert report.courses_checked == 1
        assert report.batches_checked == 1
        corrections = {(c.entity, c.stored, c.actual) for c in report.corrections}
        assert corrections == {("course", 7, 2), ("batch", 0, 1)}
        await assert_counters_match(db_session, course, batch)

    async def test_reconcile_single_course(self, db_session, make_course) -> None:
        """Test that a scoped sweep leaves other courses alone."""
        checked = await make_course(enrolled_students=3)
        untouched = await make_course(title="Rust in Depth", enrolled_students=5)

        report = await EnrollmentService(db_session).reconcile_counters(checked.id)

        assert report.courses_checked == 1
        await db_session.refresh(checked)
        await db_session.refresh(untouched)
        assert checked.enrolled_students == 0
        assert untouched.enrolled_students == 5

    async def test_reconcile_without_drift(self, db_session, make_course) -> None:
        """Test that a consistent store reports no corrections."""
        course = await make_course()
        await EnrollmentService(db_session).enroll(_request(course.id, None, "a"), enrolled_by="admin-1")

        report = await EnrollmentService(db_session).reconcile_counters()

        assert report.corrections == []


class TestEndToEnd:
    """A batch from first enrollment to certificate."""

    async def test_single_seat_course(self, db_session, make_course, make_batch) -> None:
        """Test enroll, rejection, drop and re-enroll on a one-seat batch."""
        course = await make_course(max_students=1)
        batch = await make_batch(course, max_students=1, allow_waitlist=False)
        service = EnrollmentService(db_session)

        first = await service.enroll(_request(course.id, batch.id, "a"), enrolled_by="a")
        await assert_counters_match(db_session, course, batch)
        assert (course.enrolled_students, batch.enrolled_students) == (1, 1)

        with pytest.raises(BatchFullError):
            await service.enroll(_request(course.id, batch.id, "b"), enrolled_by="b")
        await assert_counters_match(db_session, course, batch)
        assert (course.enrolled_students, batch.enrolled_students) == (1, 1)

        await service.drop(first.id, dropped_by="a")
        await assert_counters_match(db_session, course, batch)
        assert (course.enrolled_students, batch.enrolled_students) == (0, 0)

        second = await service.enroll(_request(course.id, batch.id, "b"), enrolled_by="b")
        assert second.status == "active"
        await assert_counters_match(db_session, course, batch)
        assert (course.enrolled_students, batch.enrolled_students) == (1, 1)

    async def test_batch_lifecycle(self, db_session, make_course, make_batch) -> None:
        """Test roster changes, progress and certification together."""
        course = await make_course()
        batch = await make_batch(course, max_students=2, allow_waitlist=False)
        batches = BatchService(db_session)
        enrollments = EnrollmentService(db_session)

        ada = await enrollments.enroll(_request(course.id, batch.id, "ada"), enrolled_by="ada")
        await batches.add_student(
            batch.id,
            BatchStudentAddRequest(student_id="alan", student_name="Alan", student_email="alan@example.com"),
            owner_id="instructor-1",
            added_by="instructor-1",
        )
        with pytest.raises(BatchFullError):
            await enrollments.enroll(_request(course.id, batch.id, "grace"), enrolled_by="grace")

        await batches.remove_student(batch.id, "alan", owner_id="instructor-1", removed_by="instructor-1")
        await enrollments.enroll(_request(course.id, batch.id, "grace"), enrolled_by="grace")

        await enrollments.update_progress(ada.id, 99, ["l1", "l2"])
        with pytest.raises(CourseNotCompletedError):
            await enrollments.issue_certificate(ada.id, issued_by="instructor-1")
        await enrollments.update_progress(ada.id, 100, ["l1", "l2", "l3"])
        certified = await enrollments.issue_certificate(ada.id, issued_by="instructor-1")
        with pytest.raises(CertificateAlreadyIssuedError):
            await enrollments.issue_certificate(ada.id, issued_by="instructor-1")

        assert certified.certificate_issued is True
        roster = await batches.list_students(batch.id, owner_id=None)
        assert {e.student_id for e in roster} == {"ada", "grace"}
        await assert_counters_match(db_session, course, batch)
        assert batch.enrolled_students == 2
