# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Enrollment service."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.enrollment import (
    AlreadyEnrolledError,
    BatchFullError,
    BatchNotFoundError,
    CertificateAlreadyIssuedError,
    CourseNotCompletedError,
    CourseNotFoundError,
    EnrollmentNotFoundError,
    EnrollmentService,
    EnrollmentServiceError,
)
from src.domains.errors import CapacityExceededError
from src.models.enrollment import EnrollmentStatus, EnrollRequest


@pytest.fixture
def service(db_session: AsyncSession) -> EnrollmentService:
    """Create enrollment service over the test database."""
    return EnrollmentService(db_session)


def enroll_request(course_id: str, batch_id: str | None = None, student_id: str = "student-1", **kwargs):
    return EnrollRequest(
        student_id=student_id,
        student_name=kwargs.pop("student_name", "Ada Lovelace"),
        student_email=kwargs.pop("student_email", f"{student_id}@example.com"),
        course_id=course_id,
        batch_id=batch_id,
        payment_amount=kwargs.pop("payment_amount", 0),
    )


class TestEnroll:
    """Tests for EnrollmentService.enroll."""

    async def test_enroll_in_course_and_batch(self, service, db_session, make_course, make_batch) -> None:
        """Test that enrolling creates an active row and takes both seats."""
        course = await make_course()
        batch = await make_batch(course)

        enrollment = await service.enroll(enroll_request(course.id, batch.id), enrolled_by="admin-1")

        assert enrollment.status == "active"
        assert enrollment.progress == 0
        assert enrollment.completed_lessons == []
        assert enrollment.certificate_issued is False
        assert enrollment.batch_id == batch.id

        await db_session.refresh(course)
        await db_session.refresh(batch)
        assert course.enrolled_students == 1
        assert batch.enrolled_students == 1

    async def test_full_batch_is_an_enrollment_error(self, service, make_course, make_batch) -> None:
        """Test that a full batch is caught as an enrollment service error."""
        course = await make_course()
        batch = await make_batch(course, max_students=1, allow_waitlist=False)
        await service.enroll(enroll_request(course.id, batch.id, student_id="s1"), enrolled_by="s1")

        with pytest.raises(EnrollmentServiceError) as exc_info:
            await service.enroll(enroll_request(course.id, batch.id, student_id="s2"), enrolled_by="s2")

        assert isinstance(exc_info.value, BatchFullError)
        assert isinstance(exc_info.value, CapacityExceededError)
        assert exc_info.value.code == "capacity_exceeded"

    async def test_free_enrollment_is_paid(self, service, make_course) -> None:
        """Test payment status for free and paid enrollments."""
        course = await make_course()

        free = await service.enroll(enroll_request(course.id, student_id="s1"), enrolled_by="s1")
        paid = await service.enroll(
            enroll_request(course.id, student_id="s2", payment_amount=49.0), enrolled_by="s2"
        )

        assert free.payment_status == "paid"
        assert paid.payment_status == "pending"
        assert paid.payment_amount == 49.0

    async def test_unknown_course(self, service) -> None:
        """Test enrolling in a course that does not exist."""
        with pytest.raises(CourseNotFoundError):
            await service.enroll(enroll_request("missing"), enrolled_by="s1")

    async def test_batch_of_another_course(self, service, make_course, make_batch) -> None:
        """Test that the batch must belong to the course."""
        course = await make_course()
        other = await make_course(title="Rust in Depth")
        batch = await make_batch(other)

        with pytest.raises(BatchNotFoundError):
            await service.enroll(enroll_request(course.id, batch.id), enrolled_by="s1")

    async def test_duplicate_enrollment(self, service, db_session, make_course) -> None:
        """Test that a student cannot enroll twice in a course."""
        course = await make_course()
        await service.enroll(enroll_request(course.id), enrolled_by="s1")

        with pytest.raises(AlreadyEnrolledError):
            await service.enroll(enroll_request(course.id), enrolled_by="s1")

        await db_session.refresh(course)
        assert course.enrolled_students == 1

    async def test_dropped_student_cannot_enroll_again(self, service, make_course) -> None:
        """Test that the (student, course) pair stays unique after a drop."""
        course = await make_course()
        enrollment = await service.enroll(enroll_request(course.id), enrolled_by="s1")
        await service.drop(enrollment.id, dropped_by="s1")

        with pytest.raises(AlreadyEnrolledError):
            await service.enroll(enroll_request(course.id), enrolled_by="s1")

    async def test_full_batch_rejected(self, service, db_session, make_course, make_batch) -> None:
        """Test that a full batch without waitlist rejects enrollment."""
        course = await make_course()
        batch = await make_batch(course, max_students=1, allow_waitlist=False)
        await service.enroll(enroll_request(course.id, batch.id, student_id="s1"), enrolled_by="s1")

        with pytest.raises(BatchFullError):
            await service.enroll(enroll_request(course.id, batch.id, student_id="s2"), enrolled_by="s2")

        await db_session.refresh(course)
        await db_session.refresh(batch)
        assert course.enrolled_students == 1
        assert batch.enrolled_students == 1


class TestStatusAndProgress:
    """Tests for status changes, progress and certificates."""

    async def test_status_to_dropped_releases_seat(self, service, db_session, make_course, make_batch) -> None:
        """Test that moving into dropped frees the seat."""
        course = await make_course()
        batch = await make_batch(course)
        enrollment = await service.enroll(enroll_request(course.id, batch.id), enrolled_by="s1")

        updated = await service.update_status(
            enrollment.id, EnrollmentStatus.DROPPED, "Moved abroad", updated_by="admin-1"
        )

        assert updated.status == "dropped"
        assert updated.status_reason == "Moved abroad"
        assert updated.dropped_at is not None
        await db_session.refresh(course)
        await db_session.refresh(batch)
        assert course.enrolled_students == 0
        assert batch.enrolled_students == 0

    async def test_reactivation_claims_seat(self, service, db_session, make_course, make_batch) -> None:
        """Test that leaving dropped takes a seat again."""
        course = await make_course()
        batch = await make_batch(course)
        enrollment = await service.enroll(enroll_request(course.id, batch.id), enrolled_by="s1")
        await service.drop(enrollment.id, dropped_by="s1")

        updated = await service.update_status(
            enrollment.id, EnrollmentStatus.ACTIVE, None, updated_by="admin-1"
        )

        assert updated.status == "active"
        assert updated.dropped_at is None
        await db_session.refresh(course)
        await db_session.refresh(batch)
        assert course.enrolled_students == 1
        assert batch.enrolled_students == 1

    async def test_reactivation_into_full_batch(self, service, make_course, make_batch) -> None:
        """Test that reactivation respects batch capacity."""
        course = await make_course()
        batch = await make_batch(course, max_students=1, allow_waitlist=False)
        first = await service.enroll(enroll_request(course.id, batch.id, student_id="s1"), enrolled_by="s1")
        await service.drop(first.id, dropped_by="s1")
        await service.enroll(enroll_request(course.id, batch.id, student_id="s2"), enrolled_by="s2")

        with pytest.raises(BatchFullError):
            await service.update_status(first.id, EnrollmentStatus.ACTIVE, None, updated_by="admin-1")

    async def test_status_between_seat_holders(self, service, db_session, make_course) -> None:
        """Test that active to suspended keeps the seat."""
        course = await make_course()
        enrollment = await service.enroll(enroll_request(course.id), enrolled_by="s1")

        updated = await service.update_status(
            enrollment.id, EnrollmentStatus.SUSPENDED, None, updated_by="admin-1"
        )

        assert updated.status == "suspended"
        await db_session.refresh(course)
        assert course.enrolled_students == 1

    async def test_update_progress(self, service, make_course) -> None:
        """Test overwriting progress and lessons."""
        course = await make_course()
        enrollment = await service.enroll(enroll_request(course.id), enrolled_by="s1")

        updated = await service.update_progress(enrollment.id, 40, ["l1", "l2"])

        assert updated.progress == 40
        assert updated.completed_lessons == ["l1", "l2"]
        assert updated.last_accessed_at is not None

    async def test_certificate_requires_completion(self, service, make_course) -> None:
        """Test certificate issuance at 99 and 100 percent."""
        course = await make_course()
        enrollment = await service.enroll(enroll_request(course.id), enrolled_by="s1")
        await service.update_progress(enrollment.id, 99, [])

        with pytest.raises(CourseNotCompletedError):
            await service.issue_certificate(enrollment.id, issued_by="instructor-1")

        await service.update_progress(enrollment.id, 100, [])
        issued = await service.issue_certificate(enrollment.id, issued_by="instructor-1")

        assert issued.certificate_issued is True
        assert issued.certificate_issued_at is not None

    async def test_certificate_only_once(self, service, make_course) -> None:
        """Test that a second issuance is rejected."""
        course = await make_course()
        enrollment = await service.enroll(enroll_request(course.id), enrolled_by="s1")
        await service.update_progress(enrollment.id, 100, [])
        await service.issue_certificate(enrollment.id, issued_by="instructor-1")

        with pytest.raises(CertificateAlreadyIssuedError):
            await service.issue_certificate(enrollment.id, issued_by="instructor-1")

    async def test_unknown_enrollment(self, service) -> None:
        """Test lookups of a missing enrollment."""
        with pytest.raises(EnrollmentNotFoundError):
            await service.get_enrollment("missing")
        with pytest.raises(EnrollmentNotFoundError):
            await service.drop("missing", dropped_by="s1")


class TestQueries:
    """Tests for listing and progress lookups."""

    async def test_list_filters(self, service, make_course) -> None:
        """Test filtering by course and status."""
        python = await make_course()
        rust = await make_course(title="Rust in Depth")
        e1 = await service.enroll(enroll_request(python.id, student_id="s1"), enrolled_by="s1")
        await service.enroll(enroll_request(python.id, student_id="s2"), enrolled_by="s2")
        await service.enroll(enroll_request(rust.id, student_id="s1"), enrolled_by="s1")
        await service.drop(e1.id, dropped_by="s1")

        by_course, total = await service.list_enrollments(course_id=python.id)
        active, active_total = await service.list_enrollments(course_id=python.id, status="active")
        everything, all_total = await service.list_enrollments(status="all")
        page, page_total = await service.list_enrollments(limit=1, offset=1)

        assert total == 2
        assert {e.course_id for e in by_course} == {python.id}
        assert active_total == 1
        assert active[0].student_id == "s2"
        assert all_total == 3
        assert len(page) == 1
        assert page_total == 3

    async def test_student_progress(self, service, make_course) -> None:
        """Test the progress view of one course."""
        course = await make_course(title="Python Fundamentals")
        enrollment = await service.enroll(enroll_request(course.id), enrolled_by="s1")
        await service.update_progress(enrollment.id, 55, ["l1"])

        progress = await service.get_student_progress("student-1", course.id)

        assert progress.enrollment_id == enrollment.id
        assert progress.course_title == "Python Fundamentals"
        assert progress.progress == 55
        assert progress.completed_lessons == ["l1"]

    async def test_student_progress_not_enrolled(self, service, make_course) -> None:
        """Test the progress view without an enrollment."""
        course = await make_course()

        with pytest.raises(EnrollmentNotFoundError):
            await service.get_student_progress("nobody", course.id)

    async def test_list_student_enrollments(self, service, make_course) -> None:
        """Test listing every enrollment of a student."""
        python = await make_course()
        rust = await make_course(title="Rust in Depth")
        await service.enroll(enroll_request(python.id), enrolled_by="s1")
        await service.enroll(enroll_request(rust.id), enrolled_by="s1")
        await service.enroll(enroll_request(rust.id, student_id="other"), enrolled_by="other")

        enrollments = await service.list_student_enrollments("student-1")

        assert {e.course_id for e in enrollments} == {python.id, rust.id}
