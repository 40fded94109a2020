# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Course service."""

import pytest

from src.domains.course import (
    CourseAccessDeniedError,
    CourseCapacityError,
    CourseHasEnrollmentsError,
    CourseNotFoundError,
    CourseService,
)
from src.infrastructure.database.models import Enrollment
from src.models.common import SortOrder
from src.models.course import (
    CourseCreateRequest,
    CourseSortField,
    CourseStatus,
    CourseUpdateRequest,
)
from src.utils.datetime import utc_now


@pytest.fixture
def service(db_session) -> CourseService:
    """Create course service over the test database."""
    return CourseService(db_session)


async def _add_enrollment(db_session, course, student_id: str = "student-1") -> None:
    db_session.add(
        Enrollment(
            student_id=student_id,
            student_name="Ada",
            student_email=f"{student_id}@example.com",
            course_id=course.id,
            enrolled_at=utc_now(),
            status="active",
            progress=0,
            completed_lessons=[],
            payment_status="paid",
            payment_amount=0,
        )
    )
    course.enrolled_students += 1
    await db_session.commit()


class TestCreateCourse:
    """Tests for course creation."""

    async def test_create_starts_as_draft(self, service, course_payload) -> None:
        """Test that a new course is a draft with zeroed counters."""
        request = CourseCreateRequest(**course_payload)

        course = await service.create_course(request, "instructor-1", "Grace Hopper")

        assert course.status == "draft"
        assert course.instructor_id == "instructor-1"
        assert course.instructor_name == "Grace Hopper"
        assert course.enrolled_students == 0
        assert course.average_rating == 0.0
        assert course.published_at is None
        assert course.currency == "USD"
        assert course.tags == ["pandas", "ml"]

    def test_rejects_zero_capacity(self, course_payload) -> None:
        """Test that max_students must be positive."""
        course_payload["max_students"] = 0

        with pytest.raises(ValueError):
            CourseCreateRequest(**course_payload)


class TestListCourses:
    """Tests for catalogue listing."""

    async def test_filters(self, service, make_course) -> None:
        """Test category, level, status and instructor filters."""
        await make_course(title="Python Fundamentals")
        await make_course(title="Deep Learning", category="ai_ml", level="advanced")
        await make_course(title="Kubernetes", category="devops", status="draft", instructor_id="instructor-2")

        ai, ai_total = await service.list_courses(category="ai_ml")
        advanced, _ = await service.list_courses(level="advanced")
        drafts, _ = await service.list_courses(status="draft")
        mine, mine_total = await service.list_courses(instructor_id="instructor-1")
        everything, all_total = await service.list_courses(category="all", status="all")

        assert ai_total == 1
        assert ai[0].title == "Deep Learning"
        assert [c.title for c in advanced] == ["Deep Learning"]
        assert [c.title for c in drafts] == ["Kubernetes"]
        assert mine_total == 2
        assert all_total == 3

    async def test_search_matches_title_description_and_tags(self, service, make_course) -> None:
        """Test the free-text search."""
        await make_course(title="Python Fundamentals", tags=["python"])
        await make_course(title="Web Basics", description="HTML and CSS for beginners", tags=[])
        await make_course(title="Data Wrangling", tags=["pandas"])

        by_title, _ = await service.list_courses(search="python")
        by_description, _ = await service.list_courses(search="css")
        by_tag, _ = await service.list_courses(search="pandas")

        assert [c.title for c in by_title] == ["Python Fundamentals"]
        assert [c.title for c in by_description] == ["Web Basics"]
        assert [c.title for c in by_tag] == ["Data Wrangling"]

    async def test_sort_and_paginate(self, service, make_course) -> None:
        """Test sorting by title and slicing pages."""
        for title in ("Gamma", "Alpha", "Beta"):
            await make_course(title=title)

        first_page, total = await service.list_courses(
            sort_by=CourseSortField.TITLE, sort_order=SortOrder.ASC, limit=2, offset=0
        )
        second_page, _ = await service.list_courses(
            sort_by=CourseSortField.TITLE, sort_order=SortOrder.ASC, limit=2, offset=2
        )

        assert total == 3
        assert [c.title for c in first_page] == ["Alpha", "Beta"]
        assert [c.title for c in second_page] == ["Gamma"]

    async def test_sort_by_price_descending(self, service, make_course) -> None:
        """Test numeric sort."""
        await make_course(title="Cheap", price=10.0)
        await make_course(title="Pricey", price=300.0)

        courses, _ = await service.list_courses(sort_by=CourseSortField.PRICE, sort_order=SortOrder.DESC)

        assert [c.title for c in courses] == ["Pricey", "Cheap"]


class TestUpdateAndDelete:
    """Tests for course mutation."""

    async def test_update_fields(self, service, make_course) -> None:
        """Test that only provided fields change."""
        course = await make_course()

        updated = await service.update_course(
            course.id,
            CourseUpdateRequest(title="Python Deep Dive", level="advanced"),
            owner_id="instructor-1",
        )

        assert updated.title == "Python Deep Dive"
        assert updated.level == "advanced"
        assert updated.description == course.description

    async def test_update_by_other_instructor(self, service, make_course) -> None:
        """Test that instructors can only change their own courses."""
        course = await make_course()

        with pytest.raises(CourseAccessDeniedError):
            await service.update_course(course.id, CourseUpdateRequest(title="Hijacked"), owner_id="instructor-2")

    async def test_admin_updates_any_course(self, service, make_course) -> None:
        """Test that a None owner skips the ownership check."""
        course = await make_course()

        updated = await service.update_course(course.id, CourseUpdateRequest(price=99.0), owner_id=None)

        assert updated.price == 99.0

    async def test_capacity_below_enrolled(self, service, db_session, make_course) -> None:
        """Test that max_students cannot go below the enrolled count."""
        course = await make_course(max_students=10)
        await _add_enrollment(db_session, course, "s1")
        await _add_enrollment(db_session, course, "s2")

        with pytest.raises(CourseCapacityError):
            await service.update_course(course.id, CourseUpdateRequest(max_students=1), owner_id=None)

        updated = await service.update_course(course.id, CourseUpdateRequest(max_students=2), owner_id=None)
        assert updated.max_students == 2

    async def test_delete_course(self, service, make_course) -> None:
        """Test deleting a course without enrollments."""
        course = await make_course()

        await service.delete_course(course.id, owner_id="instructor-1")

        with pytest.raises(CourseNotFoundError):
            await service.get_course(course.id)

    async def test_delete_with_enrollments(self, service, db_session, make_course) -> None:
        """Test that a course with enrollments cannot be deleted."""
        course = await make_course()
        await _add_enrollment(db_session, course)

        with pytest.raises(CourseHasEnrollmentsError):
            await service.delete_course(course.id, owner_id=None)

    async def test_unknown_course(self, service) -> None:
        """Test operations on a missing course."""
        with pytest.raises(CourseNotFoundError):
            await service.get_course("missing")
        with pytest.raises(CourseNotFoundError):
            await service.publish_course("missing", owner_id=None)


class TestStatus:
    """Tests for status transitions."""

    async def test_publish_stamps_once(self, service, make_course) -> None:
        """Test that published_at is set on first publish and kept afterwards."""
        course = await make_course(status="draft")

        published = await service.publish_course(course.id, owner_id="instructor-1")
        first_stamp = published.published_at
        await service.archive_course(course.id, owner_id="instructor-1")
        republished = await service.publish_course(course.id, owner_id="instructor-1")

        assert first_stamp is not None
        assert republished.status == "published"
        assert republished.published_at == first_stamp

    async def test_archive(self, service, make_course) -> None:
        """Test archiving keeps published_at empty for drafts."""
        course = await make_course(status="draft")

        archived = await service.update_status(course.id, CourseStatus.ARCHIVED, owner_id=None)

        assert archived.status == "archived"
        assert archived.published_at is None


class TestStatistics:
    """Tests for catalogue statistics."""

    async def test_statistics(self, service, make_course) -> None:
        """Test totals and breakdowns."""
        await make_course(title="Python", enrolled_students=4, average_rating=4.5)
        await make_course(title="Go", enrolled_students=2, average_rating=4.9)
        await make_course(title="Draft", status="draft", category="devops", average_rating=5.0)

        stats = await service.get_statistics()

        assert stats.total_courses == 3
        assert stats.published_courses == 2
        assert stats.draft_courses == 1
        assert stats.total_enrollments == 6
        assert stats.by_category == {"programming": 2, "devops": 1}
        assert stats.by_level == {"beginner": 3}
        assert [c.title for c in stats.top_rated] == ["Go", "Python"]
        assert len(stats.recent) == 3

    async def test_statistics_empty(self, service) -> None:
        """Test statistics of an empty catalogue."""
        stats = await service.get_statistics()

        assert stats.total_courses == 0
        assert stats.total_enrollments == 0
        assert stats.top_rated == []
