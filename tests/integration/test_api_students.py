# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP tests for student self-service endpoints."""

from datetime import timedelta

import pytest

from src.utils.datetime import utc_now

pytestmark = pytest.mark.integration

ME = "/api/v1/students/me"


async def _enroll(client, auth_headers, course_id: str, batch_id: str | None = None) -> None:
    response = await client.post(
        "/api/v1/enrollments",
        json={
            "student_id": "student-1",
            "student_name": "Ada",
            "student_email": "ada@example.com",
            "course_id": course_id,
            "batch_id": batch_id,
            "payment_amount": 0,
        },
        headers=auth_headers("student"),
    )
    assert response.status_code == 201


class TestStudentViews:
    """Tests for /students/me."""

    async def test_students_only(self, client, auth_headers) -> None:
        """Test that staff roles are refused."""
        response = await client.get(f"{ME}/dashboard", headers=auth_headers("instructor"))

        assert response.status_code == 403

    async def test_my_enrollments(self, client, auth_headers, make_course) -> None:
        """Test that the caller's enrollments are listed."""
        course = await make_course()
        await _enroll(client, auth_headers, course.id)

        mine = await client.get(f"{ME}/enrollments", headers=auth_headers("student"))
        someone_else = await client.get(f"{ME}/enrollments", headers=auth_headers("student", "student-2"))

        assert [e["course_id"] for e in mine.json()["data"]] == [course.id]
        assert someone_else.json()["data"] == []

    async def test_schedule_and_assignments(self, client, auth_headers, make_course, make_batch) -> None:
        """Test that staff-created events and assignments reach the student."""
        course = await make_course()
        batch = await make_batch(course)
        await _enroll(client, auth_headers, course.id, batch.id)
        start = utc_now() + timedelta(days=1)

        event = await client.post(
            "/api/v1/schedules",
            json={
                "title": "Kick-off",
                "course_id": course.id,
                "batch_id": batch.id,
                "event_type": "lecture",
                "start_time": start.isoformat(),
                "end_time": (start + timedelta(hours=1)).isoformat(),
            },
            headers=auth_headers("instructor"),
        )
        assignment = await client.post(
            "/api/v1/assignments",
            json={
                "title": "First project",
                "instructions": "Build a CLI",
                "course_id": course.id,
                "type": "project",
                "difficulty": "beginner",
                "assigned_date": utc_now().isoformat(),
                "due_date": (utc_now() + timedelta(days=5)).isoformat(),
            },
            headers=auth_headers("instructor"),
        )
        assert event.status_code == 201
        assert assignment.status_code == 201
        await client.post(
            f"/api/v1/assignments/{assignment.json()['data']['id']}/publish", headers=auth_headers("instructor")
        )

        schedules = await client.get(f"{ME}/schedules", headers=auth_headers("student"))
        assignments = await client.get(f"{ME}/assignments", headers=auth_headers("student"))
        dashboard = await client.get(f"{ME}/dashboard", headers=auth_headers("student"))

        assert [e["title"] for e in schedules.json()["data"]] == ["Kick-off"]
        assert [a["title"] for a in assignments.json()["data"]] == ["First project"]
        data = dashboard.json()["data"]
        assert [e["title"] for e in data["upcoming_events"]] == ["Kick-off"]
        assert [a["title"] for a in data["pending_assignments"]] == ["First project"]
