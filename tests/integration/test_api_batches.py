# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP tests for batch rosters and tutors."""

import pytest

pytestmark = pytest.mark.integration

BATCHES = "/api/v1/batches"


def _student(student_id: str) -> dict[str, str]:
    return {
        "student_id": student_id,
        "student_name": student_id.replace("-", " ").title(),
        "student_email": f"{student_id}@example.com",
    }


class TestRoster:
    """Tests for adding and removing batch students."""

    async def test_add_student_sends_confirmation(self, client, auth_headers, mailer, make_course, make_batch) -> None:
        """Test that the owner adds a student and the course name is mailed."""
        course = await make_course(title="Python Fundamentals")
        batch = await make_batch(course)

        response = await client.post(
            f"{BATCHES}/{batch.id}/students", json=_student("student-1"), headers=auth_headers("instructor")
        )

        assert response.status_code == 201
        assert response.json()["data"]["batch_id"] == batch.id
        mailer.send_enrollment_confirmation.assert_awaited_once_with(
            "student-1@example.com", "Student 1", "Python Fundamentals"
        )

    async def test_full_batch(self, client, auth_headers, mailer, make_course, make_batch) -> None:
        """Test the capacity error once the batch is full."""
        course = await make_course()
        batch = await make_batch(course, max_students=1, allow_waitlist=False)
        await client.post(f"{BATCHES}/{batch.id}/students", json=_student("student-1"), headers=auth_headers("admin"))

        response = await client.post(
            f"{BATCHES}/{batch.id}/students", json=_student("student-2"), headers=auth_headers("admin")
        )

        assert response.status_code == 409
        assert response.json()["code"] == "capacity_exceeded"
        assert mailer.send_enrollment_confirmation.await_count == 1

    async def test_remove_student_frees_seat(self, client, auth_headers, make_course, make_batch) -> None:
        """Test that removal drops the enrollment and the roster hides it."""
        course = await make_course()
        batch = await make_batch(course)
        await client.post(f"{BATCHES}/{batch.id}/students", json=_student("student-1"), headers=auth_headers("instructor"))

        removed = await client.delete(f"{BATCHES}/{batch.id}/students/student-1", headers=auth_headers("instructor"))
        roster = await client.get(f"{BATCHES}/{batch.id}/students", headers=auth_headers("instructor"))
        history = await client.get(
            f"{BATCHES}/{batch.id}/students", params={"include_dropped": True}, headers=auth_headers("instructor")
        )
        detail = await client.get(f"{BATCHES}/{batch.id}", headers=auth_headers("instructor"))

        assert removed.json()["data"]["status"] == "dropped"
        assert roster.json()["data"] == []
        assert len(history.json()["data"]) == 1
        assert detail.json()["data"]["enrolled_students"] == 0

    async def test_other_instructor_denied(self, client, auth_headers, make_course, make_batch) -> None:
        """Test that another instructor cannot manage the roster."""
        course = await make_course()
        batch = await make_batch(course)

        response = await client.post(
            f"{BATCHES}/{batch.id}/students",
            json=_student("student-1"),
            headers=auth_headers("instructor", "instructor-2"),
        )

        assert response.status_code == 403


class TestTutors:
    """Tests for tutor assignment."""

    async def test_assign_tutor_admin_only(self, client, auth_headers, make_course, make_batch, make_user) -> None:
        """Test that only admins assign tutors."""
        course = await make_course()
        batch = await make_batch(course)
        tutor = await make_user(role="tutor", name="Tina Tutor")

        denied = await client.post(
            f"{BATCHES}/{batch.id}/tutors", json={"tutor_id": tutor.id}, headers=auth_headers("instructor")
        )
        assigned = await client.post(
            f"{BATCHES}/{batch.id}/tutors", json={"tutor_id": tutor.id}, headers=auth_headers("admin")
        )
        listed = await client.get(f"{BATCHES}/{batch.id}/tutors", headers=auth_headers("instructor"))

        assert denied.status_code == 403
        assert assigned.status_code == 201
        assert [t["tutor_id"] for t in listed.json()["data"]] == [tutor.id]
