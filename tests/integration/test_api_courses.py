# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP tests for course endpoints: envelope, auth and error mapping."""

import pytest

pytestmark = pytest.mark.integration

COURSES = "/api/v1/courses"


class TestAuthentication:
    """Tests for authentication and role guards."""

    async def test_requires_token(self, client) -> None:
        """Test that reads need a bearer token."""
        response = await client.get(COURSES)

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "Not authenticated", "code": "unauthorized"}

    async def test_invalid_token(self, client) -> None:
        """Test that a malformed token is rejected by the middleware."""
        response = await client.get(COURSES, headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid token"
        assert response.json()["code"] == "unauthorized"

    async def test_student_cannot_create(self, client, auth_headers, course_payload) -> None:
        """Test that students get 403 on course creation."""
        response = await client.post(COURSES, json=course_payload, headers=auth_headers("student"))

        assert response.status_code == 403
        assert response.json()["code"] == "forbidden"


class TestCourseEndpoints:
    """Tests for course CRUD over HTTP."""

    async def test_create_course(self, client, auth_headers, course_payload) -> None:
        """Test that creation answers 201 with a draft owned by the caller."""
        response = await client.post(COURSES, json=course_payload, headers=auth_headers("instructor"))

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "draft"
        assert body["data"]["instructor_id"] == "instructor-1"
        assert body["data"]["enrolled_students"] == 0

    async def test_create_validation_error(self, client, auth_headers, course_payload) -> None:
        """Test that invalid input is a 400 with the validation code."""
        course_payload["max_students"] = 0

        response = await client.post(COURSES, json=course_payload, headers=auth_headers("instructor"))

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "validation_error"
        assert "max_students" in body["error"]

    async def test_list_paginated(self, client, auth_headers, make_course) -> None:
        """Test the pagination block of list responses."""
        for title in ("Go Basics", "Rust in Depth", "Python Fundamentals"):
            await make_course(title=title)

        response = await client.get(
            COURSES, params={"limit": 2, "page": 1, "sort_by": "title", "sort_order": "asc"}, headers=auth_headers("student")
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert [c["title"] for c in data["items"]] == ["Go Basics", "Python Fundamentals"]
        assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}

    async def test_get_unknown_course(self, client, auth_headers) -> None:
        """Test the 404 envelope."""
        response = await client.get(f"{COURSES}/missing", headers=auth_headers("student"))

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    async def test_update_other_instructors_course(self, client, auth_headers, make_course) -> None:
        """Test that only the owner may update a course."""
        course = await make_course()

        response = await client.put(
            f"{COURSES}/{course.id}", json={"title": "Taken Over"}, headers=auth_headers("instructor", "instructor-2")
        )

        assert response.status_code == 403

    async def test_admin_publishes_any_course(self, client, auth_headers, make_course) -> None:
        """Test that admins bypass ownership."""
        course = await make_course(status="draft")

        response = await client.post(f"{COURSES}/{course.id}/publish", headers=auth_headers("admin"))

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "published"
        assert response.json()["data"]["published_at"] is not None

    async def test_delete_with_enrollments_conflicts(self, client, auth_headers, make_course) -> None:
        """Test that deleting an enrolled course answers 409."""
        course = await make_course()
        enrolled = await client.post(
            "/api/v1/enrollments",
            json={
                "student_id": "student-1",
                "student_name": "Ada",
                "student_email": "ada@example.com",
                "course_id": course.id,
                "payment_amount": 0,
            },
            headers=auth_headers("student"),
        )
        assert enrolled.status_code == 201

        response = await client.delete(f"{COURSES}/{course.id}", headers=auth_headers("instructor"))

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    async def test_statistics_role_guard(self, client, auth_headers, make_course) -> None:
        """Test that statistics are for staff only."""
        await make_course()

        denied = await client.get(f"{COURSES}/statistics", headers=auth_headers("student"))
        allowed = await client.get(f"{COURSES}/statistics", headers=auth_headers("support"))

        assert denied.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()["data"]["total_courses"] == 1
