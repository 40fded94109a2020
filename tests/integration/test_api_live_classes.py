# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP tests for recording visibility across roles."""

import pytest

from src.domains.curriculum import CurriculumService
from src.domains.live_class import LiveClassService
from src.infrastructure.database.models import TutorAssignment
from src.models.curriculum import CurriculumCreateRequest
from src.models.live_class import RecordingCreateRequest

pytestmark = pytest.mark.integration

URL = "https://cdn.example.com/rec/live.mp4"


async def _course_with_recording(db_session, make_course, make_batch):
    course = await make_course()
    batch = await make_batch(course)
    curriculum = await CurriculumService(db_session).create_curriculum(
        course.id,
        CurriculumCreateRequest(
            modules=[
                {
                    "title": "Basics",
                    "order": 1,
                    "lessons": [{"title": "Live Q&A", "type": "live_class", "duration": 60}],
                }
            ]
        ),
        owner_id=None,
    )
    lesson = curriculum.modules[0].lessons[0]
    recording = await LiveClassService(db_session).create_recording(
        RecordingCreateRequest(
            course_id=course.id,
            batch_id=batch.id,
            module_id=curriculum.modules[0].id,
            lesson_id=lesson.id,
            title="Live Q&A recording",
            recording_url=URL,
            duration=3600,
        ),
        instructor_id="instructor-1",
        instructor_name="Instructor 1",
        owner_id=None,
    )
    return course, batch, recording


class TestStudentCurriculum:
    """Recording links in the student curriculum."""

    async def test_batch_query_parameter_grants_nothing(
        self, client, auth_headers, db_session, make_course, make_batch
    ) -> None:
        """Test that naming a batch in the query does not unlock its recordings."""
        course, batch, _ = await _course_with_recording(db_session, make_course, make_batch)

        response = await client.get(
            f"/api/v1/curriculum/{course.id}",
            params={"batch_id": batch.id},
            headers=auth_headers("student", "outsider"),
        )

        assert response.status_code == 200
        lesson = response.json()["data"]["modules"][0]["lessons"][0]
        assert lesson["recording_url"] is None

    async def test_staff_see_plain_curriculum(
        self, client, auth_headers, db_session, make_course, make_batch
    ) -> None:
        """Test that staff get the authoring view."""
        course, _, _ = await _course_with_recording(db_session, make_course, make_batch)

        response = await client.get(f"/api/v1/curriculum/{course.id}", headers=auth_headers("instructor"))

        assert response.status_code == 200
        assert response.json()["data"]["total_lessons"] == 1


class TestCourseRecordings:
    """Course recording lists per role."""

    async def test_tutor_limited_to_assigned_batches(
        self, client, auth_headers, db_session, make_course, make_batch
    ) -> None:
        """Test that tutors only list recordings of their batches."""
        course, batch, recording = await _course_with_recording(db_session, make_course, make_batch)
        db_session.add(
            TutorAssignment(
                tutor_id="tutor-1",
                tutor_name="Tutor 1",
                tutor_email="tutor-1@example.com",
                batch_id=batch.id,
                course_id=course.id,
            )
        )
        await db_session.commit()
        path = f"/api/v1/live-classes/courses/{course.id}/recordings"

        assigned = await client.get(path, headers=auth_headers("tutor", "tutor-1"))
        unassigned = await client.get(path, headers=auth_headers("tutor", "tutor-2"))
        denied = await client.get(
            f"/api/v1/live-classes/recordings/{recording.id}",
            headers=auth_headers("tutor", "tutor-2"),
        )

        assert [r["id"] for r in assigned.json()["data"]] == [recording.id]
        assert unassigned.json()["data"] == []
        assert denied.status_code == 403
        assert denied.json()["code"] == "forbidden"

    async def test_support_lists_everything(
        self, client, auth_headers, db_session, make_course, make_batch
    ) -> None:
        """Test that support staff see every recording of the course."""
        course, _, recording = await _course_with_recording(db_session, make_course, make_batch)

        response = await client.get(
            f"/api/v1/live-classes/courses/{course.id}/recordings",
            headers=auth_headers("support"),
        )

        assert [r["id"] for r in response.json()["data"]] == [recording.id]
