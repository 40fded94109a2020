# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Live class recording service.

This module provides the LiveClassService class for:
- Registering recordings and granting access to the batch's students
- Access-checked reads for students and tutors
- Access list management and deletion by the owning instructor
- View counting with a running average watch time

A student may watch a recording when it is ready, not expired, and either
public, listed in ``allowed_student_ids``, or shared with the batch of the
student's enrollment through ``allowed_batch_ids``. Tutors see the recordings
of the batches they are assigned to.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ForbiddenError, NotFoundError
from src.infrastructure.database.models import (
    SEAT_RELEASED_STATUS,
    TUTOR_ACTIVE,
    Batch,
    Course,
    Enrollment,
    LiveClassRecording,
    TutorAssignment,
)
from src.models.enrollment import EnrollmentStatus
from src.models.live_class import (
    RecordingAccessUpdateRequest,
    RecordingCreateRequest,
    RecordingResponse,
    RecordingStatus,
)
from src.utils.datetime import is_expired, utc_now

logger = logging.getLogger(__name__)


class LiveClassServiceError(Exception):
    """Base exception for live class service errors."""

    pass


class RecordingNotFoundError(LiveClassServiceError, NotFoundError):
    """Raised when a recording is not found."""

    pass


class RecordingTargetNotFoundError(LiveClassServiceError, NotFoundError):
    """Raised when the course or batch of a recording does not exist."""

    pass


class RecordingAccessDeniedError(LiveClassServiceError, ForbiddenError):
    """Raised when the caller may not see or change the recording."""

    pass


class LiveClassService:
    """Service for live class recordings.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_recording(
        self,
        request: RecordingCreateRequest,
        instructor_id: str,
        instructor_name: str,
        owner_id: str | None,
    ) -> RecordingResponse:
        """Register a recording of a live class.

        The recording is created ``ready``. Students actively enrolled in the
        course and batch at this moment are granted access, and the batch is
        added to ``allowed_batch_ids``.

        Raises:
            RecordingTargetNotFoundError: If the course or batch does not exist.
            RecordingAccessDeniedError: If the caller does not own the course.
        """
        course_result = await self.db.execute(select(Course).where(Course.id == request.course_id))
        course = course_result.scalar_one_or_none()
        if course is None:
            raise RecordingTargetNotFoundError(f"Course {request.course_id} not found")
        if owner_id is not None and course.instructor_id != owner_id:
            raise RecordingAccessDeniedError("You do not own this course")

        batch_result = await self.db.execute(
            select(Batch.id).where(Batch.id == request.batch_id, Batch.course_id == course.id)
        )
        if batch_result.scalar_one_or_none() is None:
            raise RecordingTargetNotFoundError(
                f"Batch {request.batch_id} not found in course {course.id}"
            )

        students_result = await self.db.execute(
            select(Enrollment.student_id).where(
                Enrollment.course_id == course.id,
                Enrollment.batch_id == request.batch_id,
                Enrollment.status == EnrollmentStatus.ACTIVE.value,
            )
        )
        allowed_student_ids = list(students_result.scalars().all())

        recording = LiveClassRecording(
            **request.model_dump(mode="python", exclude={"quality", "recorded_at", "instructor_name"}),
            quality=request.quality.value,
            recorded_at=request.recorded_at or utc_now(),
            instructor_id=instructor_id,
            instructor_name=request.instructor_name or instructor_name,
            status=RecordingStatus.READY.value,
            allowed_student_ids=allowed_student_ids,
            allowed_batch_ids=[request.batch_id],
            view_count=0,
            average_watch_time=0.0,
        )

        self.db.add(recording)
        await self.db.commit()
        await self.db.refresh(recording)

        logger.info(
            "Created recording: id=%s, course=%s, batch=%s, granted=%s",
            recording.id,
            course.id,
            request.batch_id,
            len(allowed_student_ids),
        )

        return self._to_response(recording)

    async def get_recording(
        self,
        recording_id: str,
        student_id: str | None = None,
        tutor_id: str | None = None,
    ) -> RecordingResponse:
        """Get a recording.

        Args:
            recording_id: Recording identifier.
            student_id: When set, the student must be allowed to watch it.
            tutor_id: When set, the recording must be shared with one of the
                tutor's batches.

        Raises:
            RecordingNotFoundError: If recording not found.
            RecordingAccessDeniedError: If the caller may not watch it.
        """
        recording = await self._get_by_id(recording_id)

        if student_id is not None:
            batch_ids = await self.student_batches(student_id, [recording.course_id])
            if not can_watch(recording, student_id, batch_ids):
                raise RecordingAccessDeniedError("You do not have access to this recording")

        if tutor_id is not None:
            batch_ids = await self._tutor_batches(tutor_id, recording.course_id)
            if not _shared_with(recording, batch_ids):
                raise RecordingAccessDeniedError("You do not tutor a batch of this recording")

        return self._to_response(recording)

    async def list_course_recordings(
        self,
        course_id: str,
        instructor_id: str | None = None,
    ) -> list[RecordingResponse]:
        """All recordings of a course, newest first."""
        query = select(LiveClassRecording).where(LiveClassRecording.course_id == course_id)
        if instructor_id:
            query = query.where(LiveClassRecording.instructor_id == instructor_id)

        result = await self.db.execute(query.order_by(LiveClassRecording.recorded_at.desc()))
        return [self._to_response(r) for r in result.scalars().all()]

    async def list_student_recordings(
        self,
        student_id: str,
        course_id: str | None = None,
    ) -> list[RecordingResponse]:
        """Recordings a student may watch, newest first.

        Args:
            student_id: Student identifier.
            course_id: Limit to one course. Otherwise every course the
                student holds a seat in is searched.
        """
        if course_id:
            course_ids = [course_id]
        else:
            result = await self.db.execute(
                select(Enrollment.course_id).where(
                    Enrollment.student_id == student_id,
                    Enrollment.status != SEAT_RELEASED_STATUS,
                )
            )
            course_ids = list(result.scalars().all())
        if not course_ids:
            return []

        batch_ids = await self.student_batches(student_id, course_ids)

        result = await self.db.execute(
            select(LiveClassRecording)
            .where(
                LiveClassRecording.course_id.in_(course_ids),
                LiveClassRecording.status == RecordingStatus.READY.value,
            )
            .order_by(LiveClassRecording.recorded_at.desc())
        )
        return [
            self._to_response(r)
            for r in result.scalars().all()
            if can_watch(r, student_id, batch_ids)
        ]

    async def list_tutor_recordings(self, tutor_id: str, course_id: str) -> list[RecordingResponse]:
        """Recordings of a course shared with the batches the tutor is assigned to."""
        batch_ids = await self._tutor_batches(tutor_id, course_id)
        if not batch_ids:
            return []

        result = await self.db.execute(
            select(LiveClassRecording)
            .where(LiveClassRecording.course_id == course_id)
            .order_by(LiveClassRecording.recorded_at.desc())
        )
        return [
            self._to_response(r)
            for r in result.scalars().all()
            if _shared_with(r, batch_ids)
        ]

    async def update_access(
        self,
        recording_id: str,
        request: RecordingAccessUpdateRequest,
        owner_id: str | None,
    ) -> RecordingResponse:
        """Replace the access settings of a recording.

        Raises:
            RecordingNotFoundError: If recording not found.
            RecordingAccessDeniedError: If the caller does not own it.
        """
        recording = await self._get_owned(recording_id, owner_id)

        update_data = request.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if value is None and field != "expires_at":
                continue
            setattr(recording, field, list(value) if isinstance(value, list) else value)

        await self.db.commit()
        await self.db.refresh(recording)

        logger.info("Updated recording access: id=%s, fields=%s", recording_id, sorted(update_data))

        return self._to_response(recording)

    async def delete_recording(self, recording_id: str, owner_id: str | None) -> None:
        """Delete a recording.

        Raises:
            RecordingNotFoundError: If recording not found.
            RecordingAccessDeniedError: If the caller does not own it.
        """
        recording = await self._get_owned(recording_id, owner_id)

        await self.db.delete(recording)
        await self.db.commit()

        logger.info("Deleted recording: id=%s", recording_id)

    async def record_view(self, recording_id: str, watch_time: float) -> RecordingResponse:
        """Count a view and fold its watch time into the running average.

        Raises:
            RecordingNotFoundError: If recording not found.
        """
        result = await self.db.execute(
            select(LiveClassRecording)
            .where(LiveClassRecording.id == recording_id)
            .with_for_update()
        )
        recording = result.scalar_one_or_none()
        if recording is None:
            raise RecordingNotFoundError(f"Recording {recording_id} not found")

        previous = recording.view_count
        recording.view_count = previous + 1
        recording.average_watch_time = (
            recording.average_watch_time * previous + watch_time
        ) / recording.view_count

        await self.db.commit()
        await self.db.refresh(recording)

        return self._to_response(recording)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _get_by_id(self, recording_id: str) -> LiveClassRecording:
        result = await self.db.execute(
            select(LiveClassRecording).where(LiveClassRecording.id == recording_id)
        )
        recording = result.scalar_one_or_none()
        if recording is None:
            raise RecordingNotFoundError(f"Recording {recording_id} not found")
        return recording

    async def _get_owned(self, recording_id: str, owner_id: str | None) -> LiveClassRecording:
        recording = await self._get_by_id(recording_id)
        if owner_id is not None and recording.instructor_id != owner_id:
            raise RecordingAccessDeniedError("You do not own this recording")
        return recording

    async def student_batches(self, student_id: str, course_ids: list[str]) -> set[str]:
        """Batches in which the student currently holds a seat."""
        result = await self.db.execute(
            select(Enrollment.batch_id).where(
                Enrollment.student_id == student_id,
                Enrollment.course_id.in_(course_ids),
                Enrollment.status != SEAT_RELEASED_STATUS,
                Enrollment.batch_id.is_not(None),
            )
        )
        return set(result.scalars().all())

    async def _tutor_batches(self, tutor_id: str, course_id: str) -> set[str]:
        result = await self.db.execute(
            select(TutorAssignment.batch_id).where(
                TutorAssignment.tutor_id == tutor_id,
                TutorAssignment.course_id == course_id,
                TutorAssignment.status == TUTOR_ACTIVE,
            )
        )
        return set(result.scalars().all())

    def _to_response(self, recording: LiveClassRecording) -> RecordingResponse:
        return RecordingResponse.model_validate(recording)


def can_watch(recording: LiveClassRecording, student_id: str, batch_ids: set[str]) -> bool:
    """Whether a student with seats in ``batch_ids`` may watch the recording."""
    if recording.status != RecordingStatus.READY.value or is_expired(recording.expires_at):
        return False
    if recording.is_public or student_id in (recording.allowed_student_ids or []):
        return True
    return bool(batch_ids.intersection(recording.allowed_batch_ids or []))


def _shared_with(recording: LiveClassRecording, batch_ids: set[str]) -> bool:
    return recording.batch_id in batch_ids or bool(
        batch_ids.intersection(recording.allowed_batch_ids or [])
    )
