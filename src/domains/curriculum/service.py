# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum service for course modules and lessons.

A course has at most one curriculum, stored as a JSON document of modules
with embedded lessons. Every write rebuilds the document, keeps modules
and lessons ordered by ``order`` and recomputes ``total_duration`` (in
minutes) and ``total_lessons``.

The student view attaches the recording of a ``live_class`` lesson when the
student may watch it.
"""

import copy
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ForbiddenError, NotFoundError
from src.domains.live_class import LiveClassService, can_watch
from src.infrastructure.database.models import (
    Course,
    Curriculum,
    LiveClassRecording,
    new_id,
)
from src.models.curriculum import (
    CurriculumCreateRequest,
    CurriculumResponse,
    LessonInput,
    LessonType,
    LessonUpdateRequest,
    ModuleInput,
    ModuleUpdateRequest,
)
from src.models.live_class import RecordingStatus

logger = logging.getLogger(__name__)


class CurriculumServiceError(Exception):
    """Base exception for curriculum service errors."""

    pass


class CurriculumNotFoundError(CurriculumServiceError, NotFoundError):
    """Raised when a course has no curriculum."""

    pass


class CurriculumCourseNotFoundError(CurriculumServiceError, NotFoundError):
    """Raised when the course does not exist."""

    pass


class CurriculumModuleNotFoundError(CurriculumServiceError, NotFoundError):
    """Raised when a module is not in the curriculum."""

    pass


class LessonNotFoundError(CurriculumServiceError, NotFoundError):
    """Raised when a lesson is not in the module."""

    pass


class CurriculumAccessDeniedError(CurriculumServiceError, ForbiddenError):
    """Raised when the caller does not own the course."""

    pass


class CurriculumService:
    """Service for managing course curricula.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_curriculum(
        self,
        course_id: str,
        request: CurriculumCreateRequest,
        owner_id: str | None,
    ) -> CurriculumResponse:
        """Create the curriculum of a course, replacing any existing one.

        Raises:
            CurriculumCourseNotFoundError: If the course does not exist.
            CurriculumAccessDeniedError: If the caller does not own the course.
        """
        await self._check_course(course_id, owner_id)

        modules = [_build_module(m) for m in request.modules]

        curriculum = await self._find(course_id)
        if curriculum is None:
            curriculum = Curriculum(course_id=course_id)
            self.db.add(curriculum)

        self._store(curriculum, modules)
        await self.db.commit()
        await self.db.refresh(curriculum)

        logger.info(
            "Curriculum saved: course=%s, modules=%s, lessons=%s",
            course_id,
            len(modules),
            curriculum.total_lessons,
        )

        return self._to_response(curriculum)

    async def get_curriculum(self, course_id: str) -> CurriculumResponse:
        """Get the curriculum of a course.

        Raises:
            CurriculumNotFoundError: If the course has no curriculum.
        """
        curriculum = await self._get(course_id)
        return self._to_response(curriculum)

    async def add_module(
        self,
        course_id: str,
        request: ModuleInput,
        owner_id: str | None,
    ) -> CurriculumResponse:
        """Append a module to the curriculum."""
        await self._check_course(course_id, owner_id)
        curriculum = await self._get(course_id)

        modules = copy.deepcopy(curriculum.modules)
        modules.append(_build_module(request))

        return await self._save(curriculum, modules, "Added module")

    async def update_module(
        self,
        course_id: str,
        module_id: str,
        request: ModuleUpdateRequest,
        owner_id: str | None,
    ) -> CurriculumResponse:
        """Update module fields. Lessons are left untouched.

        Raises:
            CurriculumModuleNotFoundError: If the module does not exist.
        """
        await self._check_course(course_id, owner_id)
        curriculum = await self._get(course_id)

        modules = copy.deepcopy(curriculum.modules)
        module = _find_module(modules, module_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            if value is not None:
                module[field] = value

        return await self._save(curriculum, modules, "Updated module")

    async def delete_module(
        self,
        course_id: str,
        module_id: str,
        owner_id: str | None,
    ) -> CurriculumResponse:
        """Remove a module and its lessons.

        Raises:
            CurriculumModuleNotFoundError: If the module does not exist.
        """
        await self._check_course(course_id, owner_id)
        curriculum = await self._get(course_id)

        modules = copy.deepcopy(curriculum.modules)
        _find_module(modules, module_id)
        modules = [m for m in modules if m["id"] != module_id]

        return await self._save(curriculum, modules, "Deleted module")

    async def add_lesson(
        self,
        course_id: str,
        module_id: str,
        request: LessonInput,
        owner_id: str | None,
    ) -> CurriculumResponse:
        """Add a lesson to a module.

        Raises:
            CurriculumModuleNotFoundError: If the module does not exist.
        """
        await self._check_course(course_id, owner_id)
        curriculum = await self._get(course_id)

        modules = copy.deepcopy(curriculum.modules)
        module = _find_module(modules, module_id)
        module["lessons"].append(_build_lesson(request))

        return await self._save(curriculum, modules, "Added lesson")

    async def update_lesson(
        self,
        course_id: str,
        module_id: str,
        lesson_id: str,
        request: LessonUpdateRequest,
        owner_id: str | None,
    ) -> CurriculumResponse:
        """Update lesson fields.

        Raises:
            CurriculumModuleNotFoundError: If the module does not exist.
            LessonNotFoundError: If the lesson does not exist.
        """
        await self._check_course(course_id, owner_id)
        curriculum = await self._get(course_id)

        modules = copy.deepcopy(curriculum.modules)
        lesson = _find_lesson(_find_module(modules, module_id), lesson_id)
        for field, value in request.model_dump(mode="json", exclude_unset=True).items():
            if value is not None:
                lesson[field] = value

        return await self._save(curriculum, modules, "Updated lesson")

    async def delete_lesson(
        self,
        course_id: str,
        module_id: str,
        lesson_id: str,
        owner_id: str | None,
    ) -> CurriculumResponse:
        """Remove a lesson from a module.

        Raises:
            CurriculumModuleNotFoundError: If the module does not exist.
            LessonNotFoundError: If the lesson does not exist.
        """
        await self._check_course(course_id, owner_id)
        curriculum = await self._get(course_id)

        modules = copy.deepcopy(curriculum.modules)
        module = _find_module(modules, module_id)
        _find_lesson(module, lesson_id)
        module["lessons"] = [lesson for lesson in module["lessons"] if lesson["id"] != lesson_id]

        return await self._save(curriculum, modules, "Deleted lesson")

    async def get_student_curriculum(self, course_id: str, student_id: str) -> CurriculumResponse:
        """Curriculum as seen by a student.

        ``live_class`` lessons get ``recording_url`` and ``recording_id``
        when the student may watch the lesson's recording. Batch access
        comes from the batches in which the student holds a seat, so a
        dropped student keeps only public and individually granted
        recordings.

        Raises:
            CurriculumNotFoundError: If the course has no curriculum.
        """
        curriculum = await self._get(course_id)

        batch_ids = await LiveClassService(self.db).student_batches(student_id, [course_id])

        result = await self.db.execute(
            select(LiveClassRecording).where(
                LiveClassRecording.course_id == course_id,
                LiveClassRecording.status == RecordingStatus.READY.value,
            )
        )
        recordings = [r for r in result.scalars().all() if can_watch(r, student_id, batch_ids)]
        by_id = {r.id: r for r in recordings}
        by_lesson = {r.lesson_id: r for r in recordings if r.lesson_id}

        response = self._to_response(curriculum)
        for module in response.modules:
            for lesson in module.lessons:
                if lesson.type != LessonType.LIVE_CLASS.value:
                    continue
                recording = by_id.get(lesson.live_class_id or "") or by_lesson.get(lesson.id)
                if recording is not None:
                    lesson.recording_url = recording.recording_url
                    lesson.recording_id = recording.id
                    lesson.duration = recording.duration

        return response

    # =========================================================================
    # Helper Methods
    # =========================================================================

    async def _check_course(self, course_id: str, owner_id: str | None) -> None:
        result = await self.db.execute(select(Course.instructor_id).where(Course.id == course_id))
        instructor_id = result.scalar_one_or_none()
        if instructor_id is None:
            raise CurriculumCourseNotFoundError(f"Course {course_id} not found")
        if owner_id is not None and instructor_id != owner_id:
            raise CurriculumAccessDeniedError("You do not own this course")

    async def _find(self, course_id: str) -> Curriculum | None:
        result = await self.db.execute(select(Curriculum).where(Curriculum.course_id == course_id))
        return result.scalar_one_or_none()

    async def _get(self, course_id: str) -> Curriculum:
        curriculum = await self._find(course_id)
        if curriculum is None:
            raise CurriculumNotFoundError(f"Curriculum for course {course_id} not found")
        return curriculum

    async def _save(
        self,
        curriculum: Curriculum,
        modules: list[dict[str, Any]],
        action: str,
    ) -> CurriculumResponse:
        self._store(curriculum, modules)
        await self.db.commit()
        await self.db.refresh(curriculum)

        logger.info("%s: course=%s, lessons=%s", action, curriculum.course_id, curriculum.total_lessons)

        return self._to_response(curriculum)

    @staticmethod
    def _store(curriculum: Curriculum, modules: list[dict[str, Any]]) -> None:
        # Reassigning the list marks the JSON column dirty.
        for module in modules:
            module["lessons"] = sorted(module["lessons"], key=lambda lesson: lesson["order"])
        modules = sorted(modules, key=lambda m: m["order"])

        curriculum.modules = modules
        curriculum.total_lessons = sum(len(m["lessons"]) for m in modules)
        curriculum.total_duration = sum(
            lesson["duration"] for m in modules for lesson in m["lessons"]
        )

    def _to_response(self, curriculum: Curriculum) -> CurriculumResponse:
        return CurriculumResponse.model_validate(curriculum)


def _build_lesson(lesson: LessonInput) -> dict[str, Any]:
    return {"id": new_id(), **lesson.model_dump(mode="json")}


def _build_module(module: ModuleInput) -> dict[str, Any]:
    data = module.model_dump(mode="json", exclude={"lessons"})
    return {
        "id": new_id(),
        **data,
        "lessons": [_build_lesson(lesson) for lesson in module.lessons],
    }


def _find_module(modules: list[dict[str, Any]], module_id: str) -> dict[str, Any]:
    for module in modules:
        if module["id"] == module_id:
            return module
    raise CurriculumModuleNotFoundError(f"Module {module_id} not found")


def _find_lesson(module: dict[str, Any], lesson_id: str) -> dict[str, Any]:
    for lesson in module["lessons"]:
        if lesson["id"] == lesson_id:
            return lesson
    raise LessonNotFoundError(f"Lesson {lesson_id} not found")
