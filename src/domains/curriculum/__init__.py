# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum domain package.

This package provides course curricula: modules with embedded lessons and
the recording-enriched student view.
"""

from src.domains.curriculum.service import (
    CurriculumAccessDeniedError,
    CurriculumCourseNotFoundError,
    CurriculumModuleNotFoundError,
    CurriculumNotFoundError,
    CurriculumService,
    CurriculumServiceError,
    LessonNotFoundError,
)

__all__ = [
    "CurriculumAccessDeniedError",
    "CurriculumCourseNotFoundError",
    "CurriculumModuleNotFoundError",
    "CurriculumNotFoundError",
    "CurriculumService",
    "CurriculumServiceError",
    "LessonNotFoundError",
]
