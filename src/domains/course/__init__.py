# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course domain package.

This package provides course catalogue management:
- Course CRUD and status transitions
- Catalogue listing and statistics
"""

from src.domains.course.service import (
    CourseAccessDeniedError,
    CourseCapacityError,
    CourseHasEnrollmentsError,
    CourseNotFoundError,
    CourseService,
    CourseServiceError,
)

__all__ = [
    "CourseAccessDeniedError",
    "CourseCapacityError",
    "CourseHasEnrollmentsError",
    "CourseNotFoundError",
    "CourseService",
    "CourseServiceError",
]
