# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Assignment domain package.

This package provides coursework management:
- Assignment CRUD and publishing
- Due-date window queries
"""

from src.domains.assignment.service import (
    AssignmentAccessDeniedError,
    AssignmentCourseNotFoundError,
    AssignmentNotFoundError,
    AssignmentService,
    AssignmentServiceError,
    AssignmentValidationError,
)

__all__ = [
    "AssignmentAccessDeniedError",
    "AssignmentCourseNotFoundError",
    "AssignmentNotFoundError",
    "AssignmentService",
    "AssignmentServiceError",
    "AssignmentValidationError",
]
