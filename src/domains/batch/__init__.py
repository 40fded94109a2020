# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch domain package.

This package provides batch (cohort) management:
- Batch CRUD and listing
- Roster changes through the enrollment seat ledger
- Tutor assignment
"""

from src.domains.batch.service import (
    BatchAccessDeniedError,
    BatchCourseNotFoundError,
    BatchHasEnrollmentsError,
    BatchNotFoundError,
    BatchService,
    BatchServiceError,
    BatchValidationError,
    TutorAlreadyAssignedError,
    TutorNotFoundError,
)

__all__ = [
    "BatchAccessDeniedError",
    "BatchCourseNotFoundError",
    "BatchHasEnrollmentsError",
    "BatchNotFoundError",
    "BatchService",
    "BatchServiceError",
    "BatchValidationError",
    "TutorAlreadyAssignedError",
    "TutorNotFoundError",
]
