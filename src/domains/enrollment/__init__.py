# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides student enrollment management functionality including:
- Capacity-aware enrollment into courses and batches
- Idempotent drops through the seat ledger
- Progress, certificates and counter reconciliation
"""

from src.domains.enrollment.seats import BatchFullError, EnrollmentServiceError, SeatLedger
from src.domains.enrollment.service import (
    AlreadyEnrolledError,
    BatchNotFoundError,
    CertificateAlreadyIssuedError,
    CourseNotCompletedError,
    CourseNotFoundError,
    EnrollmentNotFoundError,
    EnrollmentService,
)

__all__ = [
    "AlreadyEnrolledError",
    "BatchFullError",
    "BatchNotFoundError",
    "CertificateAlreadyIssuedError",
    "CourseNotCompletedError",
    "CourseNotFoundError",
    "EnrollmentNotFoundError",
    "EnrollmentService",
    "EnrollmentServiceError",
    "SeatLedger",
]
