# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Schedule domain package.

This package provides calendar events and dated batch sessions.
"""

from src.domains.schedule.service import (
    BatchSessionNotFoundError,
    ScheduleAccessDeniedError,
    ScheduleEventNotFoundError,
    ScheduleService,
    ScheduleServiceError,
    ScheduleTargetNotFoundError,
    ScheduleValidationError,
)

__all__ = [
    "BatchSessionNotFoundError",
    "ScheduleAccessDeniedError",
    "ScheduleEventNotFoundError",
    "ScheduleService",
    "ScheduleServiceError",
    "ScheduleTargetNotFoundError",
    "ScheduleValidationError",
]
