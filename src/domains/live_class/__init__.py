# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Live class domain package.

This package provides live class recordings and their access control.
"""

from src.domains.live_class.service import (
    LiveClassService,
    LiveClassServiceError,
    RecordingAccessDeniedError,
    RecordingNotFoundError,
    RecordingTargetNotFoundError,
    can_watch,
)

__all__ = [
    "LiveClassService",
    "LiveClassServiceError",
    "RecordingAccessDeniedError",
    "RecordingNotFoundError",
    "RecordingTargetNotFoundError",
    "can_watch",
]
