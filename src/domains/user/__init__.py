# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User domain package.

This package provides user administration:
- UserService: CRUD, status, verification and role management
- Exceptions: User-related error types

Example:
    >>> from src.domains.user import UserService
    >>> service = UserService(db)
    >>> user = await service.create_user(request)
"""

from src.domains.user.service import (
    ROLE_DESCRIPTIONS,
    UserAlreadyExistsError,
    UserNotFoundError,
    UserOperationError,
    UserService,
    UserServiceError,
)

__all__ = [
    "ROLE_DESCRIPTIONS",
    "UserAlreadyExistsError",
    "UserNotFoundError",
    "UserOperationError",
    "UserService",
    "UserServiceError",
]
