# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy shared by every domain service.

Services raise subclasses of these categories (for example
``CourseNotFoundError(CourseServiceError, NotFoundError)``). The API layer
maps a raised error to its HTTP status by category, using ``code`` and
``status_code``, and never inspects the message text.
"""


class DomainError(Exception):
    """Base class for all expected service failures.

    Attributes:
        code: Stable machine-readable tag.
        status_code: HTTP status the API layer responds with.
        message: Human-readable description.
    """

    code: str = "internal_error"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Input is well-formed but violates a business rule."""

    code = "validation_error"
    status_code = 400


class UnauthorizedError(DomainError):
    """Caller is not authenticated."""

    code = "unauthorized"
    status_code = 401


class ForbiddenError(DomainError):
    """Caller lacks the role or ownership required."""

    code = "forbidden"
    status_code = 403


class NotFoundError(DomainError):
    """A referenced entity does not exist."""

    code = "not_found"
    status_code = 404


class ConflictError(DomainError):
    """The request collides with existing state."""

    code = "conflict"
    status_code = 409


class CapacityExceededError(ConflictError):
    """A course or batch has no free seat."""

    code = "capacity_exceeded"


class InvalidStateError(DomainError):
    """The entity is not in a state that permits the operation."""

    code = "invalid_state"
    status_code = 400
