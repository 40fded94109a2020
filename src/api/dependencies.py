# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get authenticated users and enforce roles
- Resolve pagination parameters
- Get service instances

Example:
    @router.get("/courses")
    async def list_courses(
        service: CourseService = Depends(get_course_service),
        current_user: CurrentUser = Depends(require_auth),
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.middleware.auth import CurrentUser, get_current_user
from src.domains.assignment import AssignmentService
from src.domains.batch import BatchService
from src.domains.course import CourseService
from src.domains.curriculum import CurriculumService
from src.domains.enrollment import EnrollmentService
from src.domains.live_class import LiveClassService
from src.domains.schedule import ScheduleService
from src.domains.student import StudentService
from src.domains.user import UserService
from src.infrastructure.database import get_session
from src.infrastructure.notifications import EmailSender, get_email_sender
from src.models.common import PageParams, UserRole

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session for the request.

    Yields:
        AsyncSession, committed on success and rolled back on error.
    """
    async with get_session() as session:
        yield session


# =========================================================================
# Authentication Dependencies
# =========================================================================


def get_optional_user(request: Request) -> CurrentUser | None:
    """Get current user if authenticated, None otherwise."""
    return get_current_user(request)


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(request: Request) -> CurrentUser:
    """Require admin user.

    Raises:
        HTTPException: If not authenticated or not admin.
    """
    user = require_auth(request)
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user


def require_instructor(request: Request) -> CurrentUser:
    """Require an admin, instructor or mentor.

    Raises:
        HTTPException: If not authenticated or lacking instructor privileges.
    """
    user = require_auth(request)
    if not (user.is_admin or user.is_instructor):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Instructor or admin access required",
        )
    return user


class RequireRole:
    """Dependency for requiring specific roles.

    Example:
        @router.get("/courses/statistics")
        async def statistics(
            user: CurrentUser = Depends(RequireRole("admin", "support")),
        ):
            ...
    """

    def __init__(self, *roles: str) -> None:
        """Initialize role requirement.

        Args:
            roles: Required role codes (any of these).
        """
        self.roles = roles

    def __call__(self, request: Request) -> CurrentUser:
        """Check roles and return user.

        Raises:
            HTTPException: If missing required roles.
        """
        user = require_auth(request)

        if not user.has_any_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(self.roles)}",
            )

        return user


def owner_scope(user: CurrentUser) -> str | None:
    """Instructor a mutated resource must belong to. None lifts the check for admins."""
    return None if user.is_admin else user.id


def get_page_params(
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: int = Query(default=20, ge=1, le=100, description="Items per page"),
) -> PageParams:
    """Parse page and limit query parameters."""
    return PageParams(page=page, limit=limit)


# =========================================================================
# Service Dependencies
# =========================================================================


def get_course_service(db: AsyncSession = Depends(get_db)) -> CourseService:
    """Get CourseService instance."""
    return CourseService(db)


def get_batch_service(db: AsyncSession = Depends(get_db)) -> BatchService:
    """Get BatchService instance."""
    return BatchService(db)


def get_enrollment_service(db: AsyncSession = Depends(get_db)) -> EnrollmentService:
    """Get EnrollmentService instance."""
    return EnrollmentService(db)


def get_assignment_service(db: AsyncSession = Depends(get_db)) -> AssignmentService:
    """Get AssignmentService instance."""
    return AssignmentService(db)


def get_schedule_service(db: AsyncSession = Depends(get_db)) -> ScheduleService:
    """Get ScheduleService instance."""
    return ScheduleService(db)


def get_curriculum_service(db: AsyncSession = Depends(get_db)) -> CurriculumService:
    """Get CurriculumService instance."""
    return CurriculumService(db)


def get_live_class_service(db: AsyncSession = Depends(get_db)) -> LiveClassService:
    """Get LiveClassService instance."""
    return LiveClassService(db)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    """Get UserService instance."""
    return UserService(db)


def get_student_service(db: AsyncSession = Depends(get_db)) -> StudentService:
    """Get StudentService instance."""
    return StudentService(db)


# =========================================================================
# Type Aliases for Cleaner Endpoint Signatures
# =========================================================================

DB = Annotated[AsyncSession, Depends(get_db)]
OptionalUser = Annotated[CurrentUser | None, Depends(get_optional_user)]
AuthenticatedUser = Annotated[CurrentUser, Depends(require_auth)]
AdminUser = Annotated[CurrentUser, Depends(require_admin)]
InstructorUser = Annotated[CurrentUser, Depends(require_instructor)]
StudentUser = Annotated[CurrentUser, Depends(RequireRole(UserRole.STUDENT.value))]
StatsUser = Annotated[
    CurrentUser,
    Depends(
        RequireRole(
            UserRole.ADMIN.value,
            UserRole.INSTRUCTOR.value,
            UserRole.MENTOR.value,
            UserRole.SUPPORT.value,
        )
    ),
]
Page = Annotated[PageParams, Depends(get_page_params)]
Mailer = Annotated[EmailSender, Depends(get_email_sender)]
