# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User service for platform user administration.

This module provides the UserService that handles:
- User CRUD operations
- User status management (activate, suspend, bulk updates)
- Verification flags and role changes
- Dashboard statistics

Credentials are held by the external auth service that issues bearer
tokens. This service only manages profiles, roles and account status.

Example:
    >>> user_service = UserService(db_session)
    >>> user = await user_service.create_user(request)
    >>> users, total = await user_service.list_users(role="tutor", limit=20)
"""

import logging

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.errors import ConflictError, NotFoundError, ValidationError
from src.infrastructure.database.models import User
from src.models.common import UserRole
from src.models.user import (
    BulkAction,
    BulkUserRequest,
    BulkUserResult,
    RoleInfo,
    UserCreateRequest,
    UserResponse,
    UserStats,
    UserStatus,
    UserUpdateRequest,
    VerificationType,
)
from src.utils.datetime import month_start, utc_now

logger = logging.getLogger(__name__)

ROLE_DESCRIPTIONS: dict[UserRole, str] = {
    UserRole.ADMIN: "Full access to every resource and user administration",
    UserRole.INSTRUCTOR: "Creates and manages own courses, batches and coursework",
    UserRole.MENTOR: "Instructor privileges for mentoring programmes",
    UserRole.STUDENT: "Enrolls in courses and follows their content",
    UserRole.TUTOR: "Assists instructors in batches and sessions",
    UserRole.SUPPORT: "Read access for learner support",
}


class UserServiceError(Exception):
    """Base exception for user service errors."""

    pass


class UserNotFoundError(UserServiceError, NotFoundError):
    """Raised when a user is not found."""

    pass


class UserAlreadyExistsError(UserServiceError, ConflictError):
    """Raised when trying to create a user with existing email."""

    pass


class UserOperationError(UserServiceError, ValidationError):
    """Raised when a user operation is malformed."""

    pass


class UserService:
    """Service for managing platform users.

    Attributes:
        _db: Async database session.

    Example:
        >>> service = UserService(db)
        >>> user = await service.create_user(create_request)
        >>> await service.suspend_user(user.id, "Spam", duration_days=7)
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize the user service.

        Args:
            db: Async database session.
        """
        self._db = db

    async def create_user(self, request: UserCreateRequest) -> UserResponse:
        """Create a new user.

        The email is stored lower-cased and must be unique.

        Args:
            request: User creation request.

        Returns:
            Created user response.

        Raises:
            UserAlreadyExistsError: If email already exists.
        """
        email = str(request.email).lower()

        existing = await self._get_by_email(email)
        if existing:
            raise UserAlreadyExistsError(f"User with email {email} already exists")

        user = User(
            name=request.name,
            email=email,
            role=request.role.value,
            status=UserStatus.ACTIVE.value,
            phone=request.phone,
            avatar=request.avatar,
            date_of_birth=request.date_of_birth,
            bio=request.bio,
            skills=list(request.skills),
            verified=False,
            email_verified=False,
            phone_verified=False,
        )

        self._db.add(user)
        try:
            await self._db.commit()
        except IntegrityError as e:
            await self._db.rollback()
            raise UserAlreadyExistsError(f"User with email {email} already exists") from e
        await self._db.refresh(user)

        logger.info("User created: %s (role=%s)", user.id, user.role)

        return self._to_response(user)

    async def get_user(self, user_id: str) -> UserResponse:
        """Get a user by ID.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_or_raise(user_id)
        return self._to_response(user)

    async def list_users(
        self,
        role: str | None = None,
        status: str | None = None,
        verified: bool | None = None,
        search: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> tuple[list[UserResponse], int]:
        """List users with optional filtering.

        Args:
            role: Filter by role ("all" disables the filter).
            status: Filter by status.
            verified: Filter by email verification.
            search: Search by name or email.
            limit: Maximum results.
            offset: Pagination offset.

        Returns:
            Tuple of (users, total count).
        """
        stmt = select(User)

        if role and role != "all":
            stmt = stmt.where(User.role == role)

        if status and status != "all":
            stmt = stmt.where(User.status == status)

        if verified is not None:
            stmt = stmt.where(User.email_verified == verified)

        if search:
            search_pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    User.name.ilike(search_pattern),
                    User.email.ilike(search_pattern),
                )
            )

        count_stmt = select(func.count()).select_from(stmt.subquery())
        count_result = await self._db.execute(count_stmt)
        total = count_result.scalar() or 0

        stmt = stmt.order_by(User.created_at.desc(), User.id).limit(limit).offset(offset)

        result = await self._db.execute(stmt)
        users = result.scalars().all()

        return [self._to_response(u) for u in users], total

    async def update_user(self, user_id: str, request: UserUpdateRequest) -> UserResponse:
        """Update a user profile.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_or_raise(user_id)

        update_data = request.model_dump(exclude_unset=True)
        for field, value in update_data.items():
            if value is None:
                continue
            setattr(user, field, value.value if isinstance(value, UserStatus) else value)

        await self._db.commit()
        await self._db.refresh(user)

        logger.info("User updated: %s", user.id)

        return self._to_response(user)

    async def delete_user(self, user_id: str) -> None:
        """Delete a user profile.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_or_raise(user_id)

        await self._db.delete(user)
        await self._db.commit()

        logger.info("User deleted: %s", user_id)

    async def verify_user(self, user_id: str, verification: VerificationType) -> UserResponse:
        """Mark the user's email or phone as verified.

        ``verified`` follows the email flag.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_or_raise(user_id)

        if verification == VerificationType.PHONE:
            user.phone_verified = True
        else:
            user.email_verified = True
            user.verified = True

        await self._db.commit()
        await self._db.refresh(user)

        logger.info("User verified: %s (type=%s)", user.id, verification.value)

        return self._to_response(user)

    async def suspend_user(
        self,
        user_id: str,
        reason: str,
        duration_days: int | None = None,
    ) -> UserResponse:
        """Suspend a user account.

        Args:
            user_id: User identifier.
            reason: Suspension reason shown to admins.
            duration_days: Suspension length, None for indefinite.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_or_raise(user_id)

        user.status = UserStatus.SUSPENDED.value
        user.suspension_reason = reason
        user.suspension_duration = duration_days
        user.suspended_at = utc_now()

        await self._db.commit()
        await self._db.refresh(user)

        logger.info("User suspended: %s (reason=%s, days=%s)", user.id, reason, duration_days)

        return self._to_response(user)

    async def activate_user(self, user_id: str) -> UserResponse:
        """Activate a user account and clear any suspension.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_or_raise(user_id)

        user.status = UserStatus.ACTIVE.value
        user.suspension_reason = None
        user.suspension_duration = None
        user.suspended_at = None

        await self._db.commit()
        await self._db.refresh(user)

        logger.info("User activated: %s", user.id)

        return self._to_response(user)

    async def change_role(self, user_id: str, role: UserRole) -> UserResponse:
        """Give a user another role.

        Raises:
            UserNotFoundError: If user not found.
        """
        user = await self._get_or_raise(user_id)

        previous = user.role
        user.role = role.value

        await self._db.commit()
        await self._db.refresh(user)

        logger.info("User role changed: %s (%s -> %s)", user.id, previous, role.value)

        return self._to_response(user)

    async def bulk_action(self, request: BulkUserRequest) -> BulkUserResult:
        """Apply a status update or delete to many users at once.

        Unknown IDs are ignored. The result reports how many rows changed.

        Raises:
            UserOperationError: If a status update has no target status.
        """
        if request.action == BulkAction.UPDATE_STATUS:
            if request.status is None:
                raise UserOperationError("status is required for update_status")
            stmt = (
                update(User)
                .where(User.id.in_(request.user_ids))
                .values(status=request.status.value, updated_at=utc_now())
            )
        else:
            stmt = delete(User).where(User.id.in_(request.user_ids))

        result = await self._db.execute(stmt)
        await self._db.commit()

        affected = result.rowcount or 0
        logger.info(
            "Bulk user action: %s (requested=%s, affected=%s)",
            request.action.value,
            len(request.user_ids),
            affected,
        )

        return BulkUserResult(action=request.action.value, affected=affected)

    async def get_stats(self) -> UserStats:
        """Count users for the admin dashboard."""
        total = await self._count()
        active = await self._count(User.status == UserStatus.ACTIVE.value)
        new_this_month = await self._count(User.created_at >= month_start())
        verified = await self._count(User.email_verified.is_(True))

        by_role_result = await self._db.execute(select(User.role, func.count()).group_by(User.role))

        return UserStats(
            total_users=total,
            active_users=active,
            new_users_this_month=new_this_month,
            verified_users=verified,
            by_role=dict(by_role_result.all()),
        )

    def list_roles(self) -> list[RoleInfo]:
        """Roles a user may hold."""
        return [RoleInfo(role=role.value, description=ROLE_DESCRIPTIONS[role]) for role in UserRole]

    # =========================================================================
    # Private Helper Methods
    # =========================================================================

    async def _get_or_raise(self, user_id: str) -> User:
        """Get user by ID or raise UserNotFoundError."""
        result = await self._db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user

    async def _get_by_email(self, email: str) -> User | None:
        """Get user by email."""
        result = await self._db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def _count(self, *criteria) -> int:
        stmt = select(func.count()).select_from(User)
        if criteria:
            stmt = stmt.where(*criteria)
        result = await self._db.execute(stmt)
        return result.scalar() or 0

    def _to_response(self, user: User) -> UserResponse:
        """Convert User model to UserResponse."""
        return UserResponse.model_validate(user)
