# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User management API endpoints.

This module provides admin endpoints for user management:
- GET / - List users with filtering
- POST / - Create a new user (sends a welcome email)
- GET /stats - User counts for the admin dashboard
- GET /roles - Roles a user may hold
- POST /bulk - Bulk status update or delete
- GET /{user_id} - Get user details
- PUT /{user_id} - Update user
- DELETE /{user_id} - Delete user
- POST /{user_id}/verify - Mark email or phone verified
- POST /{user_id}/suspend - Suspend user
- POST /{user_id}/activate - Activate user
- PUT /{user_id}/role - Change role

Credentials live with the external auth service, so users are created
without passwords.

Example:
    POST /api/v1/users
    {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "role": "tutor"
    }
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from src.api.dependencies import AdminUser, Mailer, Page, get_user_service
from src.api.responses import ok, paginated
from src.domains.user import UserService
from src.models.common import ApiResponse, MessageResponse, PaginatedList
from src.models.user import (
    BulkUserRequest,
    BulkUserResult,
    RoleInfo,
    UserCreateRequest,
    UserResponse,
    UserRoleUpdateRequest,
    UserStats,
    UserSuspendRequest,
    UserUpdateRequest,
    UserVerifyRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[PaginatedList[UserResponse]],
    summary="List users",
)
async def list_users(
    current_user: AdminUser,
    page: Page,
    role: str | None = Query(default=None, description="Filter by role, 'all' for any"),
    user_status: str | None = Query(default=None, alias="status"),
    verified: bool | None = Query(default=None),
    search: str | None = Query(default=None, description="Search name or email"),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[PaginatedList[UserResponse]]:
    users, total = await service.list_users(
        role=role,
        status=user_status,
        verified=verified,
        search=search,
        limit=page.limit,
        offset=page.offset,
    )
    return paginated(users, total, page)


@router.post(
    "",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create a new user. Fails with 409 when the email is taken.",
)
async def create_user(
    data: UserCreateRequest,
    current_user: AdminUser,
    background_tasks: BackgroundTasks,
    mailer: Mailer,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await service.create_user(data)
    background_tasks.add_task(mailer.send_welcome_email, user.email, user.name)

    logger.info("User created by admin: %s (by=%s)", user.id, current_user.id)

    return ok(user)


@router.get("/stats", response_model=ApiResponse[UserStats], summary="User statistics")
async def get_user_stats(
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserStats]:
    return ok(await service.get_stats())


@router.get("/roles", response_model=ApiResponse[list[RoleInfo]], summary="List roles")
async def list_roles(
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[list[RoleInfo]]:
    return ok(service.list_roles())


@router.post(
    "/bulk",
    response_model=ApiResponse[BulkUserResult],
    summary="Bulk user action",
)
async def bulk_user_action(
    data: BulkUserRequest,
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[BulkUserResult]:
    return ok(await service.bulk_action(data))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse], summary="Get user")
async def get_user(
    user_id: str,
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    return ok(await service.get_user(user_id))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse], summary="Update user")
async def update_user(
    user_id: str,
    data: UserUpdateRequest,
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    return ok(await service.update_user(user_id, data))


@router.delete("/{user_id}", response_model=ApiResponse[MessageResponse], summary="Delete user")
async def delete_user(
    user_id: str,
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[MessageResponse]:
    await service.delete_user(user_id)
    return ok(MessageResponse(message="User deleted"))


@router.post("/{user_id}/verify", response_model=ApiResponse[UserResponse], summary="Verify user")
async def verify_user(
    user_id: str,
    data: UserVerifyRequest,
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    return ok(await service.verify_user(user_id, data.type))


@router.post("/{user_id}/suspend", response_model=ApiResponse[UserResponse], summary="Suspend user")
async def suspend_user(
    user_id: str,
    data: UserSuspendRequest,
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    return ok(await service.suspend_user(user_id, data.reason, data.duration_days))


@router.post(
    "/{user_id}/activate",
    response_model=ApiResponse[UserResponse],
    summary="Activate user",
)
async def activate_user(
    user_id: str,
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    return ok(await service.activate_user(user_id))


@router.put("/{user_id}/role", response_model=ApiResponse[UserResponse], summary="Change role")
async def change_user_role(
    user_id: str,
    data: UserRoleUpdateRequest,
    current_user: AdminUser,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    return ok(await service.change_role(user_id, data.role))
