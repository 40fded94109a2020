# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Response envelope and exception handlers.

Successful responses are wrapped as ``{"success": true, "data": ...}``.
Failures are rendered as ``{"success": false, "error": ..., "code": ...}``
by the handlers registered in :func:`register_exception_handlers`, which map
errors by type and never look at the message text.
"""

import logging
from typing import Any, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from src.domains.errors import DomainError
from src.infrastructure.database import DatabaseError
from src.models.common import ApiResponse, ErrorResponse, PageParams, PaginatedList, Pagination

logger = logging.getLogger(__name__)

T = TypeVar("T")

HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method_not_allowed",
    status.HTTP_409_CONFLICT: "conflict",
}


def ok(data: T) -> ApiResponse[T]:
    """Wrap a payload in the success envelope."""
    return ApiResponse(data=data)


def paginated(items: list[T], total: int, page: PageParams) -> ApiResponse[PaginatedList[T]]:
    """Wrap a result window with its pagination block."""
    return ApiResponse(
        data=PaginatedList(
            items=items,
            pagination=Pagination.build(page=page.page, limit=page.limit, total=total),
        )
    )


def error_response(
    status_code: int,
    message: str,
    code: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Render the failure envelope."""
    body = ErrorResponse(error=message, code=code)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render a service error with the status of its category."""
    if exc.status_code >= 500:
        logger.error("Service error on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info(
            "Request rejected: %s %s -> %s (%s)",
            request.method,
            request.url.path,
            exc.status_code,
            exc.code,
        )
    return error_response(exc.status_code, exc.message, exc.code)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render framework and dependency errors in the envelope."""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(
        exc.status_code,
        message,
        HTTP_ERROR_CODES.get(exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Reject malformed input with 400 and the first offending field."""
    errors: list[dict[str, Any]] = list(exc.errors())
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"

    logger.info("Validation failed: %s %s (%s)", request.method, request.url.path, message)
    return error_response(status.HTTP_400_BAD_REQUEST, message, "validation_error")


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Store failures surface as 500 without leaking driver details."""
    logger.error(
        "Database error on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "internal_error",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything the handlers above did not match."""
    logger.error(
        "Unhandled error on %s %s: %s",
        request.method,
        request.url.path,
        str(exc),
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
        "internal_error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers on the application."""
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
