# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the response envelope and error mapping."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException

from src.api.responses import (
    database_error_handler,
    domain_error_handler,
    error_response,
    http_exception_handler,
    ok,
    paginated,
    unhandled_exception_handler,
    validation_exception_handler,
)
from src.domains.assignment import AssignmentValidationError
from src.domains.batch import BatchAccessDeniedError, TutorAlreadyAssignedError
from src.domains.course import CourseNotFoundError
from src.domains.enrollment import BatchFullError, CourseNotCompletedError
from src.domains.errors import DomainError
from src.infrastructure.database import DatabaseError
from src.models.common import PageParams


@pytest.fixture
def request_stub() -> MagicMock:
    """Minimal request object for handlers."""
    request = MagicMock()
    request.method = "POST"
    request.url.path = "/api/v1/enrollments"
    return request


def _body(response) -> dict:
    return json.loads(response.body)


class TestEnvelope:
    """Tests for success envelopes."""

    def test_ok_wraps_data(self) -> None:
        """Test the success envelope."""
        envelope = ok({"id": "c1"})

        assert envelope.model_dump() == {"success": True, "data": {"id": "c1"}}

    def test_paginated_computes_pages(self) -> None:
        """Test pagination block for a partial last page."""
        envelope = paginated(["a", "b"], total=41, page=PageParams(page=3, limit=20))

        assert envelope.data.items == ["a", "b"]
        assert envelope.data.pagination.model_dump() == {
            "page": 3,
            "limit": 20,
            "total": 41,
            "pages": 3,
        }

    def test_paginated_empty(self) -> None:
        """Test pagination of an empty result."""
        envelope = paginated([], total=0, page=PageParams())

        assert envelope.data.pagination.pages == 0

    def test_page_offset(self) -> None:
        """Test offset from page and limit."""
        assert PageParams(page=1, limit=10).offset == 0
        assert PageParams(page=4, limit=25).offset == 75

    def test_error_response_body(self) -> None:
        """Test the failure envelope."""
        response = error_response(404, "Course c1 not found", "not_found")

        assert response.status_code == 404
        assert _body(response) == {
            "success": False,
            "error": "Course c1 not found",
            "code": "not_found",
        }


class TestDomainErrorMapping:
    """Tests for service error to HTTP status mapping."""

    @pytest.mark.parametrize(
        ("error", "status_code", "code"),
        [
            (CourseNotFoundError("Course c1 not found"), 404, "not_found"),
            (BatchAccessDeniedError("You do not own this batch"), 403, "forbidden"),
            (TutorAlreadyAssignedError("already assigned"), 409, "conflict"),
            (BatchFullError("Batch is full"), 409, "capacity_exceeded"),
            (AssignmentValidationError("bad dates"), 400, "validation_error"),
            (CourseNotCompletedError("not completed"), 400, "invalid_state"),
        ],
    )
    async def test_status_and_code(
        self,
        request_stub: MagicMock,
        error: DomainError,
        status_code: int,
        code: str,
    ) -> None:
        """Test that each category renders its status and code."""
        response = await domain_error_handler(request_stub, error)

        assert response.status_code == status_code
        body = _body(response)
        assert body["success"] is False
        assert body["code"] == code
        assert body["error"] == error.message

    async def test_http_exception_keeps_headers(self, request_stub: MagicMock) -> None:
        """Test that 401 responses keep the WWW-Authenticate header."""
        exc = HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

        response = await http_exception_handler(request_stub, exc)

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert _body(response)["code"] == "unauthorized"

    async def test_validation_error_is_400(self, request_stub: MagicMock) -> None:
        """Test that request validation errors become 400 with the field name."""
        exc = RequestValidationError(
            [{"loc": ("body", "max_students"), "msg": "Input should be greater than 0", "type": "x"}]
        )

        response = await validation_exception_handler(request_stub, exc)

        assert response.status_code == 400
        body = _body(response)
        assert body["code"] == "validation_error"
        assert body["error"] == "max_students: Input should be greater than 0"

    async def test_database_error_hides_details(self, request_stub: MagicMock) -> None:
        """Test that store failures do not leak driver messages."""
        exc = DatabaseError("Database operation failed", RuntimeError("password=hunter2"))

        response = await database_error_handler(request_stub, exc)

        assert response.status_code == 500
        assert _body(response) == {
            "success": False,
            "error": "Internal server error",
            "code": "internal_error",
        }

    async def test_unhandled_error(self, request_stub: MagicMock) -> None:
        """Test the last-resort handler."""
        response = await unhandled_exception_handler(request_stub, KeyError("boom"))

        assert response.status_code == 500
        assert _body(response)["code"] == "internal_error"
