# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP tests for user administration."""

import pytest

pytestmark = pytest.mark.integration

USERS = "/api/v1/users"


class TestUserAdministration:
    """Tests for the admin-only user endpoints."""

    async def test_non_admin_denied(self, client, auth_headers) -> None:
        """Test that every user endpoint is admin only."""
        response = await client.get(USERS, headers=auth_headers("instructor"))

        assert response.status_code == 403
        assert response.json()["error"] == "Admin access required"

    async def test_create_sends_welcome_email(self, client, auth_headers, mailer) -> None:
        """Test creation and the welcome email."""
        response = await client.post(
            USERS,
            json={"name": "Alan Turing", "email": "Alan@Example.com", "role": "mentor"},
            headers=auth_headers("admin"),
        )

        assert response.status_code == 201
        assert response.json()["data"]["email"] == "alan@example.com"
        mailer.send_welcome_email.assert_awaited_once_with("alan@example.com", "Alan Turing")

    async def test_duplicate_email_conflict(self, client, auth_headers, make_user, mailer) -> None:
        """Test that a taken email answers 409 without mailing."""
        await make_user(email="alan@example.com")

        response = await client.post(
            USERS, json={"name": "Alan Turing", "email": "alan@example.com"}, headers=auth_headers("admin")
        )

        assert response.status_code == 409
        mailer.send_welcome_email.assert_not_awaited()

    async def test_unknown_role_rejected(self, client, auth_headers) -> None:
        """Test that roles outside the enumeration fail validation."""
        response = await client.post(
            USERS, json={"name": "Eve", "email": "eve@example.com", "role": "superuser"}, headers=auth_headers("admin")
        )

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    async def test_suspend_then_activate(self, client, auth_headers, make_user) -> None:
        """Test the suspension lifecycle over HTTP."""
        user = await make_user()

        suspended = await client.post(
            f"{USERS}/{user.id}/suspend", json={"reason": "Spam", "duration_days": 3}, headers=auth_headers("admin")
        )
        activated = await client.post(f"{USERS}/{user.id}/activate", headers=auth_headers("admin"))

        assert suspended.json()["data"]["status"] == "suspended"
        assert activated.json()["data"]["status"] == "active"

    async def test_list_and_stats(self, client, auth_headers, make_user) -> None:
        """Test the paginated list and the statistics endpoint."""
        await make_user(role="student")
        await make_user(role="tutor")

        listed = await client.get(USERS, params={"role": "tutor"}, headers=auth_headers("admin"))
        stats = await client.get(f"{USERS}/stats", headers=auth_headers("admin"))

        assert listed.json()["data"]["pagination"]["total"] == 1
        assert stats.json()["data"]["total_users"] == 2

    async def test_unknown_user(self, client, auth_headers) -> None:
        """Test the 404 envelope."""
        response = await client.get(f"{USERS}/missing", headers=auth_headers("admin"))

        assert response.status_code == 404
        assert response.json()["success"] is False
