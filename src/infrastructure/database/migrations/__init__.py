# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Alembic migrations for the LMS record store.

Revisions live in ``versions/``. Run from the repository root::

    alembic upgrade head
"""
