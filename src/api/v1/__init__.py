# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    courses: Course CRUD, status transitions and statistics.
    curriculum: Curriculum modules and lessons.
    batches: Batch CRUD, batch students and tutors.
    sessions: Dated batch sessions and the tutor directory.
    assignments: Assignment CRUD, publishing and due-date queries.
    enrollments: Capacity-checked enrollment lifecycle.
    schedules: Calendar events.
    live_classes: Live-class recordings and access control.
    users: User administration (admin only).
    students: Student self-service views.
"""

from fastapi import APIRouter

from src.api.v1 import (
    assignments,
    batches,
    courses,
    curriculum,
    enrollments,
    live_classes,
    schedules,
    sessions,
    students,
    users,
)

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(courses.router, prefix="/courses", tags=["Courses"])
router.include_router(curriculum.router, prefix="/curriculum", tags=["Curriculum"])
router.include_router(batches.router, prefix="/batches", tags=["Batches"])
router.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])
router.include_router(sessions.tutors_router, prefix="/tutors", tags=["Tutors"])
router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])
router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
router.include_router(schedules.router, prefix="/schedules", tags=["Schedules"])
router.include_router(live_classes.router, prefix="/live-classes", tags=["Live Classes"])
router.include_router(users.router, prefix="/users", tags=["Users"])
router.include_router(students.router, prefix="/students", tags=["Students"])

__all__ = ["router"]
