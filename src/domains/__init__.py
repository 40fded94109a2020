# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for SkillUp.

This package contains domain services that encapsulate business logic.
Each service takes an AsyncSession and owns its unit of work.

Domains:
    auth: Bearer token validation.
    course: Course catalogue and statistics.
    batch: Batches, batch rosters, tutors and dated sessions.
    enrollment: Capacity-checked enrollment lifecycle and seat counters.
    assignment: Assignments and due-date queries.
    schedule: Calendar events and batch sessions.
    curriculum: Course curricula with modules and lessons.
    live_class: Live-class recordings and access control.
    user: User administration.
    student: Read-only views for the signed-in student.
"""
