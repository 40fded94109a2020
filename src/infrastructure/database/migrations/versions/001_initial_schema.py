# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial LMS schema.

Revision ID: 001_initial
Revises:
Create Date: 2025-06-01

Creates the catalogue (courses, curricula), cohorts (batches, tutor
assignments, batch sessions), enrollments, assignments, schedule events,
live class recordings and user profiles.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # =========================================================================
    # Users
    # =========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("avatar", sa.String(1024), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("phone_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("skills", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("suspension_reason", sa.Text(), nullable=True),
        sa.Column("suspension_duration", sa.Integer(), nullable=True),
        sa.Column("suspended_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    # =========================================================================
    # Courses and curricula
    # =========================================================================
    op.create_table(
        "courses",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("level", sa.String(20), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("thumbnail", sa.String(1024), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("instructor_id", sa.String(64), nullable=False),
        sa.Column("instructor_name", sa.String(255), nullable=False),
        sa.Column("max_students", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("enrolled_students", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("completion_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("average_rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_reviews", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "allow_self_enrollment", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column(
            "certificate_enabled", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("prerequisites", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("tags", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("max_students >= 1", name="ck_courses_max_students"),
        sa.CheckConstraint("enrolled_students >= 0", name="ck_courses_enrolled_students"),
    )
    op.create_index("ix_courses_instructor_id", "courses", ["instructor_id"])
    op.create_index("ix_courses_status_category", "courses", ["status", "category"])

    op.create_table(
        "curricula",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("modules", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("total_duration", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_lessons", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )

    # =========================================================================
    # Batches, tutors and sessions
    # =========================================================================
    op.create_table(
        "batches",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("course_name", sa.String(255), nullable=False),
        sa.Column("instructor_id", sa.String(64), nullable=False),
        sa.Column("instructor_name", sa.String(255), nullable=False),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("schedule", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("timezone", sa.String(64), nullable=False, server_default="UTC"),
        sa.Column("max_students", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("enrolled_students", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("waitlist_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="upcoming"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("allow_waitlist", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("auto_enroll", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("completion_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("average_progress", sa.Float(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("max_students >= 1", name="ck_batches_max_students"),
        sa.CheckConstraint("enrolled_students >= 0", name="ck_batches_enrolled_students"),
    )
    op.create_index("ix_batches_course_id", "batches", ["course_id"])
    op.create_index("ix_batches_instructor_id", "batches", ["instructor_id"])

    op.create_table(
        "tutor_assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("tutor_id", sa.String(64), nullable=False),
        sa.Column("tutor_name", sa.String(255), nullable=False),
        sa.Column("tutor_email", sa.String(255), nullable=False),
        sa.Column(
            "batch_id",
            sa.String(36),
            sa.ForeignKey("batches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("course_id", sa.String(36), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
    )
    op.create_index("ix_tutor_assignments_tutor_id", "tutor_assignments", ["tutor_id"])
    op.create_index("ix_tutor_assignments_batch_id", "tutor_assignments", ["batch_id"])
    op.create_index(
        "uq_tutor_assignments_active",
        "tutor_assignments",
        ["tutor_id", "batch_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "batch_sessions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "batch_id",
            sa.String(36),
            sa.ForeignKey("batches.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("course_id", sa.String(36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("session_type", sa.String(20), nullable=False),
        sa.Column("topic", sa.String(255), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        sa.Column("tutor_id", sa.String(64), nullable=True),
        sa.Column("tutor_name", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_batch_sessions_batch_id", "batch_sessions", ["batch_id"])
    op.create_index("ix_batch_sessions_date", "batch_sessions", ["date"])
    op.create_index("ix_batch_sessions_tutor_id", "batch_sessions", ["tutor_id"])

    # =========================================================================
    # Enrollments
    # =========================================================================
    op.create_table(
        "enrollments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("student_id", sa.String(64), nullable=False),
        sa.Column("student_name", sa.String(255), nullable=False),
        sa.Column("student_email", sa.String(255), nullable=False),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "batch_id",
            sa.String(36),
            sa.ForeignKey("batches.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("status_reason", sa.Text(), nullable=True),
        sa.Column("dropped_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "completed_lessons", postgresql.JSONB(), nullable=False, server_default="[]"
        ),
        sa.Column("last_accessed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "certificate_issued", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("certificate_issued_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_amount", sa.Float(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
        sa.CheckConstraint(
            "progress >= 0 AND progress <= 100", name="ck_enrollments_progress"
        ),
    )
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])
    op.create_index("ix_enrollments_course_status", "enrollments", ["course_id", "status"])
    op.create_index("ix_enrollments_batch_status", "enrollments", ["batch_id", "status"])

    # =========================================================================
    # Assignments and schedule events
    # =========================================================================
    op.create_table(
        "assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=False),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("course_name", sa.String(255), nullable=False),
        sa.Column(
            "batch_id",
            sa.String(36),
            sa.ForeignKey("batches.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("instructor_id", sa.String(64), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("difficulty", sa.String(20), nullable=False),
        sa.Column("estimated_hours", sa.Float(), nullable=False, server_default="1"),
        sa.Column("max_score", sa.Integer(), nullable=False, server_default="100"),
        sa.Column("passing_score", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("assigned_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "allow_late_submission", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        sa.Column("late_penalty", sa.Float(), nullable=False, server_default="10"),
        sa.Column("max_attempts", sa.Integer(), nullable=False, server_default="1"),
        sa.Column(
            "is_group_assignment", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("total_submissions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("graded_submissions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("completion_rate", sa.Float(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint(
            "late_penalty >= 0 AND late_penalty <= 100", name="ck_assignments_late_penalty"
        ),
        sa.CheckConstraint("passing_score <= max_score", name="ck_assignments_passing_score"),
    )
    op.create_index("ix_assignments_course_id", "assignments", ["course_id"])
    op.create_index("ix_assignments_batch_id", "assignments", ["batch_id"])
    op.create_index("ix_assignments_instructor_id", "assignments", ["instructor_id"])
    op.create_index("ix_assignments_due_date", "assignments", ["due_date"])

    op.create_table(
        "schedule_events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "batch_id",
            sa.String(36),
            sa.ForeignKey("batches.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("instructor_id", sa.String(64), nullable=False),
        sa.Column("event_type", sa.String(20), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(255), nullable=True),
        sa.Column("meeting_url", sa.String(1024), nullable=True),
        sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("recurrence_pattern", sa.String(100), nullable=True),
        sa.Column("attendees", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("max_attendees", sa.Integer(), nullable=True),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("materials", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("status", sa.String(20), nullable=False, server_default="scheduled"),
        *_timestamps(),
    )
    op.create_index("ix_schedule_events_course_id", "schedule_events", ["course_id"])
    op.create_index("ix_schedule_events_batch_id", "schedule_events", ["batch_id"])
    op.create_index("ix_schedule_events_instructor_id", "schedule_events", ["instructor_id"])
    op.create_index("ix_schedule_events_start_time", "schedule_events", ["start_time"])

    # =========================================================================
    # Live class recordings
    # =========================================================================
    op.create_table(
        "live_class_recordings",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "course_id",
            sa.String(36),
            sa.ForeignKey("courses.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("batch_id", sa.String(36), nullable=False),
        sa.Column("module_id", sa.String(36), nullable=True),
        sa.Column("lesson_id", sa.String(36), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("instructor_id", sa.String(64), nullable=False),
        sa.Column("instructor_name", sa.String(255), nullable=False),
        sa.Column("recording_url", sa.String(2048), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("quality", sa.String(10), nullable=False, server_default="720p"),
        sa.Column("status", sa.String(20), nullable=False, server_default="processing"),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "allowed_student_ids", postgresql.JSONB(), nullable=False, server_default="[]"
        ),
        sa.Column(
            "allowed_batch_ids", postgresql.JSONB(), nullable=False, server_default="[]"
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("topics", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("tags", postgresql.JSONB(), nullable=False, server_default="[]"),
        sa.Column("thumbnail", sa.String(1024), nullable=True),
        sa.Column("view_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_watch_time", sa.Float(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index(
        "ix_live_class_recordings_course_id", "live_class_recordings", ["course_id"]
    )
    op.create_index("ix_live_class_recordings_batch_id", "live_class_recordings", ["batch_id"])
    op.create_index(
        "ix_live_class_recordings_lesson_id", "live_class_recordings", ["lesson_id"]
    )
    op.create_index(
        "ix_live_class_recordings_instructor_id", "live_class_recordings", ["instructor_id"]
    )


def downgrade() -> None:
    # Reverse dependency order
    op.drop_table("live_class_recordings")
    op.drop_table("schedule_events")
    op.drop_table("assignments")
    op.drop_table("enrollments")
    op.drop_table("batch_sessions")
    op.drop_table("tutor_assignments")
    op.drop_table("batches")
    op.drop_table("curricula")
    op.drop_table("courses")
    op.drop_table("users")
