# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

Every test runs against a fresh in-memory SQLite database built from the
ORM metadata, so no PostgreSQL server is needed. SQLite ignores
``SELECT ... FOR UPDATE``; tests that depend on row locking exercise the
transactional behaviour around it instead.
"""

import os

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-testing-only")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from src.api.app import create_app
from src.api.dependencies import get_db
from src.core.config import clear_settings_cache, get_settings
from src.domains.auth.jwt import JWTManager
from src.infrastructure.database import create_sessionmaker
from src.infrastructure.database.models import Base, Batch, Course, User
from src.infrastructure.notifications import DeliveryStatus, EmailSender, get_email_sender
from src.utils.datetime import utc_now

ADMIN_ID = "admin-1"
INSTRUCTOR_ID = "instructor-1"
OTHER_INSTRUCTOR_ID = "instructor-2"
STUDENT_ID = "student-1"


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create an in-memory database with every table."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Provide a session configured like the application's."""
    sessionmaker = create_sessionmaker(engine)
    async with sessionmaker() as session:
        yield session


# =============================================================================
# Row Factories
# =============================================================================


@pytest.fixture
def make_course(db_session: AsyncSession) -> Callable[..., Awaitable[Course]]:
    """Insert a course row. Keyword arguments override the defaults."""

    async def _make(**overrides: Any) -> Course:
        values: dict[str, Any] = {
            "title": "Python Fundamentals",
            "description": "Learn Python from the ground up",
            "category": "programming",
            "level": "beginner",
            "duration": 40,
            "price": 0.0,
            "currency": "USD",
            "status": "published",
            "instructor_id": INSTRUCTOR_ID,
            "instructor_name": "Grace Hopper",
            "max_students": 100,
            "enrolled_students": 0,
            "prerequisites": [],
            "tags": ["python"],
        }
        values.update(overrides)
        course = Course(**values)
        db_session.add(course)
        await db_session.commit()
        await db_session.refresh(course)
        return course

    return _make


@pytest.fixture
def make_batch(db_session: AsyncSession) -> Callable[..., Awaitable[Batch]]:
    """Insert a batch row for a course."""

    async def _make(course: Course, **overrides: Any) -> Batch:
        start = utc_now() + timedelta(days=7)
        values: dict[str, Any] = {
            "name": "Evening Cohort",
            "course_id": course.id,
            "course_name": course.title,
            "instructor_id": course.instructor_id,
            "instructor_name": course.instructor_name,
            "start_date": start,
            "end_date": start + timedelta(days=60),
            "schedule": [],
            "max_students": 30,
            "enrolled_students": 0,
            "allow_waitlist": True,
        }
        values.update(overrides)
        batch = Batch(**values)
        db_session.add(batch)
        await db_session.commit()
        await db_session.refresh(batch)
        return batch

    return _make


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Insert a user profile row."""
    counter = {"n": 0}

    async def _make(**overrides: Any) -> User:
        counter["n"] += 1
        values: dict[str, Any] = {
            "name": f"User {counter['n']}",
            "email": f"user{counter['n']}@example.com",
            "role": "student",
            "status": "active",
            "skills": [],
        }
        values.update(overrides)
        user = User(**values)
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


# =============================================================================
# Auth Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Reload settings for every test so env patches take effect."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def jwt_manager() -> JWTManager:
    """JWT manager sharing the application's secret."""
    return JWTManager(get_settings().jwt)


@pytest.fixture
def auth_headers(jwt_manager: JWTManager) -> Callable[..., dict[str, str]]:
    """Build an Authorization header for a role."""

    def _headers(role: str, user_id: str | None = None, email: str | None = None) -> dict[str, str]:
        user_id = user_id or f"{role}-1"
        token = jwt_manager.create_access_token(
            user_id=user_id,
            email=email or f"{user_id}@example.com",
            role=role,
            is_verified=True,
            name=user_id.replace("-", " ").title(),
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


# =============================================================================
# Sample Payloads
# =============================================================================


@pytest.fixture
def course_payload() -> dict[str, Any]:
    """Valid course creation body."""
    return {
        "title": "Data Science Bootcamp",
        "description": "Pandas, statistics and machine learning basics",
        "category": "data_science",
        "level": "intermediate",
        "duration": 60,
        "price": 199.0,
        "max_students": 50,
        "tags": ["pandas", "ml"],
    }


# =============================================================================
# API Fixtures
# =============================================================================


@pytest.fixture
def mailer() -> MagicMock:
    """Email sender that records calls instead of relaying."""
    sender = MagicMock(spec=EmailSender)
    sender.send_welcome_email = AsyncMock(return_value=DeliveryStatus.SENT)
    sender.send_enrollment_confirmation = AsyncMock(return_value=DeliveryStatus.SENT)
    return sender


@pytest.fixture
async def client(db_session: AsyncSession, mailer: MagicMock) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to the app with the test session and mailer."""
    app = create_app()

    async def _get_db() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_email_sender] = lambda: mailer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
