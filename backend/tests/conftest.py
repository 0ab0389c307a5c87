# backend/tests/conftest.py
"""
Pytest configuration for the GymBook backend.

Every test gets a fresh in-memory SQLite database, a clock frozen on
Wednesday 2025-03-05 10:00 UTC and a notification sender that records
instead of emailing. The booking window for that instant runs from
Monday 2025-03-03 00:00 to Monday 2025-03-17 00:00 (exclusive).
"""

import os
import sys

# CRITICAL: Set testing mode BEFORE any app imports!
os.environ["is_testing"] = "true"
os.environ["TEST_DATABASE_URL"] = "sqlite://"
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["booking_serialization_enabled"] = "false"

# CRITICAL: Mock Resend API globally to prevent real emails in ANY test
import unittest.mock

global_resend_mock = unittest.mock.patch("resend.Emails.send")
mocked_send = global_resend_mock.start()
mocked_send.return_value = {"id": "test-email-id"}

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from app.core.config import settings

settings.is_testing = True

from datetime import datetime, timedelta
from typing import Callable, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies import get_db, get_notification_service, get_workout_session_service
from app.auth import create_access_token, get_password_hash
from app.core.clock import FixedClock
from app.core.config import Settings
from app.core.enums import RoleName, UserStatus
from app.core.slot_lock import NullSlotLock
from app.database import Base
from app.main import app
from app.models.user import User
from app.schemas.workout_session import WorkoutSessionCreate, WorkoutSessionResponse
from app.services.notification_service import NotificationService
from app.services.workout_session_service import WorkoutSessionService
from tests.helpers import FROZEN_NOW, MEMBER_PASSWORD, RecordingSender

# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(test_engine) -> Session:
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Collaborators
# ============================================================================


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(FROZEN_NOW)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        gym_capacity=8,
        max_session_duration_minutes=180,
        daily_session_limit=1,
        booking_window_weeks=2,
        gym_timezone="UTC",
        booking_serialization_enabled=False,
    )


@pytest.fixture
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def notification_service(sender) -> NotificationService:
    return NotificationService(sender=sender)


@pytest.fixture
def service(db, notification_service, clock, test_settings) -> WorkoutSessionService:
    return WorkoutSessionService(
        db,
        notification_service=notification_service,
        clock=clock,
        settings=test_settings,
        slot_lock=NullSlotLock(),
    )


# ============================================================================
# Users
# ============================================================================


@pytest.fixture(scope="session")
def member_password_hash() -> str:
    """bcrypt is slow; hash the shared test password once per run."""
    return get_password_hash(MEMBER_PASSWORD)


@pytest.fixture
def make_user(db, member_password_hash) -> Callable[..., User]:
    counter = {"n": 0}

    def _make_user(
        name: Optional[str] = None,
        role: RoleName = RoleName.CLIENT,
        status: UserStatus = UserStatus.APPROVED,
        email: Optional[str] = None,
    ) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"Member {n}",
            email=email or f"member{n}@example.com",
            hashed_password=member_password_hash,
            role=role.value,
            status=status.value,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def client_user(make_user) -> User:
    return make_user(name="Alice Client", email="alice@example.com")


@pytest.fixture
def other_client(make_user) -> User:
    return make_user(name="Bob Client", email="bob@example.com")


@pytest.fixture
def admin_user(make_user) -> User:
    return make_user(name="Gym Admin", email="admin@example.com", role=RoleName.ADMIN)


@pytest.fixture
def book(service) -> Callable[..., WorkoutSessionResponse]:
    """Book ``minutes`` starting at ``start`` for ``user`` through the service."""

    def _book(
        user: User, start: datetime, minutes: int = 60, notes: Optional[str] = None
    ) -> WorkoutSessionResponse:
        data = WorkoutSessionCreate(
            start_time=start.isoformat(),
            end_time=(start + timedelta(minutes=minutes)).isoformat(),
            notes=notes,
        )
        return service.create_session(user.id, data)

    return _book


# ============================================================================
# HTTP
# ============================================================================


@pytest.fixture
def client(db, service, notification_service) -> TestClient:
    """Test client wired to the per-test database and frozen clock."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_workout_session_service] = lambda: service
    app.dependency_overrides[get_notification_service] = lambda: notification_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers_for() -> Callable[[User], dict]:
    def _headers(user: User) -> dict:
        token = create_access_token({"sub": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _headers
