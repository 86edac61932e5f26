"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["ADMIN_EMAILS"] = '["boss@example.com"]'
os.environ["TRIGGER_SECRET"] = ""
os.environ["PUSH_ENABLED"] = "false"

from authentication.auth import create_access_token  # noqa: E402
from models.config import get_settings  # noqa: E402
from models.results import DeliveryOutcome  # noqa: E402
from models.schemas import Caller  # noqa: E402
from repositories.database import Base, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402
from services.push_gateway import PushGateway  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakePushGateway(PushGateway):
    """
    In-memory gateway that records every send.

    Tokens listed in ``errors`` fail with the mapped error code; every other
    token is delivered.
    """

    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.errors: dict[str, str] = {}
        self.raise_error: Exception | None = None

    async def send_multicast(self, tokens, title, body, data):
        self.calls.append(
            {"tokens": list(tokens), "title": title, "body": body, "data": dict(data)}
        )
        if self.raise_error is not None:
            raise self.raise_error
        return [
            DeliveryOutcome(token=t, success=False, error_code=self.errors[t])
            if t in self.errors
            else DeliveryOutcome(token=t, success=True, message_id=f"msg-{t}")
            for t in tokens
        ]

    @property
    def sent_tokens(self) -> list[str]:
        return [t for call in self.calls for t in call["tokens"]]


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session."""
    return db_session


@pytest.fixture
def settings():
    """Application settings as loaded for tests."""
    return get_settings()


@pytest.fixture
def fake_gateway() -> FakePushGateway:
    """Recording push gateway."""
    return FakePushGateway()


@pytest.fixture(scope="function")
def client(db_session, fake_gateway):
    """Create a test client with overridden database and gateway dependencies."""
    from main import app
    from helpers.rate_limiter import limiter
    from routers.triggers_router import get_gateway

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: fake_gateway
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory fixture to create users."""

    def _make_user(
        uid: str,
        role: db_models.UserRole = db_models.UserRole.USER,
        fcm_token: str | None = None,
        fcm_tokens: list[str] | None = None,
        **fields,
    ) -> db_models.User:
        user = db_models.User(
            id=uid,
            display_name=fields.pop("display_name", uid.capitalize()),
            role=role,
            fcm_token=fcm_token,
            fcm_tokens=list(fcm_tokens or []),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user) -> db_models.User:
    """Create an admin user."""
    return make_user("admin1", role=db_models.UserRole.ADMIN, email="admin@example.com")


@pytest.fixture
def moderator_user(make_user) -> db_models.User:
    """Create a moderator user."""
    return make_user("mod1", role=db_models.UserRole.MODERATOR, email="mod@example.com")


@pytest.fixture
def regular_user(make_user) -> db_models.User:
    """Create a plain user."""
    return make_user("user1", email="user@example.com")


@pytest.fixture
def admin_caller(admin_user) -> Caller:
    return Caller(uid=admin_user.id, email=admin_user.email, name="Admin")


@pytest.fixture
def moderator_caller(moderator_user) -> Caller:
    return Caller(uid=moderator_user.id, email=moderator_user.email, name="Mod")


@pytest.fixture
def user_caller(regular_user) -> Caller:
    return Caller(uid=regular_user.id, email=regular_user.email)


@pytest.fixture
def test_room(db_session) -> db_models.Room:
    """Create a public room."""
    room = db_models.Room(id="room1", name="General", moderator_ids=[])
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture
def test_report(db_session) -> db_models.Report:
    """Create an open report."""
    report = db_models.Report(
        id="report1",
        reporter_id="user1",
        target_type="message",
        target_id="m1",
        reason="spam",
    )
    db_session.add(report)
    db_session.commit()
    db_session.refresh(report)
    return report


def _headers(user: db_models.User, **claims) -> dict:
    token = create_access_token(
        get_settings(), user.id, email=user.email, claims=claims or None
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    """Get authentication headers for admin user."""
    return _headers(admin_user)


@pytest.fixture
def moderator_auth_headers(moderator_user) -> dict:
    """Get authentication headers for moderator user."""
    return _headers(moderator_user)


@pytest.fixture
def auth_headers(regular_user) -> dict:
    """Get authentication headers for a plain user."""
    return _headers(regular_user)
