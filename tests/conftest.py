# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up test environment variables before any imports
# - Builds an isolated app + in-memory SQLite database per test
# - Helpers for issuing tokens and registering users
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.main, which builds the default app from the environment

TEST_SECRET = "test-secret-key-0123456789"

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("JWT_SECRET", TEST_SECRET)
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from core.services.user_service import UserService
from lib.database import init_db, make_engine, make_session_factory
from lib.tokens import create_token


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    """Settings for an isolated app on a private in-memory database."""
    return Settings(
        DATABASE_URL="sqlite://",
        JWT_SECRET=TEST_SECRET,
        ENVELOPE_STATUS_MODE="always_ok",
    )


@pytest.fixture
def app(settings):
    """A fresh application instance."""
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client with the app's lifespan (table creation) running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session():
    """A session on a fresh in-memory database with tables created."""
    engine = make_engine("sqlite://")
    init_db(engine)
    session_factory = make_session_factory(engine)

    with session_factory() as session:
        yield session

    engine.dispose()


@pytest.fixture
def user_service(db_session) -> UserService:
    """UserService bound to the test database session."""
    return UserService(db_session, token_secret=TEST_SECRET)


@pytest.fixture
def make_token():
    """Factory for identity tokens signed with the test secret."""

    def _make(user_id=1, email="a@x.com", secret=TEST_SECRET, **kwargs):
        return create_token({"sub": str(user_id), "email": email}, secret, **kwargs)

    return _make


@pytest.fixture
def register_user(client):
    """Register a user through the API and return the envelope's data."""

    def _register(email="a@x.com", password="pw", name=None):
        body = {"email": email, "password": password}
        if name is not None:
            body["name"] = name
        response = client.post("/api/user/register", json=body)
        payload = response.json()
        assert payload["code"] == 0, payload
        return payload["data"]

    return _register


def auth_header(token: str) -> dict:
    """Authorization header for a bearer token."""
    return {"Authorization": f"Bearer {token}"}
