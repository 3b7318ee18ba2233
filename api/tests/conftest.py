"""
Pytest configuration - runs before any test imports.

Sets the environment the settings module validates at import time, and
provides a TestClient wired to an in-memory SQLite database and a mocked
upstream search API.
"""
import os
import sys

# Set required environment variables for testing BEFORE importing settings
# JWT_SECRET_KEY must be at least 16 characters (validated by Pydantic)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing-only-min-16-chars")
os.environ.setdefault("DATABASE_URL", "sqlite://")
# TestClient talks plain HTTP, so the session cookie must not be Secure
os.environ.setdefault("SESSION_COOKIE_SECURE", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
sys.path.insert(0, PROJECT_ROOT)

from unittest.mock import patch

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.database import Base, get_db
from api.search_proxy import SearchProxy

# Create in-memory SQLite database for testing
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


class FakeUpstream:
    """Records upstream search requests and answers with ``status_code`` and ``body``."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.body = {"data": []}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=self.body)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture(scope="function")
def client(upstream):
    """Create test client with a fresh database and mocked upstream."""
    Base.metadata.create_all(bind=engine)

    from api.main import app

    app.dependency_overrides[get_db] = override_get_db
    upstream_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream))

    def build_proxy(base_url, **kwargs):
        return SearchProxy(base_url, client=upstream_client, **kwargs)

    with patch("api.main.SearchProxy", side_effect=build_proxy):
        with TestClient(app) as test_client:
            yield test_client

    Base.metadata.drop_all(bind=engine)
    app.dependency_overrides.clear()


@pytest.fixture
def signed_in(client):
    """Client holding a session cookie for user 'alice'."""
    response = client.post("/api/signup", json={"username": "alice", "password": "wonderland"})
    assert response.status_code == 200
    return client
