"""Shared test fixtures for the PDF Vault backend test suite.

Tests run against a throwaway SQLite database (override with
TEST_DATABASE_URL) and an in-memory remote tree; no network access is
needed. Every test starts from empty tables.
"""

import os
import tempfile

# Test database and remote settings before any app imports.
_DB_DIR = tempfile.mkdtemp(prefix="pdfvault-tests-")
os.environ["DATABASE_URL"] = os.environ.get(
    "TEST_DATABASE_URL",
    f"sqlite:///{_DB_DIR}/test.db",
)
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_FORMAT"] = "text"
os.environ["REMOTE_API_URL"] = "https://remote.test/api"
os.environ["REMOTE_EMAIL"] = "vault@example.com"
os.environ["REMOTE_PASSWORD"] = "remote-secret"
os.environ["REMOTE_SHARE_BASE_URL"] = "https://mega.nz"
os.environ["REMOTE_APP_ROOT"] = "pdf-vault"
os.environ["REMOTE_RETRY_DELAY_SECONDS"] = "0"

import pytest
from fastapi.testclient import TestClient

from pdfvault.database import Base, SessionLocal, get_db
from pdfvault.main import app
from pdfvault.models import User
from pdfvault.remote.client import get_remote_client
from pdfvault.remote.retry import RetryPolicy
from pdfvault.services.mirror_service import MirrorService

from fakes import InMemoryRemoteTree


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty every table before each test (children first for foreign keys)."""
    db = SessionLocal()
    try:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
    finally:
        db.close()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def remote():
    return InMemoryRemoteTree()


@pytest.fixture()
def owner(db) -> User:
    """A user row for service-level tests."""
    user = User(user_id="owner-1", email="owner@example.com", username="owner", password_hash="x")
    db.add(user)
    db.commit()
    return user


@pytest.fixture()
def sleeps():
    """Delays requested by the retry executor, recorded instead of slept."""
    return []


@pytest.fixture()
def mirror(db, remote, sleeps) -> MirrorService:
    return MirrorService(
        db,
        remote,
        policy=RetryPolicy(max_attempts=3, base_delay=0.5),
        clock=lambda: 1700000000.5,
        sleep=sleeps.append,
    )


@pytest.fixture()
def client(db, remote):
    """TestClient with the DB session and remote client overridden."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_remote_client] = lambda: remote
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def register(client):
    """Factory: register + log in a user, returning ``(user_id, auth headers)``."""

    def _register(email: str = "alice@example.com", username: str = "alice", password: str = "securepass"):
        resp = client.post(
            "/api/auth/register",
            json={"email": email, "username": username, "password": password},
        )
        assert resp.status_code == 201, resp.text
        login = client.post("/api/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        # Cookies from login would authenticate later requests implicitly.
        client.cookies.clear()
        return resp.json()["user_id"], {"Authorization": f"Bearer {login.json()['token']}"}

    return _register


@pytest.fixture()
def auth_headers(register) -> dict:
    _, headers = register()
    return headers
