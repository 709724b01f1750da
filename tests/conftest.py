"""
Shared test fixtures for all test modules.

Provides:
- database / db_session: SQLite in-memory database shared across threads
- fake_mail: records outgoing mail instead of sending it
- client: TestClient for an app wired to the fixtures above
- auth_headers: bearer headers for a registered, signed-in user
"""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

# =============================================================================
# Test Environment Configuration
# =============================================================================

os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'test-secret-key-for-testing')
os.environ['ALGORITHM'] = 'HS256'
os.environ['SUPPRESS_SEND'] = 'true'

from patternlab.core.config import Settings  # noqa: E402
from patternlab.db.base import Database  # noqa: E402
from patternlab.main import create_app  # noqa: E402


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def database():
    """Fresh in-memory database with all tables for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    db = Database(engine)
    db.create_all()

    yield db

    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.SessionLocal()
    yield session
    session.close()


# =============================================================================
# Mail
# =============================================================================

class FakeMailService:
    """Collects messages that would have been sent."""

    def __init__(self):
        self.sent = []

    def send_message_background(self, background_tasks, subject, recipients, template_name, context):
        self.sent.append({
            "subject": subject,
            "recipients": list(recipients),
            "template_name": template_name,
            "context": dict(context),
        })

    def last_to(self, email):
        for message in reversed(self.sent):
            if email in message["recipients"]:
                return message
        return None


@pytest.fixture
def fake_mail():
    return FakeMailService()


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def test_settings():
    return Settings(
        DATABASE_URL="sqlite://",
        REQUIRE_EMAIL_VERIFICATION=False,
        SUPPRESS_SEND=True,
        FRONTEND_URL="http://testserver",
    )


@pytest.fixture
def app(test_settings, database, fake_mail):
    return create_app(settings=test_settings, database=database, mail_service=fake_mail)


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)


def register_and_login(client, email="learner@example.com", password="testpass123"):
    client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "full_name": "Test Learner"},
    )
    response = client.post(
        "/api/v1/auth/login",
        data={"username": email, "password": password},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    """Register and login, return auth headers."""
    return register_and_login(client)


@pytest.fixture
def login(client):
    """Factory fixture: register and sign in another user."""
    def _login(email, password="testpass123"):
        return register_and_login(client, email, password)
    return _login
