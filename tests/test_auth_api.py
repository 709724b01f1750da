"""
Tests for the authentication endpoints.
"""

from urllib.parse import parse_qs, urlparse

from fastapi.testclient import TestClient

from patternlab.core.config import Settings
from patternlab.main import create_app


def token_from(url):
    return parse_qs(urlparse(url).query)["token"][0]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


# =============================================================================
# Sign-up
# =============================================================================

def test_register_creates_user_and_sends_verification(client, fake_mail):
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "Learner@Example.com", "password": "testpass123", "full_name": "Learner"},
    )

    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "learner@example.com"
    assert data["email_confirmed_at"] is None
    assert "hashed_password" not in data

    message = fake_mail.last_to("learner@example.com")
    assert message["template_name"] == "verify_email.html"
    assert message["context"]["verify_url"].startswith("http://testserver/auth/verify?token=")


def test_register_duplicate_email(client):
    payload = {"email": "dup@example.com", "password": "testpass123"}
    client.post("/api/v1/auth/register", json=payload)

    response = client.post("/api/v1/auth/register", json={**payload, "email": "DUP@example.com"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Email already registered"


def test_register_rejects_short_password(client):
    response = client.post("/api/v1/auth/register", json={"email": "a@example.com", "password": "short"})

    assert response.status_code == 422


# =============================================================================
# Sign-in and sign-out
# =============================================================================

def test_login_returns_bearer_token(client):
    client.post("/api/v1/auth/register", json={"email": "a@example.com", "password": "testpass123"})

    response = client.post("/api/v1/auth/login", data={"username": "a@example.com", "password": "testpass123"})

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["expires_in"] == 3600
    assert data["access_token"]


def test_login_wrong_password(client):
    client.post("/api/v1/auth/register", json={"email": "a@example.com", "password": "testpass123"})

    response = client.post("/api/v1/auth/login", data={"username": "a@example.com", "password": "wrongpass"})

    assert response.status_code == 401


def test_login_unknown_user(client):
    response = client.post("/api/v1/auth/login", data={"username": "nobody@example.com", "password": "testpass123"})

    assert response.status_code == 401


def test_me(client, auth_headers):
    response = client.get("/api/v1/auth/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["email"] == "learner@example.com"
    assert response.json()["last_login"] is not None


def test_me_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401
    assert client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nonsense"}).status_code == 401


def test_logout_revokes_token(client, auth_headers):
    response = client.post("/api/v1/auth/logout", headers=auth_headers)

    assert response.status_code == 200
    assert client.get("/api/v1/auth/me", headers=auth_headers).status_code == 401


def test_logout_leaves_other_sessions_alone(client, auth_headers, login):
    second = login("learner@example.com")

    client.post("/api/v1/auth/logout", headers=auth_headers)

    assert client.get("/api/v1/auth/me", headers=second).status_code == 200


# =============================================================================
# E-mail verification
# =============================================================================

def test_unverified_user_cannot_sign_in_when_verification_required(database, fake_mail):
    settings = Settings(
        DATABASE_URL="sqlite://",
        REQUIRE_EMAIL_VERIFICATION=True,
        SUPPRESS_SEND=True,
        FRONTEND_URL="http://testserver",
    )
    client = TestClient(create_app(settings=settings, database=database, mail_service=fake_mail))
    credentials = {"username": "new@example.com", "password": "testpass123"}
    client.post("/api/v1/auth/register", json={"email": "new@example.com", "password": "testpass123"})

    blocked = client.post("/api/v1/auth/login", data=credentials)
    assert blocked.status_code == 403
    assert blocked.json()["detail"] == "Email not confirmed"

    token = token_from(fake_mail.last_to("new@example.com")["context"]["verify_url"])
    verified = client.get("/api/v1/auth/verify", params={"token": token})
    assert verified.status_code == 200
    assert verified.json()["email_confirmed_at"] is not None

    assert client.post("/api/v1/auth/login", data=credentials).status_code == 200


def test_verify_rejects_bad_token(client):
    assert client.get("/api/v1/auth/verify", params={"token": "garbage"}).status_code == 400


def test_verification_token_is_not_an_access_token(client, fake_mail):
    client.post("/api/v1/auth/register", json={"email": "a@example.com", "password": "testpass123"})
    token = token_from(fake_mail.last_to("a@example.com")["context"]["verify_url"])

    response = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_access_token_cannot_verify_email(client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]

    assert client.get("/api/v1/auth/verify", params={"token": token}).status_code == 400


def test_resend_verification(client, fake_mail):
    client.post("/api/v1/auth/register", json={"email": "a@example.com", "password": "testpass123"})
    sent_before = len(fake_mail.sent)

    response = client.post("/api/v1/auth/resend-verification", json={"email": "a@example.com"})
    unknown = client.post("/api/v1/auth/resend-verification", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    assert unknown.status_code == 200
    assert len(fake_mail.sent) == sent_before + 1


def test_resend_is_silent_for_confirmed_accounts(client, fake_mail):
    client.post("/api/v1/auth/register", json={"email": "a@example.com", "password": "testpass123"})
    token = token_from(fake_mail.last_to("a@example.com")["context"]["verify_url"])
    client.get("/api/v1/auth/verify", params={"token": token})
    sent_before = len(fake_mail.sent)

    client.post("/api/v1/auth/resend-verification", json={"email": "a@example.com"})

    assert len(fake_mail.sent) == sent_before


# =============================================================================
# Password reset
# =============================================================================

def test_password_reset_flow(client, fake_mail):
    client.post("/api/v1/auth/register", json={"email": "a@example.com", "password": "testpass123"})

    response = client.post("/api/v1/auth/forgot-password", json={"email": "a@example.com"})
    assert response.status_code == 200

    message = fake_mail.last_to("a@example.com")
    assert message["template_name"] == "reset_password.html"
    token = token_from(message["context"]["reset_url"])

    reset = client.post("/api/v1/auth/reset-password", json={"token": token, "new_password": "newpass456"})
    assert reset.status_code == 200

    old = client.post("/api/v1/auth/login", data={"username": "a@example.com", "password": "testpass123"})
    new = client.post("/api/v1/auth/login", data={"username": "a@example.com", "password": "newpass456"})
    assert old.status_code == 401
    assert new.status_code == 200

    # tokens are single use
    again = client.post("/api/v1/auth/reset-password", json={"token": token, "new_password": "another789"})
    assert again.status_code == 400


def test_forgot_password_unknown_email_is_silent(client, fake_mail):
    response = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})

    assert response.status_code == 200
    assert fake_mail.sent == []


def test_reset_password_invalid_token(client):
    response = client.post(
        "/api/v1/auth/reset-password",
        json={"token": "x" * 40, "new_password": "newpass456"},
    )

    assert response.status_code == 400


# =============================================================================
# Injected settings
# =============================================================================

def make_client(database, fake_mail, **overrides):
    settings = Settings(
        DATABASE_URL="sqlite://",
        REQUIRE_EMAIL_VERIFICATION=False,
        SUPPRESS_SEND=True,
        FRONTEND_URL="http://testserver",
        **overrides,
    )
    return TestClient(create_app(settings=settings, database=database, mail_service=fake_mail))


def test_tokens_use_the_app_secret(client, auth_headers, database, fake_mail):
    rotated = make_client(database, fake_mail, SECRET_KEY="rotated-secret-key")

    assert rotated.get("/api/v1/auth/me", headers=auth_headers).status_code == 401

    response = rotated.post(
        "/api/v1/auth/login",
        data={"username": "learner@example.com", "password": "testpass123"},
    )
    rotated_headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
    assert rotated.get("/api/v1/auth/me", headers=rotated_headers).status_code == 200
    assert client.get("/api/v1/auth/me", headers=rotated_headers).status_code == 401


def test_verification_link_uses_the_app_secret(database, fake_mail):
    rotated = make_client(database, fake_mail, SECRET_KEY="rotated-secret-key")
    rotated.post("/api/v1/auth/register", json={"email": "a@example.com", "password": "testpass123"})
    token = token_from(fake_mail.last_to("a@example.com")["context"]["verify_url"])

    assert rotated.get("/api/v1/auth/verify", params={"token": token}).status_code == 200


def test_token_url_follows_api_prefix(database, fake_mail):
    client = make_client(database, fake_mail, API_V1_PREFIX="/api/v2")

    schema = client.get("/api/v2/openapi.json").json()
    flow = schema["components"]["securitySchemes"]["OAuth2PasswordBearer"]["flows"]["password"]

    assert flow["tokenUrl"] == "auth/login"
    assert "/api/v2/auth/login" in schema["paths"]
    response = client.post("/api/v2/auth/register", json={"email": "a@example.com", "password": "testpass123"})
    assert response.status_code == 201
