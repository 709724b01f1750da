"""
Security utilities for JWT and password hashing.

Token helpers take the application's ``Settings``; the module-level
settings are only the fallback for scripts that run outside an app.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import uuid

from jose import jwt, JWTError
from passlib.context import CryptContext

from patternlab.core.config import Settings, settings as default_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN = "access"
EMAIL_VERIFICATION_TOKEN = "email_verification"


def _create_token(
    subject: str,
    token_type: str,
    expires_delta: timedelta,
    settings: Settings,
    extra_claims: Optional[Dict[str, Any]] = None
) -> str:
    """Internal function to create JWT tokens."""
    now = datetime.now(timezone.utc)

    payload = {
        "sub": str(subject),
        "iat": now,
        "exp": now + expires_delta,
        "type": token_type,
        "jti": uuid.uuid4().hex,
        **(extra_claims or {})
    }

    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(
    subject: Any,
    expires_delta: Optional[timedelta] = None,
    extra_claims: Optional[Dict[str, Any]] = None,
    settings: Optional[Settings] = None,
) -> str:
    """Create JWT access token."""
    settings = settings or default_settings
    delta = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _create_token(subject, ACCESS_TOKEN, delta, settings, extra_claims)


def create_verification_token(subject: Any, email: str, settings: Optional[Settings] = None) -> str:
    """Create email verification token."""
    settings = settings or default_settings
    delta = timedelta(hours=settings.EMAIL_VERIFICATION_EXPIRE_HOURS)
    return _create_token(subject, EMAIL_VERIFICATION_TOKEN, delta, settings, {"email": email})


def decode_token(
    token: str,
    expected_type: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Optional[Dict[str, Any]]:
    """Decode and validate JWT token. Returns None when invalid or of another type."""
    settings = settings or default_settings
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if expected_type is not None and payload.get("type") != expected_type:
        return None
    return payload


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)
