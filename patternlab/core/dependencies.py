"""
Dependency injection for FastAPI endpoints.

Everything stateful (settings, database handle, mail service, content
loader) lives on ``app.state`` and is handed to routes from here, so tests
swap implementations with ``app.dependency_overrides`` or by passing their
own objects to ``create_app``.
"""
from typing import Any, Dict, Generator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from patternlab.core.config import Settings
from patternlab.models.user import User
from patternlab.services.auth_service import AuthService
from patternlab.services.content import LessonContentLoader
from patternlab.services.mail import MailService
from patternlab.services.progress_store import ProgressStore

# Relative to the OpenAPI document, which is served under API_V1_PREFIX
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator:
    """
    Dependency for database session.

    Yields:
        Database session
    """
    yield from request.app.state.database.session()


def get_mail_service(request: Request) -> MailService:
    return request.app.state.mail_service


def get_content_loader(request: Request) -> LessonContentLoader:
    return request.app.state.content_loader


def get_progress_store(db: Session = Depends(get_db)) -> ProgressStore:
    return ProgressStore(db)


def get_auth_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    mail: MailService = Depends(get_mail_service),
) -> AuthService:
    return AuthService(db, settings, mail)


def get_token_payload(
    token: str = Depends(oauth2_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """
    Decode the bearer token and reject revoked or malformed ones.

    Raises:
        HTTPException: If token is invalid or revoked
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = auth.read_access_token(token)
    if payload is None:
        raise credentials_exception
    return payload


def get_current_user(
    db: Session = Depends(get_db),
    payload: Dict[str, Any] = Depends(get_token_payload),
) -> User:
    """
    Get current authenticated user from JWT token.

    Raises:
        HTTPException: If the user no longer exists
    """
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        user_id = None

    user = db.query(User).filter(User.id == user_id).first() if user_id is not None else None
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """
    Get current active user.

    Raises:
        HTTPException: If user is inactive
    """
    if not current_user.is_active:
        raise HTTPException(status_code=400, detail="Inactive user")
    return current_user
