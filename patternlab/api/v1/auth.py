"""
Authentication endpoints: sign-up, sign-in, sign-out and account recovery.
"""
from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from patternlab.core.dependencies import (
    get_auth_service,
    get_current_active_user,
    get_token_payload,
)
from patternlab.models.user import User
from patternlab.schemas.common import Message
from patternlab.schemas.user import (
    EmailRequest,
    ResetPasswordRequest,
    Token,
    User as UserSchema,
    UserCreate,
)
from patternlab.services.auth_service import AuthService

router = APIRouter()


@router.post("/register", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def register(
    user_in: UserCreate,
    background_tasks: BackgroundTasks,
    auth: AuthService = Depends(get_auth_service),
) -> Any:
    """
    Register a new user and send a verification e-mail.

    Raises:
        HTTPException: If email already exists
    """
    return auth.sign_up(user_in.email, user_in.password, user_in.full_name, background_tasks)


@router.get("/verify", response_model=UserSchema)
def verify_email(token: str, auth: AuthService = Depends(get_auth_service)) -> Any:
    """Confirm an e-mail address from the link in the verification mail."""
    return auth.verify_email(token)


@router.post("/resend-verification", response_model=Message)
def resend_verification(
    body: EmailRequest,
    background_tasks: BackgroundTasks,
    auth: AuthService = Depends(get_auth_service),
) -> Any:
    auth.resend_verification(body.email, background_tasks)
    return {"message": "If the account exists and is unconfirmed, a verification e-mail has been sent"}


@router.post("/login", response_model=Token)
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    auth: AuthService = Depends(get_auth_service),
) -> Any:
    """
    Login user and return JWT token. ``username`` carries the e-mail address.

    Raises:
        HTTPException: If credentials are invalid
    """
    return auth.sign_in(form_data.username, form_data.password)


@router.post("/logout", response_model=Message)
def logout(
    payload: Dict[str, Any] = Depends(get_token_payload),
    auth: AuthService = Depends(get_auth_service),
) -> Any:
    """Revoke the bearer token used for this request."""
    auth.sign_out(payload)
    return {"message": "Signed out"}


@router.get("/me", response_model=UserSchema)
def read_current_user(current_user: User = Depends(get_current_active_user)) -> Any:
    """
    Get current authenticated user.
    """
    return current_user


@router.post("/forgot-password", response_model=Message)
def forgot_password(
    body: EmailRequest,
    background_tasks: BackgroundTasks,
    auth: AuthService = Depends(get_auth_service),
) -> Any:
    auth.request_password_reset(body.email, background_tasks)
    return {"message": "If the account exists, a password reset e-mail has been sent"}


@router.post("/reset-password", response_model=Message)
def reset_password(body: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)) -> Any:
    auth.reset_password(body.token, body.new_password)
    return {"message": "Password has been reset"}
