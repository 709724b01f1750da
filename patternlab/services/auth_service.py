"""
Account and session service: sign-up, sign-in, sign-out, e-mail
verification and password reset.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, HTTPException, status
from sqlalchemy.orm import Session

from patternlab.core.config import Settings
from patternlab.core.security import (
    ACCESS_TOKEN,
    EMAIL_VERIFICATION_TOKEN,
    create_access_token,
    create_verification_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from patternlab.models.user import PasswordResetToken, RevokedToken, User
from patternlab.services.mail import MailService

logger = logging.getLogger(__name__)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AuthService:
    """Service for user accounts and sessions."""

    def __init__(self, db: Session, settings: Settings, mail: MailService):
        self.db = db
        self.settings = settings
        self.mail = mail

    def _get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    # ============= Sign-up and verification =============

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: Optional[str],
        background_tasks: BackgroundTasks,
    ) -> User:
        """
        Register a new user and send the verification e-mail.

        Raises:
            HTTPException: If the e-mail is already registered
        """
        if self._get_by_email(email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

        user = User(
            email=email.lower(),
            full_name=full_name,
            hashed_password=get_password_hash(password),
            is_active=True,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Registered user {user.id}")

        self.send_verification_email(user, background_tasks)
        return user

    def send_verification_email(self, user: User, background_tasks: BackgroundTasks) -> None:
        token = create_verification_token(user.id, user.email, settings=self.settings)
        self.mail.send_message_background(
            background_tasks,
            subject=f"Confirm your {self.settings.PROJECT_NAME} account",
            recipients=[user.email],
            template_name="verify_email.html",
            context={
                "project_name": self.settings.PROJECT_NAME,
                "name": user.full_name or user.email,
                "verify_url": f"{self.settings.FRONTEND_URL}/auth/verify?token={token}",
                "expires_hours": self.settings.EMAIL_VERIFICATION_EXPIRE_HOURS,
            },
        )

    def resend_verification(self, email: str, background_tasks: BackgroundTasks) -> None:
        """Re-send the verification e-mail. Silent for unknown or confirmed addresses."""
        user = self._get_by_email(email)
        if user is None or user.is_email_confirmed:
            return
        self.send_verification_email(user, background_tasks)

    def verify_email(self, token: str) -> User:
        payload = decode_token(token, expected_type=EMAIL_VERIFICATION_TOKEN, settings=self.settings)
        if payload is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired verification token",
            )

        user = self.db.query(User).filter(User.id == int(payload["sub"])).first()
        if user is None or user.email != payload.get("email"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired verification token",
            )

        if not user.is_email_confirmed:
            user.email_confirmed_at = datetime.now(timezone.utc)
            self.db.commit()
            self.db.refresh(user)
            logger.info(f"Confirmed e-mail for user {user.id}")
        return user

    # ============= Sessions =============

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """
        Check credentials and issue an access token.

        Raises:
            HTTPException: 401 on bad credentials, 400 for inactive users,
                403 while the e-mail address is unconfirmed
        """
        user = self._get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            logger.warning("Failed sign-in attempt")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Incorrect email or password",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Inactive user",
            )

        if self.settings.REQUIRE_EMAIL_VERIFICATION and not user.is_email_confirmed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Email not confirmed",
            )

        user.last_login = datetime.now(timezone.utc)
        self.db.commit()

        expires_in = self.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
        access_token = create_access_token(
            subject=user.id,
            expires_delta=timedelta(seconds=expires_in),
            settings=self.settings,
        )
        return {"access_token": access_token, "token_type": "bearer", "expires_in": expires_in}

    def read_access_token(self, token: str) -> Optional[Dict[str, Any]]:
        """Claims of a valid, unrevoked access token, or None."""
        payload = decode_token(token, expected_type=ACCESS_TOKEN, settings=self.settings)
        if payload is None or payload.get("sub") is None:
            return None
        if self.is_revoked(payload.get("jti", "")):
            return None
        return payload

    def sign_out(self, payload: Dict[str, Any]) -> None:
        """Revoke the access token described by ``payload``."""
        jti = payload.get("jti")
        if not jti or self.is_revoked(jti):
            return
        self.db.add(RevokedToken(
            jti=jti,
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        ))
        self.db.commit()
        logger.info(f"User {payload.get('sub')} signed out")

    def is_revoked(self, jti: str) -> bool:
        return self.db.query(RevokedToken).filter(RevokedToken.jti == jti).first() is not None

    # ============= Password reset =============

    def request_password_reset(self, email: str, background_tasks: BackgroundTasks) -> None:
        """Store a reset token and mail the link. Silent for unknown addresses."""
        user = self._get_by_email(email)
        if user is None:
            return

        token = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=self.settings.PASSWORD_RESET_EXPIRE_MINUTES
        )
        self.db.add(PasswordResetToken(user_id=user.id, token=token, expires_at=expires_at))
        self.db.commit()

        self.mail.send_message_background(
            background_tasks,
            subject=f"Reset your {self.settings.PROJECT_NAME} password",
            recipients=[user.email],
            template_name="reset_password.html",
            context={
                "project_name": self.settings.PROJECT_NAME,
                "name": user.full_name or user.email,
                "reset_url": f"{self.settings.FRONTEND_URL}/auth/reset-password?token={token}",
                "expires_minutes": self.settings.PASSWORD_RESET_EXPIRE_MINUTES,
            },
        )
        logger.info(f"Password reset requested for user {user.id}")

    def reset_password(self, token: str, new_password: str) -> None:
        token_record = (
            self.db.query(PasswordResetToken)
            .filter(PasswordResetToken.token == token)
            .first()
        )
        if not token_record or _aware(token_record.expires_at) <= datetime.now(timezone.utc):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired token",
            )

        user = token_record.user
        # update password and invalidate the reset token
        user.hashed_password = get_password_hash(new_password)
        self.db.delete(token_record)
        self.db.commit()
        logger.info(f"Password reset for user {user.id}")
