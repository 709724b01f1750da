"""
Pydantic schemas for User model.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserBase(BaseModel):
    """Base user schema."""

    email: EmailStr
    full_name: Optional[str] = None


class UserCreate(UserBase):
    """Schema for user creation."""

    password: str = Field(..., min_length=8)


class UserInDB(UserBase):
    """Schema for user in database."""

    id: int
    is_active: bool
    email_confirmed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    class Config:
        """Pydantic config."""

        from_attributes = True


class User(UserInDB):
    """Schema for user response."""

    pass


class Token(BaseModel):
    """Schema for JWT token."""

    access_token: str
    expires_in: int
    token_type: str


class EmailRequest(BaseModel):
    """Schema for forgot password and resend verification requests."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Schema for reset password request."""

    token: str = Field(..., min_length=30)
    new_password: str = Field(..., min_length=8)
