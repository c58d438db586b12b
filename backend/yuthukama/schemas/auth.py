from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from yuthukama.security.sanitizer import InputSanitizer


def _check_password(v: str) -> str:
    if not re.search(r'[a-z]', v) or not re.search(r'[A-Z]', v) or not re.search(r'\d', v):
        raise ValueError(
            'Password must contain at least one uppercase letter, one lowercase letter, and one number'
        )
    return v


class RegisterIn(BaseModel):
    """Registration request."""
    model_config = ConfigDict(extra='forbid')

    username: str = Field(
        min_length=3,
        max_length=30,
        description="Username (3-30 letters, numbers, underscores, hyphens)",
    )
    email: EmailStr
    password: str = Field(
        min_length=8,
        max_length=128,
        description="Password (8+ chars, uppercase, lowercase, digit)",
    )

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        return InputSanitizer.sanitize_username(v)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class LoginIn(BaseModel):
    model_config = ConfigDict(extra='forbid')

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator('password')
    @classmethod
    def validate_password_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Password is required')
        return v


class AuthOut(BaseModel):
    """Login/register response: the user plus a bearer token."""

    id: int
    username: str
    email: str
    token: str


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    profile_picture: str | None = None
    created_at: datetime | None = None


class ForgotPasswordIn(BaseModel):
    model_config = ConfigDict(extra='forbid')

    email: EmailStr


class ResetPasswordIn(BaseModel):
    model_config = ConfigDict(extra='forbid')

    password: str = Field(min_length=8, max_length=128)
    confirm_password: str

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)

    @model_validator(mode='after')
    def passwords_match(self) -> 'ResetPasswordIn':
        if self.password != self.confirm_password:
            raise ValueError('Passwords do not match')
        return self


class DetailOut(BaseModel):
    message: str
