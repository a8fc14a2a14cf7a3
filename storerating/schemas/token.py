"""Pydantic schemas for login / registration and JWT tokens."""

from __future__ import annotations

from pydantic import field_validator

from storerating.schemas.common import ApiModel, check_password
from storerating.schemas.user import UserRead


class LoginRequest(ApiModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class AuthResponse(ApiModel):
    token: str
    token_type: str = "bearer"
    user: UserRead


class TokenPayload(ApiModel):
    sub: str | None = None
    email: str | None = None
    role: str | None = None
    type: str | None = None


class ChangePasswordRequest(ApiModel):
    current_password: str
    new_password: str

    @field_validator("current_password")
    @classmethod
    def _current(cls, v: str) -> str:
        if not v:
            raise ValueError("Current password is required")
        return v

    _new_password = field_validator("new_password")(check_password)

