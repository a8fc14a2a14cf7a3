"""Pydantic schemas for User CRUD."""

from __future__ import annotations

from datetime import datetime

from pydantic import field_validator

from storerating.models.user import Role
from storerating.schemas.common import (ApiModel, check_address, check_email,
                                        check_name, check_password)


class UserCreate(ApiModel):
    name: str
    email: str
    password: str
    address: str | None = None
    role: Role = Role.USER

    _name = field_validator("name")(check_name)
    _email = field_validator("email")(check_email)
    _password = field_validator("password")(check_password)
    _address = field_validator("address")(check_address)


class UserRegister(ApiModel):
    """Self-registration body; the role is always USER."""

    name: str
    email: str
    password: str
    address: str | None = None

    _name = field_validator("name")(check_name)
    _email = field_validator("email")(check_email)
    _password = field_validator("password")(check_password)
    _address = field_validator("address")(check_address)


class UserUpdate(ApiModel):
    name: str | None = None
    email: str | None = None
    address: str | None = None
    role: Role | None = None
    password: str | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return check_name(v) if v is not None else v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return check_email(v) if v is not None else v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str | None) -> str | None:
        return check_password(v) if v is not None else v

    _address = field_validator("address")(check_address)


class UserSummary(ApiModel):
    id: int
    name: str
    email: str


class UserRead(ApiModel):
    id: int
    name: str
    email: str
    address: str | None
    role: Role
    created_at: datetime | None = None


class UserDetail(UserRead):
    updated_at: datetime | None = None
    average_rating: float | None = None
