"""Pydantic schemas for Store CRUD and the store views carrying aggregates."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from storerating.schemas.common import (ApiModel, check_address, check_email,
                                        check_name)
from storerating.schemas.user import UserSummary


class StoreCreate(ApiModel):
    name: str
    email: str
    address: str | None = None
    owner_id: int

    _name = field_validator("name")(check_name)
    _email = field_validator("email")(check_email)
    _address = field_validator("address")(check_address)


class StoreUpdate(ApiModel):
    name: str | None = None
    email: str | None = None
    address: str | None = None
    owner_id: int | None = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str | None) -> str | None:
        return check_name(v) if v is not None else v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str | None) -> str | None:
        return check_email(v) if v is not None else v

    _address = field_validator("address")(check_address)


class StoreRead(ApiModel):
    id: int
    name: str
    email: str
    address: str | None
    owner_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StoreListItem(ApiModel):
    id: int
    name: str
    email: str
    address: str | None
    owner: UserSummary
    average_rating: float
    total_ratings: int
    user_rating: int | None = None


class StoreRatingEntry(ApiModel):
    id: int
    value: int = Field(serialization_alias="rating")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: UserSummary


class StoreDetail(StoreRead):
    owner: UserSummary
    ratings: list[StoreRatingEntry]
    average_rating: float
    total_ratings: int
    rating_distribution: dict[int, int]
    user_rating: int | None = None
