"""Pydantic schemas for rating submission and listings."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from storerating.models.rating import MAX_RATING, MIN_RATING
from storerating.schemas.common import ApiModel
from storerating.schemas.user import UserSummary


class RatingSubmit(ApiModel):
    store_id: int
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING, strict=True)


class RatingRead(ApiModel):
    id: int
    value: int = Field(serialization_alias="rating")
    user_id: int
    store_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StoreRef(ApiModel):
    id: int
    name: str
    address: str | None = None


class RatingWithUser(RatingRead):
    user: UserSummary


class RatingWithStore(RatingRead):
    store: StoreRef


class RatingSubmitResponse(ApiModel):
    message: str
    rating: RatingRead
