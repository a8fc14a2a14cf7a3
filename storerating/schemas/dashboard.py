"""Response shapes for the admin and store-owner dashboards."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from storerating.schemas.common import ApiModel
from storerating.schemas.rating import RatingWithUser, StoreRef
from storerating.schemas.store import StoreRatingEntry
from storerating.schemas.user import UserRead


# ── Admin ──────────────────────────────────────────────────────────
class DashboardCounts(ApiModel):
    users: int
    stores: int
    ratings: int


class RecentStore(ApiModel):
    id: int
    name: str
    owner_name: str
    created_at: datetime | None = None
    average_rating: float
    total_ratings: int


class RecentRating(ApiModel):
    id: int
    value: int = Field(serialization_alias="rating")
    created_at: datetime | None = None
    user_name: str
    store_name: str


class AdminDashboard(ApiModel):
    counts: DashboardCounts
    users_by_role: dict[str, int]
    recent_users: list[UserRead]
    recent_stores: list[RecentStore]
    recent_ratings: list[RecentRating]


# ── Store owner ────────────────────────────────────────────────────
class OwnerStoreSummary(ApiModel):
    id: int
    name: str
    email: str
    address: str | None
    total_ratings: int
    average_rating: float
    rating_distribution: dict[int, int]
    ratings: list[StoreRatingEntry]


class OwnerRecentRating(RatingWithUser):
    store: StoreRef


class OwnerDashboard(ApiModel):
    stores: list[OwnerStoreSummary]
    recent_ratings: list[OwnerRecentRating]
