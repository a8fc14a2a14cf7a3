"""
Dashboard composer — read-only summaries for administrators and store owners.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storerating.core.exceptions import NoStoresForOwner
from storerating.models.rating import Rating
from storerating.models.store import Store
from storerating.models.user import Role, User
from storerating.services.aggregation import aggregate, aggregate_by_store
from storerating.services.credentials import Identity

ADMIN_RECENT_LIMIT = 5
OWNER_RECENT_LIMIT = 10


def _user_ref(user: User) -> dict[str, Any]:
    return {"id": user.id, "name": user.name, "email": user.email}


async def _count(db: AsyncSession, model: type) -> int:
    return int(await db.scalar(select(func.count()).select_from(model)) or 0)


async def admin_dashboard(db: AsyncSession) -> dict[str, Any]:
    counts = {
        "users": await _count(db, User),
        "stores": await _count(db, Store),
        "ratings": await _count(db, Rating),
    }

    by_role = {role.value: 0 for role in Role}
    role_rows = await db.execute(select(User.role, func.count()).group_by(User.role))
    for role, total in role_rows.all():
        by_role[Role(role).value] = total

    recent_users = (
        await db.execute(
            select(User)
            .order_by(User.created_at.desc(), User.id.desc())
            .limit(ADMIN_RECENT_LIMIT)
        )
    ).scalars().all()

    recent_stores = (
        await db.execute(
            select(Store)
            .options(selectinload(Store.owner))
            .order_by(Store.created_at.desc(), Store.id.desc())
            .limit(ADMIN_RECENT_LIMIT)
        )
    ).scalars().all()
    store_ids = [s.id for s in recent_stores]
    rating_rows = (
        await db.execute(
            select(Rating.store_id, Rating.value).where(Rating.store_id.in_(store_ids))
        )
    ).all() if store_ids else []
    aggregates = aggregate_by_store(rating_rows, store_ids)

    recent_ratings = (
        await db.execute(
            select(Rating, User.name, Store.name)
            .join(User, Rating.user_id == User.id)
            .join(Store, Rating.store_id == Store.id)
            .order_by(Rating.created_at.desc(), Rating.id.desc())
            .limit(ADMIN_RECENT_LIMIT)
        )
    ).all()

    return {
        "counts": counts,
        "users_by_role": by_role,
        "recent_users": list(recent_users),
        "recent_stores": [
            {
                "id": store.id,
                "name": store.name,
                "owner_name": store.owner.name,
                "created_at": store.created_at,
                "average_rating": aggregates[store.id].average,
                "total_ratings": aggregates[store.id].count,
            }
            for store in recent_stores
        ],
        "recent_ratings": [
            {
                "id": rating.id,
                "value": rating.value,
                "created_at": rating.created_at,
                "user_name": user_name,
                "store_name": store_name,
            }
            for rating, user_name, store_name in recent_ratings
        ],
    }


async def owner_dashboard(db: AsyncSession, identity: Identity) -> dict[str, Any]:
    """Every store owned by *identity* with its full rating list and aggregate."""
    stores = (
        await db.execute(
            select(Store)
            .where(Store.owner_id == identity.id)
            .options(selectinload(Store.ratings).selectinload(Rating.user))
            .order_by(Store.name, Store.id)
        )
    ).scalars().all()
    if not stores:
        raise NoStoresForOwner()

    summaries = []
    for store in stores:
        ratings = sorted(store.ratings, key=lambda r: (r.created_at, r.id), reverse=True)
        summary = aggregate(r.value for r in ratings)
        summaries.append(
            {
                "id": store.id,
                "name": store.name,
                "email": store.email,
                "address": store.address,
                "total_ratings": summary.count,
                "average_rating": summary.average,
                "rating_distribution": summary.distribution,
                "ratings": [
                    {
                        "id": r.id,
                        "value": r.value,
                        "created_at": r.created_at,
                        "updated_at": r.updated_at,
                        "user": _user_ref(r.user),
                    }
                    for r in ratings
                ],
            }
        )

    recent = (
        await db.execute(
            select(Rating)
            .where(Rating.store_id.in_([s.id for s in stores]))
            .options(selectinload(Rating.user), selectinload(Rating.store))
            .order_by(Rating.created_at.desc(), Rating.id.desc())
            .limit(OWNER_RECENT_LIMIT)
        )
    ).scalars().all()

    return {
        "stores": summaries,
        "recent_ratings": [
            {
                "id": r.id,
                "value": r.value,
                "user_id": r.user_id,
                "store_id": r.store_id,
                "created_at": r.created_at,
                "updated_at": r.updated_at,
                "user": _user_ref(r.user),
                "store": {"id": r.store.id, "name": r.store.name, "address": r.store.address},
            }
            for r in recent
        ],
    }
