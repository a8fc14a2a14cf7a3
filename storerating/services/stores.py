"""
Store repository — catalog CRUD plus the per-requester store views.

List and detail views fetch all ratings for the stores involved in one
query and aggregate in Python.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storerating.core.exceptions import StoreNotFound, UserNotFound
from storerating.db.query import ilike_contains
from storerating.models.rating import Rating
from storerating.models.store import Store
from storerating.models.user import Role, User
from storerating.services.aggregation import aggregate, aggregate_by_store
from storerating.services.credentials import Identity

logger = logging.getLogger(__name__)


def _owner_summary(owner: User) -> dict[str, Any]:
    return {"id": owner.id, "name": owner.name, "email": owner.email}


async def _load_owner(db: AsyncSession, owner_id: int) -> User:
    owner = await db.get(User, owner_id)
    if owner is None:
        raise UserNotFound("Store owner not found")
    return owner


def _promote_to_owner(owner: User) -> None:
    # Only plain users are promoted; administrators keep their role.
    if owner.role is Role.USER:
        owner.role = Role.STORE_OWNER
        logger.info("Promoted user %d to %s", owner.id, Role.STORE_OWNER.value)


# ── Reads ───────────────────────────────────────────────────────────
async def get_store(db: AsyncSession, store_id: int) -> Store:
    store = await db.get(Store, store_id)
    if store is None:
        raise StoreNotFound()
    return store


async def list_stores(
    db: AsyncSession,
    identity: Identity,
    *,
    name: str | None = None,
    address: str | None = None,
) -> list[dict[str, Any]]:
    query = select(Store).options(selectinload(Store.owner)).order_by(Store.name, Store.id)
    if name:
        query = query.where(ilike_contains(Store.name, name))
    if address:
        query = query.where(ilike_contains(Store.address, address))
    stores = list((await db.execute(query)).scalars().all())
    if not stores:
        return []

    store_ids = [s.id for s in stores]
    rows = (
        await db.execute(
            select(Rating.store_id, Rating.value, Rating.user_id).where(
                Rating.store_id.in_(store_ids)
            )
        )
    ).all()
    aggregates = aggregate_by_store(((sid, value) for sid, value, _ in rows), store_ids)
    own = {sid: value for sid, value, uid in rows if uid == identity.id}

    return [
        {
            "id": store.id,
            "name": store.name,
            "email": store.email,
            "address": store.address,
            "owner": _owner_summary(store.owner),
            "average_rating": aggregates[store.id].average,
            "total_ratings": aggregates[store.id].count,
            "user_rating": own.get(store.id),
        }
        for store in stores
    ]


async def store_detail(db: AsyncSession, identity: Identity, store_id: int) -> dict[str, Any]:
    result = await db.execute(
        select(Store)
        .where(Store.id == store_id)
        .options(
            selectinload(Store.owner),
            selectinload(Store.ratings).selectinload(Rating.user),
        )
    )
    store = result.scalar_one_or_none()
    if store is None:
        raise StoreNotFound()

    ratings = sorted(store.ratings, key=lambda r: (r.created_at, r.id), reverse=True)
    summary = aggregate(r.value for r in ratings)
    user_rating = next((r.value for r in ratings if r.user_id == identity.id), None)

    return {
        "id": store.id,
        "name": store.name,
        "email": store.email,
        "address": store.address,
        "owner_id": store.owner_id,
        "created_at": store.created_at,
        "updated_at": store.updated_at,
        "owner": _owner_summary(store.owner),
        "ratings": [
            {
                "id": r.id,
                "value": r.value,
                "created_at": r.created_at,
                "updated_at": r.updated_at,
                "user": _owner_summary(r.user),
            }
            for r in ratings
        ],
        "average_rating": summary.average,
        "total_ratings": summary.count,
        "rating_distribution": summary.distribution,
        "user_rating": user_rating,
    }


# ── Writes ──────────────────────────────────────────────────────────
async def create_store(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    address: str | None,
    owner_id: int,
) -> Store:
    """Create a store; a USER owner becomes STORE_OWNER in the same commit."""
    owner = await _load_owner(db, owner_id)
    _promote_to_owner(owner)

    store = Store(name=name, email=email, address=address, owner_id=owner.id)
    db.add(store)
    await db.commit()
    await db.refresh(store)
    logger.info("Created store %d (%s) owned by user %d", store.id, store.name, owner.id)
    return store


async def update_store(db: AsyncSession, store: Store, changes: dict[str, Any]) -> Store:
    """Apply *changes*; callers must already have authorised any owner change."""
    owner_id = changes.pop("owner_id", None)
    if owner_id is not None and owner_id != store.owner_id:
        owner = await _load_owner(db, owner_id)
        _promote_to_owner(owner)
        store.owner_id = owner.id
        # An owner never has a rating on their own store.
        dropped = await db.execute(
            sa_delete(Rating).where(Rating.store_id == store.id, Rating.user_id == owner.id)
        )
        logger.info(
            "Store %d reassigned to user %d; removed %d rating(s) by the new owner",
            store.id,
            owner.id,
            dropped.rowcount,
        )

    for field, value in changes.items():
        if value is not None:
            setattr(store, field, value)

    await db.commit()
    await db.refresh(store)
    logger.info("Updated store %d", store.id)
    return store


async def delete_store(db: AsyncSession, store: Store) -> None:
    """Delete a store together with all of its ratings."""
    store_id = store.id
    deleted = await db.execute(sa_delete(Rating).where(Rating.store_id == store_id))
    await db.delete(store)
    await db.commit()
    logger.info("Deleted store %d and %d rating(s)", store_id, deleted.rowcount)
