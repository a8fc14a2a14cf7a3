"""
Rating ledger — the only writer of ``ratings`` rows.

A user holds at most one rating per store. ``submit`` writes through a
single ``INSERT ... ON CONFLICT (user_id, store_id) DO UPDATE`` so two
concurrent submissions for the same pair collapse into one row (last
commit wins) instead of racing a read-then-write and surfacing a
duplicate-key error.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import delete as sa_delete
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storerating.core.exceptions import (RatingNotFound, SelfRatingForbidden,
                                         StorageError, StoreNotFound,
                                         ValidationError)
from storerating.models.rating import (MAX_RATING, MIN_RATING,
                                       RATING_UNIQUE_COLUMNS, Rating)
from storerating.models.store import Store

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def validate_value(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Rating must be a whole number", field="rating")
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(
            f"Rating must be a number between {MIN_RATING} and {MAX_RATING}", field="rating"
        )
    return value


def was_created(rating: Rating) -> bool:
    """True when ``submit`` inserted *rating* rather than replacing an older row."""
    return rating.created_at == rating.updated_at


def _dialect_insert(db: AsyncSession):  # noqa: ANN202
    dialect = db.bind.dialect.name
    try:
        return _UPSERT_DIALECTS[dialect]
    except KeyError:
        raise StorageError(f"No atomic upsert available for dialect {dialect!r}") from None


async def submit(db: AsyncSession, user_id: int, store_id: int, value: int) -> Rating:
    """Create or replace *user_id*'s rating of *store_id*.

    On replace the row keeps its id and ``created_at``; ``value`` and
    ``updated_at`` change.
    """
    value = validate_value(value)

    store = await db.get(Store, store_id)
    if store is None:
        raise StoreNotFound()
    if store.owner_id == user_id:
        raise SelfRatingForbidden()

    now = datetime.now(timezone.utc)
    insert = _dialect_insert(db)
    stmt = insert(Rating).values(
        user_id=user_id,
        store_id=store_id,
        value=value,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=list(RATING_UNIQUE_COLUMNS),
        set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
    ).returning(Rating.id)

    rating_id = (await db.execute(stmt)).scalar_one()
    await db.commit()

    result = await db.execute(
        select(Rating)
        .where(Rating.id == rating_id)
        .execution_options(populate_existing=True)
    )
    rating = result.scalar_one()
    logger.info(
        "Rating %d %s: user %d -> store %d = %d",
        rating.id,
        "created" if was_created(rating) else "replaced",
        user_id,
        store_id,
        value,
    )
    return rating


async def get(db: AsyncSession, rating_id: int) -> Rating:
    rating = await db.get(Rating, rating_id)
    if rating is None:
        raise RatingNotFound()
    return rating


async def remove(db: AsyncSession, rating_id: int) -> None:
    """Delete a rating. Authorisation happens before this is called."""
    result = await db.execute(sa_delete(Rating).where(Rating.id == rating_id))
    if result.rowcount == 0:
        await db.rollback()
        raise RatingNotFound()
    await db.commit()
    logger.info("Deleted rating %d", rating_id)


async def list_by_store(db: AsyncSession, store_id: int) -> list[Rating]:
    """Ratings for one store, newest first, each with its rater loaded."""
    if await db.get(Store, store_id) is None:
        raise StoreNotFound()
    result = await db.execute(
        select(Rating)
        .where(Rating.store_id == store_id)
        .options(selectinload(Rating.user))
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    )
    return list(result.scalars().all())


async def list_by_user(db: AsyncSession, user_id: int) -> list[Rating]:
    """Ratings given by one user, newest first, each with its store loaded."""
    result = await db.execute(
        select(Rating)
        .where(Rating.user_id == user_id)
        .options(selectinload(Rating.store))
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    )
    return list(result.scalars().all())
