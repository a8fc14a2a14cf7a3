"""Tests for the rating ledger: upsert semantics, self-rating and deletion."""

import asyncio

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)

from storerating.core.exceptions import (SelfRatingForbidden, StoreNotFound,
                                         ValidationError)
from storerating.core.security import get_password_hash
from storerating.db.base import Base
from storerating.db.session import enable_sqlite_foreign_keys
from storerating.models.rating import Rating
from storerating.models.store import Store
from storerating.models.user import Role, User
from storerating.services import ratings as ledger

from conftest import API, PASSWORD


async def _rating_rows(db: AsyncSession, user_id: int, store_id: int) -> list[tuple[int, int]]:
    result = await db.execute(
        select(Rating.id, Rating.value).where(
            Rating.user_id == user_id, Rating.store_id == store_id
        )
    )
    return [tuple(row) for row in result.all()]


# ── Ledger (service level) ──────────────────────────────────────────
@pytest.mark.asyncio
async def test_submit_twice_keeps_one_row(db_session: AsyncSession, shopper, store):
    """A second submit replaces the value in place: same id, same created_at."""
    first = await ledger.submit(db_session, shopper.id, store.id, 4)
    created_at = first.created_at
    assert ledger.was_created(first)

    second = await ledger.submit(db_session, shopper.id, store.id, 2)
    assert second.id == first.id
    assert second.value == 2
    assert second.created_at == created_at
    assert second.updated_at > created_at
    assert not ledger.was_created(second)

    assert await _rating_rows(db_session, shopper.id, store.id) == [(first.id, 2)]


@pytest.mark.asyncio
async def test_submit_many_times_never_duplicates(db_session: AsyncSession, shopper, store):
    for value in (1, 2, 3, 4, 5, 3):
        await ledger.submit(db_session, shopper.id, store.id, value)
    total = await db_session.scalar(select(func.count()).select_from(Rating))
    assert total == 1
    assert (await _rating_rows(db_session, shopper.id, store.id))[0][1] == 3


@pytest.fixture
async def file_engine(tmp_path):
    """A file-backed database so every session gets its own connection."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ratings.db'}")
    enable_sqlite_foreign_keys(engine.sync_engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.mark.asyncio
async def test_concurrent_submits_collapse_into_one_row(file_engine):
    """Racing submissions for one (user, store) pair never raise and leave one row."""
    sessions = async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)
    async with sessions() as db:
        owner = User(name="Race Owner", email="race.owner@example.com",
                     hashed_password=get_password_hash(PASSWORD), role=Role.STORE_OWNER)
        rater = User(name="Race Rater", email="race.rater@example.com",
                     hashed_password=get_password_hash(PASSWORD))
        db.add_all([owner, rater])
        await db.flush()
        store = Store(name="Race Track", email="track@example.com", owner_id=owner.id)
        db.add(store)
        await db.commit()
        rater_id, store_id = rater.id, store.id

    async def rate(value: int) -> Rating:
        async with sessions() as db:
            return await ledger.submit(db, rater_id, store_id, value)

    values = [n % 5 + 1 for n in range(20)]
    results = await asyncio.gather(*(rate(v) for v in values), return_exceptions=True)

    errors = [r for r in results if isinstance(r, BaseException)]
    assert errors == []
    assert len({r.id for r in results}) == 1

    async with sessions() as db:
        rows = await _rating_rows(db, rater_id, store_id)
    assert len(rows) == 1
    assert rows[0][1] in values


@pytest.mark.asyncio
async def test_submit_rejects_self_rating(db_session: AsyncSession, owner, store):
    with pytest.raises(SelfRatingForbidden):
        await ledger.submit(db_session, owner.id, store.id, 5)
    assert await _rating_rows(db_session, owner.id, store.id) == []


@pytest.mark.asyncio
async def test_submit_unknown_store(db_session: AsyncSession, shopper):
    with pytest.raises(StoreNotFound):
        await ledger.submit(db_session, shopper.id, 9999, 3)


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [0, 6, -1, True, 3.5])
async def test_submit_rejects_bad_values(db_session: AsyncSession, shopper, store, value):
    with pytest.raises(ValidationError):
        await ledger.submit(db_session, shopper.id, store.id, value)


# ── POST /ratings ───────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_post_rating_created_then_updated(async_client: AsyncClient, shopper, store, auth_headers):
    """201 for the first rating, 200 when it is replaced."""
    headers = auth_headers(shopper)
    r1 = await async_client.post(f"{API}/ratings", json={"storeId": store.id, "rating": 5}, headers=headers)
    assert r1.status_code == 201
    assert r1.json()["rating"]["rating"] == 5
    assert r1.json()["message"] == "Rating submitted successfully"

    r2 = await async_client.post(f"{API}/ratings", json={"storeId": store.id, "rating": 3}, headers=headers)
    assert r2.status_code == 200
    assert r2.json()["message"] == "Rating updated successfully"
    assert r2.json()["rating"]["id"] == r1.json()["rating"]["id"]
    assert r2.json()["rating"]["rating"] == 3


@pytest.mark.asyncio
async def test_post_rating_own_store_forbidden(async_client: AsyncClient, owner, store, auth_headers):
    resp = await async_client.post(
        f"{API}/ratings", json={"storeId": store.id, "rating": 5}, headers=auth_headers(owner)
    )
    assert resp.status_code == 403
    assert resp.json()["code"] == "SELF_RATING_FORBIDDEN"


@pytest.mark.asyncio
async def test_admin_owned_store_still_not_self_ratable(async_client: AsyncClient, admin, make_store, auth_headers):
    admin_store = await make_store(admin)
    resp = await async_client.post(
        f"{API}/ratings", json={"storeId": admin_store.id, "rating": 4}, headers=auth_headers(admin)
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_post_rating_unknown_store(async_client: AsyncClient, shopper, auth_headers):
    resp = await async_client.post(
        f"{API}/ratings", json={"storeId": 424242, "rating": 4}, headers=auth_headers(shopper)
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Store not found"


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6, "5", 2.5, None])
async def test_post_rating_validation(async_client: AsyncClient, shopper, store, auth_headers, rating):
    resp = await async_client.post(
        f"{API}/ratings", json={"storeId": store.id, "rating": rating}, headers=auth_headers(shopper)
    )
    assert resp.status_code == 422
    assert any(e["field"] == "rating" for e in resp.json()["errors"])


@pytest.mark.asyncio
async def test_other_store_owner_may_rate(async_client: AsyncClient, make_user, store, auth_headers):
    rival = await make_user(Role.STORE_OWNER)
    resp = await async_client.post(
        f"{API}/ratings", json={"storeId": store.id, "rating": 1}, headers=auth_headers(rival)
    )
    assert resp.status_code == 201


# ── Listings ────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_ratings_for_store_newest_first(async_client: AsyncClient, make_user, store, auth_headers):
    raters = [await make_user() for _ in range(3)]
    for value, rater in enumerate(raters, start=1):
        await async_client.post(
            f"{API}/ratings", json={"storeId": store.id, "rating": value}, headers=auth_headers(rater)
        )

    resp = await async_client.get(f"{API}/ratings/store/{store.id}", headers=auth_headers(raters[0]))
    assert resp.status_code == 200
    data = resp.json()
    assert [r["user"]["id"] for r in data] == [r.id for r in reversed(raters)]
    assert [r["rating"] for r in data] == [3, 2, 1]


@pytest.mark.asyncio
async def test_ratings_for_unknown_store(async_client: AsyncClient, shopper, auth_headers):
    resp = await async_client.get(f"{API}/ratings/store/31337", headers=auth_headers(shopper))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_ratings_by_user_self_and_admin(async_client: AsyncClient, shopper, admin, owner, store, auth_headers):
    await async_client.post(
        f"{API}/ratings", json={"storeId": store.id, "rating": 4}, headers=auth_headers(shopper)
    )

    own = await async_client.get(f"{API}/ratings/user/{shopper.id}", headers=auth_headers(shopper))
    assert own.status_code == 200
    assert own.json()[0]["store"]["name"] == "Corner Grocery"

    as_admin = await async_client.get(f"{API}/ratings/user/{shopper.id}", headers=auth_headers(admin))
    assert as_admin.status_code == 200
    assert len(as_admin.json()) == 1

    as_owner = await async_client.get(f"{API}/ratings/user/{shopper.id}", headers=auth_headers(owner))
    assert as_owner.status_code == 403


# ── DELETE /ratings/{id} ────────────────────────────────────────────
@pytest.mark.asyncio
async def test_delete_rating_by_rater(async_client: AsyncClient, db_session: AsyncSession, shopper, store, auth_headers):
    created = await async_client.post(
        f"{API}/ratings", json={"storeId": store.id, "rating": 4}, headers=auth_headers(shopper)
    )
    rating_id = created.json()["rating"]["id"]

    resp = await async_client.delete(f"{API}/ratings/{rating_id}", headers=auth_headers(shopper))
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert await _rating_rows(db_session, shopper.id, store.id) == []


@pytest.mark.asyncio
async def test_delete_rating_by_admin(async_client: AsyncClient, shopper, admin, store, auth_headers):
    created = await async_client.post(
        f"{API}/ratings", json={"storeId": store.id, "rating": 4}, headers=auth_headers(shopper)
    )
    rating_id = created.json()["rating"]["id"]
    resp = await async_client.delete(f"{API}/ratings/{rating_id}", headers=auth_headers(admin))
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_delete_rating_by_someone_else(async_client: AsyncClient, shopper, make_user, store, auth_headers):
    created = await async_client.post(
        f"{API}/ratings", json={"storeId": store.id, "rating": 4}, headers=auth_headers(shopper)
    )
    rating_id = created.json()["rating"]["id"]
    stranger = await make_user()
    resp = await async_client.delete(f"{API}/ratings/{rating_id}", headers=auth_headers(stranger))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_delete_missing_rating(async_client: AsyncClient, admin, auth_headers):
    resp = await async_client.delete(f"{API}/ratings/777", headers=auth_headers(admin))
    assert resp.status_code == 404
    assert resp.json()["code"] == "RATING_NOT_FOUND"
