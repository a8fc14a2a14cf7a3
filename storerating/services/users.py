"""
Identity store — administrator-side user management.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storerating.core.exceptions import (EmailAlreadyRegistered,
                                         OwnerHasStores, UserNotFound)
from storerating.core.security import get_password_hash
from storerating.db.query import ilike_contains
from storerating.models.rating import Rating
from storerating.models.store import Store
from storerating.models.user import Role, User
from storerating.services.aggregation import aggregate
from storerating.services.credentials import get_user_by_email

logger = logging.getLogger(__name__)


async def list_users(
    db: AsyncSession,
    *,
    name: str | None = None,
    email: str | None = None,
    address: str | None = None,
    role: Role | None = None,
) -> list[User]:
    query = select(User).order_by(User.created_at.desc(), User.id.desc())
    if name:
        query = query.where(ilike_contains(User.name, name))
    if email:
        query = query.where(ilike_contains(User.email, email))
    if address:
        query = query.where(ilike_contains(User.address, address))
    if role is not None:
        query = query.where(User.role == role)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise UserNotFound()
    return user


async def user_detail(db: AsyncSession, user_id: int) -> dict[str, Any]:
    """User profile; store owners also get the average over all their stores."""
    user = await get_user(db, user_id)
    detail: dict[str, Any] = {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "address": user.address,
        "role": user.role,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
        "average_rating": None,
    }
    if user.role is Role.STORE_OWNER:
        result = await db.execute(
            select(Rating.value).join(Store, Rating.store_id == Store.id).where(
                Store.owner_id == user.id
            )
        )
        detail["average_rating"] = aggregate(result.scalars().all()).average
    return detail


async def create_user(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    address: str | None,
    role: Role,
) -> User:
    if await get_user_by_email(db, email) is not None:
        raise EmailAlreadyRegistered()

    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        address=address,
        role=role,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Created user %d (%s, %s)", user.id, user.email, user.role.value)
    return user


async def update_user(db: AsyncSession, user_id: int, changes: dict[str, Any]) -> User:
    user = await get_user(db, user_id)

    new_email = changes.get("email")
    if new_email and new_email != user.email:
        if await get_user_by_email(db, new_email) is not None:
            raise EmailAlreadyRegistered()

    password = changes.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)

    for field, value in changes.items():
        if value is not None:
            setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    logger.info("Updated user %d (%s)", user.id, ", ".join(sorted(changes)) or "password")
    return user


async def delete_user(db: AsyncSession, user_id: int) -> User:
    """Delete a user and their ratings. Owners of stores must lose them first."""
    user = await get_user(db, user_id)

    owned = await db.scalar(
        select(func.count()).select_from(Store).where(Store.owner_id == user_id)
    )
    if owned:
        raise OwnerHasStores()

    await db.execute(sa_delete(Rating).where(Rating.user_id == user_id))
    await db.delete(user)
    await db.commit()
    logger.info("Deleted user %d (%s)", user_id, user.email)
    return user
