"""
Store endpoints.

- GET operations require any authenticated user.
- POST / DELETE require admin role.
- PUT is open to admins and to the store's own owner; only admins may
  move a store to another owner.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storerating.api.v1.deps import get_current_identity, get_db, require
from storerating.models.store import Store
from storerating.schemas.common import DeleteResponse
from storerating.schemas.store import (StoreCreate, StoreDetail,
                                       StoreListItem, StoreRead, StoreUpdate)
from storerating.services import stores as store_repo
from storerating.services.access import Action, ensure_allowed
from storerating.services.credentials import Identity

router = APIRouter(prefix="/stores", tags=["stores"])


@router.get("", response_model=list[StoreListItem])
async def list_stores(
    name: str | None = Query(default=None, max_length=60),
    address: str | None = Query(default=None, max_length=400),
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require(Action.VIEW_STORES)),
) -> list[dict[str, Any]]:
    """Stores with their average, rating count and the caller's own rating."""
    return await store_repo.list_stores(db, identity, name=name, address=address)


@router.post("", response_model=StoreRead, status_code=201)
async def create_store(
    body: StoreCreate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require(Action.MANAGE_STORES)),
) -> Store:
    return await store_repo.create_store(
        db,
        name=body.name,
        email=body.email,
        address=body.address,
        owner_id=body.owner_id,
    )


@router.get("/{store_id}", response_model=StoreDetail)
async def get_store(
    store_id: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require(Action.VIEW_STORES)),
) -> dict[str, Any]:
    return await store_repo.store_detail(db, identity, store_id)


@router.put("/{store_id}", response_model=StoreRead)
async def update_store(
    store_id: int,
    body: StoreUpdate,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> Store:
    store = await store_repo.get_store(db, store_id)
    ensure_allowed(identity, Action.UPDATE_STORE, store)

    changes = body.model_dump(exclude_unset=True)
    if changes.get("owner_id") not in (None, store.owner_id):
        ensure_allowed(identity, Action.REASSIGN_STORE_OWNER, store)
    return await store_repo.update_store(db, store, changes)


@router.delete("/{store_id}", response_model=DeleteResponse)
async def delete_store(
    store_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require(Action.MANAGE_STORES)),
) -> DeleteResponse:
    """Delete a store and every rating it has received."""
    store = await store_repo.get_store(db, store_id)
    name = store.name
    await store_repo.delete_store(db, store)
    return DeleteResponse(success=True, message=f"Store '{name}' deleted")
