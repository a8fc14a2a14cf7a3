"""
User management endpoints (admin only).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storerating.api.v1.deps import get_db, require, require_admin
from storerating.models.user import Role, User
from storerating.schemas.common import DeleteResponse
from storerating.schemas.user import UserCreate, UserDetail, UserRead, UserUpdate
from storerating.services import users as user_repo
from storerating.services.access import Action
from storerating.services.credentials import Identity

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserRead])
async def list_users(
    name: str | None = Query(default=None, max_length=60),
    email: str | None = Query(default=None, max_length=320),
    address: str | None = Query(default=None, max_length=400),
    role: Role | None = None,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require(Action.VIEW_USERS)),
) -> list[User]:
    return await user_repo.list_users(db, name=name, email=email, address=address, role=role)


@router.post("", response_model=UserRead, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> User:
    """Create an account with any role."""
    return await user_repo.create_user(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        address=body.address,
        role=body.role,
    )


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require(Action.VIEW_USERS)),
) -> dict[str, Any]:
    return await user_repo.user_detail(db, user_id)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: int,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> User:
    return await user_repo.update_user(db, user_id, body.model_dump(exclude_unset=True))


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require_admin),
) -> DeleteResponse:
    user = await user_repo.delete_user(db, user_id)
    return DeleteResponse(success=True, message=f"User '{user.email}' deleted")
