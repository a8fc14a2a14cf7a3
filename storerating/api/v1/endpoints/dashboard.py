"""
Dashboard endpoints — admin overview and store-owner detail.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storerating.api.v1.deps import get_db, require
from storerating.schemas.dashboard import AdminDashboard, OwnerDashboard
from storerating.services import dashboard as composer
from storerating.services.access import Action
from storerating.services.credentials import Identity

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/admin", response_model=AdminDashboard)
async def admin_dashboard(
    db: AsyncSession = Depends(get_db),
    _admin: Identity = Depends(require(Action.VIEW_ADMIN_DASHBOARD)),
) -> dict[str, Any]:
    return await composer.admin_dashboard(db)


@router.get("/store-owner", response_model=OwnerDashboard)
async def owner_dashboard(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(require(Action.VIEW_OWNER_DASHBOARD)),
) -> dict[str, Any]:
    """Ratings for every store the caller owns; 404 when they own none."""
    return await composer.owner_dashboard(db, identity)
