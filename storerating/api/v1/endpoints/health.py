"""
Public health check.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storerating.api.v1.deps import get_db
from storerating.schemas.common import HealthResponse

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_db)) -> HealthResponse:
    """Database connectivity; never raises."""
    result = HealthResponse(db=False)
    try:
        await db.execute(text("SELECT 1"))
        result.db = True
    except SQLAlchemyError as e:
        logger.warning("Health check DB failure: %s", e)
    return result
