"""
FastAPI dependencies — database session, identity resolution and role guards.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storerating.core.config import settings
from storerating.db.session import async_session_factory
from storerating.services.access import Action, ensure_allowed
from storerating.services.credentials import Identity, resolve_token

# auto_error=False so a missing header surfaces as our own MissingToken error
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
async def get_current_identity(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Identity:
    """Resolve the bearer token carried by this request."""
    return await resolve_token(db, token)


def require(action: Action) -> Callable[..., Awaitable[Identity]]:
    """Dependency factory for actions that need no target resource."""

    async def _guard(identity: Identity = Depends(get_current_identity)) -> Identity:
        ensure_allowed(identity, action)
        return identity

    return _guard


require_admin = require(Action.MANAGE_USERS)
