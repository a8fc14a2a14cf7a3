"""
Auth endpoints — login, self-registration, password change and profile.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storerating.api.v1.deps import get_current_identity, get_db
from storerating.core.config import settings
from storerating.core.limiter import limiter
from storerating.models.user import User
from storerating.schemas.common import MessageResponse
from storerating.schemas.token import (AuthResponse, ChangePasswordRequest,
                                       LoginRequest)
from storerating.schemas.user import UserRead, UserRegister
from storerating.services import credentials
from storerating.services.credentials import Identity
from storerating.services.users import get_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Exchange email + password for a bearer token (valid 24 hours)."""
    token, user = await credentials.issue_token(db, body.email, body.password)
    return AuthResponse(token=token, user=UserRead.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=201)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def register(
    request: Request,
    body: UserRegister,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    """Create a regular USER account and log it in."""
    token, user = await credentials.register(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        address=body.address,
    )
    return AuthResponse(token=token, user=UserRead.model_validate(user))


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> MessageResponse:
    """Re-hash the caller's password. Tokens already issued stay valid."""
    await credentials.change_password(db, identity, body.current_password, body.new_password)
    return MessageResponse(message="Password updated successfully")


@router.get("/me", response_model=UserRead)
async def read_current_user(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> User:
    """Return profile of the currently authenticated user."""
    return await get_user(db, identity.id)
