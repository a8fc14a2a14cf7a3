"""
Credential verification — login, registration, password change and
bearer-token resolution.

Tokens are signed JWTs (see ``core.security``). Resolution always reloads
the user so the identity reflects the role currently stored, and a deleted
account stops authenticating immediately even though its token has not
expired. Password changes do not revoke tokens already issued.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storerating.core.exceptions import (EmailAlreadyRegistered,
                                         InvalidCredentials, InvalidToken,
                                         MissingToken, UnknownSubject)
from storerating.core.security import (create_access_token,
                                       decode_access_token, get_password_hash,
                                       verify_password)
from storerating.models.user import Role, User
from storerating.schemas.token import TokenPayload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated principal behind a request."""

    id: int
    email: str
    name: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> Identity:
        return cls(id=user.id, email=user.email, name=user.name, role=Role(user.role))


def token_for(user: User) -> str:
    return create_access_token(
        user.id,
        claims={"email": user.email, "role": Role(user.role).value},
    )


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def issue_token(db: AsyncSession, email: str, password: str) -> tuple[str, User]:
    """Check *email* / *password* and return a fresh access token with its user."""
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        logger.info("Failed login attempt for %s", email)
        raise InvalidCredentials()
    return token_for(user), user


async def resolve_token(db: AsyncSession, token: str | None) -> Identity:
    if not token:
        raise MissingToken()

    raw = decode_access_token(token)
    if raw is None:
        raise InvalidToken()
    try:
        payload = TokenPayload.model_validate(raw)
        user_id = int(payload.sub)  # type: ignore[arg-type]
    except (PydanticValidationError, TypeError, ValueError):
        raise InvalidToken() from None

    user = await db.get(User, user_id)
    if user is None:
        raise UnknownSubject()
    return Identity.from_user(user)


async def register(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    address: str | None,
) -> tuple[str, User]:
    """Self-service sign-up. Always creates a USER account."""
    if await get_user_by_email(db, email) is not None:
        raise EmailAlreadyRegistered()

    user = User(
        name=name,
        email=email,
        hashed_password=get_password_hash(password),
        address=address,
        role=Role.USER,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Registered user %d (%s)", user.id, user.email)
    return token_for(user), user


async def change_password(
    db: AsyncSession,
    identity: Identity,
    current_password: str,
    new_password: str,
) -> None:
    user = await db.get(User, identity.id)
    if user is None:
        raise UnknownSubject()
    if not verify_password(current_password, user.hashed_password):
        raise InvalidCredentials("Current password is incorrect")

    user.hashed_password = get_password_hash(new_password)
    await db.commit()
    logger.info("Password changed for user %d", user.id)
