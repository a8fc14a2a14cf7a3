"""
Shared test fixtures for the Store Rating API test suite.

Async throughout (aiosqlite + AsyncSession). Users are inserted straight
into the database and authenticate with real signed tokens so every test
goes through token resolution and the access guard.
"""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from itertools import count

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CORS_ORIGINS"] = '["*"]'
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storerating.api.v1.deps import get_db
from storerating.core.security import get_password_hash
from storerating.db.base import Base
from storerating.db.session import enable_sqlite_foreign_keys
from storerating.main import app
from storerating.models import Role, Store, User
from storerating.services.credentials import token_for

API = "/api"
PASSWORD = "Secret@123"

# One in-memory database shared by the app and the tests
test_engine = create_async_engine(
    "sqlite+aiosqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(test_engine.sync_engine)

TestingSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def setup_db():
    """Create all tables before usage and drop after."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Fresh connection per test; each test runs on its own event loop
    await test_engine.dispose()


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestingSessionLocal() as session:
        yield session


app.dependency_overrides[get_db] = _override_get_db


@pytest.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with TestingSessionLocal() as session:
        yield session


# ── Factories ───────────────────────────────────────────────────────
_seq = count(1)


def bearer(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Per-request Authorization header for a user."""
    return bearer


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make(role: Role = Role.USER, name: str | None = None, email: str | None = None) -> User:
        n = next(_seq)
        user = User(
            name=name or f"Test User {n}",
            email=email or f"user{n}@example.com",
            hashed_password=get_password_hash(PASSWORD),
            address=f"{n} Test Street",
            role=role,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_store(db_session: AsyncSession) -> Callable[..., Awaitable[Store]]:
    async def _make(owner: User, name: str | None = None, address: str = "1 Market Road") -> Store:
        n = next(_seq)
        store = Store(
            name=name or f"Store Number {n}",
            email=f"store{n}@example.com",
            address=address,
            owner_id=owner.id,
        )
        db_session.add(store)
        await db_session.commit()
        await db_session.refresh(store)
        return store

    return _make


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user(Role.ADMIN, name="Admin Person")


@pytest.fixture
async def owner(make_user) -> User:
    return await make_user(Role.STORE_OWNER, name="Owner Person")


@pytest.fixture
async def shopper(make_user) -> User:
    return await make_user(Role.USER, name="Shopper Person")


@pytest.fixture
async def store(make_store, owner) -> Store:
    return await make_store(owner, name="Corner Grocery")
