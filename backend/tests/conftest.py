"""
SkillSwap Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite +
       StaticPool, so all sessions share one connection) with the full
       schema, including the partial unique index on pending requests.

Fixture Hierarchy (all function-scoped):
    ├── engine: in-memory async engine with tables created
    ├── session_factory: async_sessionmaker bound to `engine`
    ├── db_session: one AsyncSession for service-level tests
    ├── make_user: coroutine factory inserting a User row
    ├── temp_storage: temporary directory for photo storage tests
    ├── sample_photo_bytes: small PNG-looking payload
    └── test_client: HTTPX AsyncClient wired to the app, using `engine`
"""

import os
import tempfile

# Override settings BEFORE any skillswap import: the config singleton and the
# module-level engine read these at import time.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="skillswap_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"

import itertools  # noqa: E402
import uuid  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import AsyncGenerator  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from skillswap.config import settings  # noqa: E402
from skillswap.database import Base, get_db_session  # noqa: E402
from skillswap.models.swap_request import SwapRequest  # noqa: E402, F401
from skillswap.models.user import User  # noqa: E402


def make_token(user_id, secret=None, expires_in=timedelta(hours=1), **claims) -> str:
    """Mint a bearer token the way the external auth service would."""
    payload = {"sub": str(user_id), "exp": datetime.now(timezone.utc) + expires_in}
    payload.update(claims)
    return jwt.encode(payload, secret or settings.jwt_secret, algorithm=settings.jwt_algorithm)


def auth_headers(user_or_id) -> dict:
    user_id = getattr(user_or_id, "id", user_or_id)
    return {"Authorization": f"Bearer {make_token(user_id)}"}


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def make_user(session_factory):
    """
    Returns `await make_user(name="Ana", skills_offered=[...], ...)`.

    Users are committed through their own session so they are visible to any
    other session (service tests, HTTP tests). created_at is spaced one minute
    apart in creation order so "newest first" is deterministic.
    """
    counter = itertools.count()
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async def _make_user(name: str = "User", **fields) -> User:
        n = next(counter)
        values = {
            "id": uuid.uuid4(),
            "name": name,
            "email": f"{name.lower().replace(' ', '.')}.{n}@example.com",
            "password_hash": "$2b$12$not-a-real-hash",
            "skills_offered": [],
            "skills_wanted": [],
            "availability": "flexible",
            "is_public": True,
            "created_at": base_time + timedelta(minutes=n),
        }
        values.update(fields)
        user = User(**values)
        async with session_factory() as session:
            session.add(user)
            await session.commit()
        return user

    return _make_user


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_photo_bytes():
    """PNG signature plus padding; only extension and size are validated."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 1024


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the FastAPI app in-process.

    get_db_session is overridden to use the per-test engine, keeping the
    commit-on-success / rollback-on-error behaviour of the real dependency.
    """
    from skillswap.main import app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    """Returns `auth_headers(user)` → {"Authorization": "Bearer <jwt for user>"}."""
    return auth_headers


@pytest.fixture(name="make_token")
def make_token_fixture():
    return make_token
