"""Shared test fixtures.

Tests run against an in-memory SQLite database (one shared connection). The
app lifespan never runs, so Redis stays unconnected and no external service is needed.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

os.environ["INTENT_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["INTENT_SERVICE_ROLE_KEY"] = "test-service-role-key"
os.environ["INTENT_LOG_FORMAT"] = "console"
os.environ["INTENT_SEED_BADGES_ON_STARTUP"] = "false"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from intent.badges.seed import seed_badges  # noqa: E402
from intent.badges.session import WalletSession  # noqa: E402
from intent.config import get_settings  # noqa: E402
from intent.database import close_db, get_engine, init_db  # noqa: E402
from intent.db import models  # noqa: E402, F401
from intent.db.base import Base  # noqa: E402

get_settings.cache_clear()

TEST_WALLET = "0x71C7656EC7ab88b098defB751B7401B5f6d8976F"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """Fresh schema with the launch catalog seeded."""
    settings = get_settings()
    await init_db(settings.database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSession(get_engine(), expire_on_commit=False) as session:
        await seed_badges(session)

    yield

    # Disposing the engine drops the in-memory database with it.
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for engine tests and assertions."""
    async with AsyncSession(get_engine(), expire_on_commit=False) as session:
        yield session


@pytest_asyncio.fixture
async def client(database: None) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client. Unhandled errors come back as 500 responses."""
    from intent.main import create_app

    app = create_app()
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def wallet_session() -> WalletSession:
    """A connected wallet for a brand new user."""
    return WalletSession(user_id=uuid.uuid4(), wallet_address=TEST_WALLET)


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Redis stand-in that records pub/sub publishes."""
    redis = AsyncMock()
    redis.publish = AsyncMock(return_value=1)
    return redis
