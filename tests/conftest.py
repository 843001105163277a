"""Shared test fixtures."""
import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SESSION_SECRET"] = "test-session-secret-at-least-32-bytes-long"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["SCRAPER_ENABLED"] = "false"
os.environ["DEBUG"] = "false"

from typing import AsyncGenerator, Dict  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from courtwatch.api.register import limiter  # noqa: E402
from courtwatch.core.database import get_db, init_db  # noqa: E402
from courtwatch.core.security import create_session_token  # noqa: E402
from courtwatch.core.venues import VENUES  # noqa: E402
from courtwatch.main import app  # noqa: E402
from courtwatch.models import User, Venue  # noqa: E402


def auth_headers(email: str) -> Dict[str, str]:
    """Bearer header carrying a session token for email."""
    return {"Authorization": f"Bearer {create_session_token(email)}"}


@pytest_asyncio.fixture
async def engine():
    """In-memory database shared by every session in a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(bind=engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, with get_db bound to the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def broken_db_client() -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client whose database session fails on every query.

    Unhandled errors are answered by the app's 500 handler instead of being
    raised into the test.
    """
    session = MagicMock()
    session.execute = AsyncMock(side_effect=RuntimeError("connection refused"))

    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def venues(session_factory):
    """Every catalogue venue, keyed by slug."""
    async with session_factory() as session:
        rows = [Venue(slug=v.slug, name=v.name) for v in VENUES]
        session.add_all(rows)
        await session.commit()
        return {v.slug: v for v in rows}


@pytest_asyncio.fixture
async def user(session_factory):
    async with session_factory() as session:
        user = User(email="player@example.com", name="Player", is_allowed=True, is_admin=False)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest_asyncio.fixture
async def admin_user(session_factory):
    async with session_factory() as session:
        user = User(email="admin@example.com", name="Admin", is_allowed=True, is_admin=True)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
def user_headers(user):
    return auth_headers(user.email)


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user.email)


@pytest.fixture
def headers_for():
    return auth_headers
