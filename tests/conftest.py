"""Test fixtures for the link shortener."""

import os
import tempfile

# Settings are read at import time, so the environment must be set first
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["REQUEST_LOGGING_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["OTEL_ENABLED"] = "false"
os.environ["DB_CREATE_TABLES"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="link-shortener-logs-")

from typing import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import link_shortener.models  # noqa: E402,F401
from link_shortener.db.session import get_db  # noqa: E402
from link_shortener.main import app as main_app  # noqa: E402
from link_shortener.services.clicks import ClickTracker, get_click_tracker  # noqa: E402


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a file-backed SQLite engine so separate sessions share data."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine):
    return async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for direct repository and service tests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def click_tracker(session_factory):
    """Click tracker writing to the test database."""
    tracker = ClickTracker(session_factory=session_factory)
    yield tracker
    await tracker.drain()


@pytest_asyncio.fixture
async def client(session_factory, click_tracker) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app with the session and click tracker overridden."""
    async def _override_get_db():
        async with session_factory() as session:
            yield session

    main_app.dependency_overrides[get_db] = _override_get_db
    main_app.dependency_overrides[get_click_tracker] = lambda: click_tracker

    async with AsyncClient(transport=ASGITransport(app=main_app), base_url="http://test") as ac:
        yield ac

    main_app.dependency_overrides.clear()
