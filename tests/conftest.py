"""Shared test fixtures for PageSync."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from pagesync.config import Settings
from pagesync.main import create_app
from pagesync.models.base import Base

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable
    from pathlib import Path

TEST_SECRET_KEY = "test-secret-key-with-at-least-32-characters"


def unreachable(request: httpx.Request) -> httpx.Response:
    """Transport handler for tests that must not touch the network."""
    msg = f"Unexpected outbound request: {request.method} {request.url}"
    raise httpx.ConnectError(msg, request=request)


@asynccontextmanager
async def create_test_client(
    settings: Settings,
    *,
    origin_handler: Callable[[httpx.Request], httpx.Response] | None = None,
    github_handler: Callable[[httpx.Request], httpx.Response] | None = None,
) -> AsyncGenerator[AsyncClient]:
    """Create an HTTP test client with a fully initialized app.

    Manually performs the work of the application lifespan (DB schema, HTTP
    clients) because ASGITransport does not trigger it. Outbound traffic goes
    to the given MockTransport handlers.
    """
    from pagesync.database import create_engine as create_db_engine

    app = create_app(settings)
    settings.validate_runtime_security()

    engine, session_factory = create_db_engine(settings)
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.settings = settings

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    origin_client = httpx.AsyncClient(
        transport=httpx.MockTransport(origin_handler or unreachable), follow_redirects=True
    )
    github_http_client = httpx.AsyncClient(
        transport=httpx.MockTransport(github_handler or unreachable)
    )
    app.state.origin_client = origin_client
    app.state.github_http_client = github_http_client

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    await origin_client.aclose()
    await github_http_client.aclose()
    await engine.dispose()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Create test settings with temporary paths."""
    db_path = tmp_path / "test.db"
    return Settings(
        _env_file=None,
        secret_key=TEST_SECRET_KEY,
        debug=True,
        database_url=f"sqlite+aiosqlite:///{db_path}",
        frontend_dir=tmp_path / "frontend",
    )


@pytest.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Create a test database engine with all tables."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(
    db_engine: AsyncEngine,
) -> AsyncGenerator[AsyncSession]:
    """Create a test database session."""
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session
