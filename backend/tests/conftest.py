"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from datetime import timedelta
from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from url_manager.config import Settings
from url_manager.core.base_model import Base
from url_manager.core.database import get_db
from url_manager.core.security import create_access_token
from url_manager.main import create_app
from url_manager.modules.urls.config import UrlManagerConfig, get_url_config
from url_manager.modules.urls.models import UrlRecord  # noqa: F401
from url_manager.modules.urls.public_router import get_visit_dispatcher
from url_manager.modules.urls.service import UrlService
from url_manager.modules.urls.visits import VisitDispatcher

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ============================================================================
# Test Settings
# ============================================================================


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Override settings for testing.

    Uses an in-memory SQLite database, so no external services are needed.
    """
    return Settings(
        database_url=TEST_DATABASE_URL,
        environment="development",
        debug=True,
        log_format="console",
    )


@pytest.fixture
def url_config(test_settings: Settings) -> UrlManagerConfig:
    return UrlManagerConfig.from_settings(test_settings)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture(scope="function")
async def db_engine() -> AsyncGenerator[Any, None]:
    """Create a fresh in-memory database with all tables per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(db_engine: Any) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def url_service(db_session: AsyncSession, url_config: UrlManagerConfig) -> UrlService:
    return UrlService(db_session, url_config)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def visit_dispatcher(url_config: UrlManagerConfig) -> VisitDispatcher:
    """Dispatcher backed by a mocked Redis client."""
    redis = AsyncMock()
    return VisitDispatcher(redis, url_config)


@pytest_asyncio.fixture(scope="function")
async def app(
    db_session: AsyncSession,
    url_config: UrlManagerConfig,
    visit_dispatcher: VisitDispatcher,
) -> FastAPI:
    """Create test FastAPI application."""
    application = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_url_config] = lambda: url_config
    application.dependency_overrides[get_visit_dispatcher] = lambda: visit_dispatcher

    return application


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ============================================================================
# Authentication Fixtures
# ============================================================================


@pytest.fixture
def admin_token() -> str:
    """Generate a valid JWT token with every urls permission."""
    token_data = {"sub": "test-admin", "permissions": ["urls:*"]}
    return create_access_token(token_data, expires_delta=timedelta(hours=1))


@pytest.fixture
def admin_headers(admin_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest_asyncio.fixture(scope="function")
async def admin_client(
    app: FastAPI,
    admin_headers: dict[str, str],
) -> AsyncGenerator[AsyncClient, None]:
    """Create authenticated test HTTP client for the admin API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=admin_headers,
    ) as ac:
        yield ac


@pytest_asyncio.fixture(scope="function")
async def reader_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Authenticated client limited to urls:read."""
    token = create_access_token(
        {"sub": "test-reader", "permissions": ["urls:read"]},
        expires_delta=timedelta(hours=1),
    )
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers={"Authorization": f"Bearer {token}"},
    ) as ac:
        yield ac
