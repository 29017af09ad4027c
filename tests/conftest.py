"""
Global test fixtures and configuration.

This module provides base fixtures for all tests:
- In-memory SQLite database, fresh for each test
- HTTP client against the FastAPI app with dependency overrides
- API access layer (ApiService) mounted on the same app
- Base data fixtures (user, auth_headers, session)
"""

import os
from typing import AsyncGenerator

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Set test environment variables BEFORE importing the app
os.environ["MODE"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["CLIENTDASH_API_URL"] = "http://test"

from clientdash.main import app
from clientdash.api.dependencies import get_db
from clientdash.db.session import init_models
from clientdash.sdk.api import ApiService
from clientdash.sdk.session import MemoryTokenStore, SessionContext

from tests.factories.user import DEFAULT_PASSWORD


# ==================== Database ====================

@pytest.fixture
async def test_engine():
    """
    Create an in-memory database with all tables.

    StaticPool keeps the single connection alive so every session sees the
    same database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_models(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# ==================== FastAPI Client ====================

@pytest.fixture
def asgi_transport(db_session: AsyncSession):
    """
    ASGI transport for the app with get_db overridden to the test session.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield httpx.ASGITransport(app=app)
    app.dependency_overrides.clear()


@pytest.fixture
async def client(asgi_transport) -> AsyncGenerator[AsyncClient, None]:
    """Raw HTTP client for testing FastAPI endpoints."""
    async with AsyncClient(transport=asgi_transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def api(asgi_transport) -> AsyncGenerator[ApiService, None]:
    """API access layer talking to the app; the trailing slash is stripped."""
    async with ApiService("http://test/", transport=asgi_transport) as service:
        yield service


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(MemoryTokenStore())


# ==================== Base Data Fixtures ====================

@pytest.fixture
async def user(db_session: AsyncSession):
    """Create a test user with password DEFAULT_PASSWORD."""
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, email="owner@example.com", name="Owner User")
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def other_user(db_session: AsyncSession):
    from tests.factories.user import UserFactory
    user = await UserFactory.create_async(db_session, email="other@example.com", name="Other User")
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def auth_headers(user):
    """
    Generate authentication headers for authenticated requests.
    """
    from clientdash.core.security import create_access_token

    token = create_access_token(
        data={"sub": str(user.id)},
        token_version=user.token_version
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def other_auth_headers(other_user):
    from clientdash.core.security import create_access_token

    token = create_access_token(
        data={"sub": str(other_user.id)},
        token_version=other_user.token_version
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def logged_in_session(api: ApiService, session: SessionContext, user) -> SessionContext:
    """Session signed in through the API access layer as ``user``."""
    await api.authenticate(session, user.email, DEFAULT_PASSWORD)
    return session


@pytest.fixture
def client_payload():
    """Valid wire payload for POST /clients."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@analytical.io",
        "phone": "5551234567",
        "company": "Analytical Engines",
        "subscriptionRenewalDate": "2030-01-15",
        "subscriptionAmount": 120.5,
        "notes": "Prefers email contact",
    }
