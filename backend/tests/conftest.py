"""
Pytest configuration and fixtures for Shopcore tests.
"""
import os
import uuid
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["RESOLUTION_CACHE_REDIS_URL"] = ""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shopcore.core.security import create_access_token
from shopcore.database import get_db
from shopcore.models.base import Base
from shopcore.models.tenant import Tenant, TenantPlan, TenantStatus
from shopcore.models.user import User, UserRole, UserStatus
from shopcore.services.resolution_cache import ResolutionCache, close_resolution_cache

# Use SQLite for testing (in-memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(autouse=True)
async def reset_resolution_cache():
    """Drop the process-wide resolution cache between tests."""
    yield
    await close_resolution_cache()


@pytest.fixture
def memory_cache() -> ResolutionCache:
    """Resolution cache with only the in-process level."""
    return ResolutionCache(redis_url="", enabled=True)


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest_asyncio.fixture
async def tenant(db_session: AsyncSession) -> Tenant:
    """An active tenant."""
    tenant = Tenant(
        id=uuid.UUID("00000000-0000-0000-0000-000000000001"),
        name="Acme Store",
        subdomain="acme",
        status=TenantStatus.ACTIVE,
        plan=TenantPlan.STARTER,
        contact_email="owner@acme.example.com",
        admin_email="admin@acme.example.com",
        branding={"primary_color": "#ff6600"},
        settings={},
    )
    db_session.add(tenant)
    await db_session.commit()
    return tenant


@pytest_asyncio.fixture
async def other_tenant(db_session: AsyncSession) -> Tenant:
    tenant = Tenant(
        id=uuid.UUID("00000000-0000-0000-0000-000000000005"),
        name="Globex",
        subdomain="globex",
        status=TenantStatus.ACTIVE,
        plan=TenantPlan.GROWTH,
        contact_email="owner@globex.example.com",
        admin_email="admin@globex.example.com",
        branding={},
        settings={},
    )
    db_session.add(tenant)
    await db_session.commit()
    return tenant


@pytest_asyncio.fixture
async def super_admin(db_session: AsyncSession) -> User:
    user = User(
        id=uuid.UUID("00000000-0000-0000-0000-000000000099"),
        email="root@platform.example.com",
        name="Platform Admin",
        password_hash="$2b$12$test_hash_for_testing_only",
        tenant_id=None,
        role=UserRole.SUPER_ADMIN,
        status=UserStatus.ACTIVE,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def tenant_admin(db_session: AsyncSession, tenant: Tenant) -> User:
    user = User(
        id=uuid.UUID("00000000-0000-0000-0000-000000000002"),
        email="admin@acme.example.com",
        name="Acme Admin",
        password_hash="$2b$12$test_hash_for_testing_only",
        tenant_id=tenant.id,
        role=UserRole.TENANT_ADMIN,
        status=UserStatus.ACTIVE,
    )
    db_session.add(user)
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def staff_user(db_session: AsyncSession, tenant: Tenant) -> User:
    user = User(
        id=uuid.UUID("00000000-0000-0000-0000-000000000003"),
        email="clerk@acme.example.com",
        name="Acme Clerk",
        password_hash="$2b$12$test_hash_for_testing_only",
        tenant_id=tenant.id,
        role=UserRole.STAFF,
        status=UserStatus.ACTIVE,
    )
    db_session.add(user)
    await db_session.commit()
    return user


# ============================================================================
# FastAPI App Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def app(db_session: AsyncSession) -> FastAPI:
    """Create test FastAPI application."""
    from shopcore.main import app as main_app

    async def override_get_db():
        yield db_session

    main_app.dependency_overrides[get_db] = override_get_db

    yield main_app

    main_app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ============================================================================
# Authentication Fixtures
# ============================================================================

def _headers_for(user: User) -> dict:
    token = create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def super_admin_headers(super_admin: User) -> dict:
    """Authentication headers for the platform super admin."""
    return _headers_for(super_admin)


@pytest.fixture
def tenant_admin_headers(tenant_admin: User) -> dict:
    """Authentication headers for the admin of the ``acme`` tenant."""
    return _headers_for(tenant_admin)


@pytest.fixture
def staff_headers(staff_user: User) -> dict:
    return _headers_for(staff_user)


# ============================================================================
# Mock Fixtures
# ============================================================================

@pytest.fixture
def mock_redis():
    """Mock Redis client for the resolution cache."""
    mock = AsyncMock()
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[True, 1, True])
    mock.get = AsyncMock(return_value=None)
    mock.delete = AsyncMock(return_value=1)
    mock.smembers = AsyncMock(return_value=set())
    mock.pipeline = MagicMock(return_value=pipe)
    mock.close = AsyncMock()
    mock.pipe = pipe
    return mock
