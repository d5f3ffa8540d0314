"""
Database connection and session management for Shopcore.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from shopcore.config import settings
from shopcore.models.base import Base

logger = logging.getLogger(__name__)

# Convert sync URL to async
DATABASE_URL = settings.DATABASE_URL.replace(
    "postgresql://", "postgresql+asyncpg://"
)

# Dialects with a native INSERT ... ON CONFLICT, which the document store needs.
SUPPORTED_DIALECTS = ("postgresql", "sqlite")


def check_dialect(name: str) -> None:
    """Refuse database backends the document store cannot upsert against."""
    if name not in SUPPORTED_DIALECTS:
        raise RuntimeError(
            f"Unsupported database dialect {name!r}; "
            f"expected one of {', '.join(SUPPORTED_DIALECTS)}"
        )


_engine_options = {"pool_pre_ping": True}
if DATABASE_URL.startswith("postgresql"):
    _engine_options.update(pool_size=10, max_overflow=20)

engine = create_async_engine(
    DATABASE_URL,
    echo=settings.ENVIRONMENT == "development" and settings.LOG_LEVEL == "DEBUG",
    **_engine_options,
)
check_dialect(engine.dialect.name)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

async_session_maker = AsyncSessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Context manager for database sessions (for background tasks)."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Create tables and indexes.

    Idempotent: safe to run on every process start. The unique
    ``(tenant_id, key)`` index on tenant documents is created here, so it
    exists before any tenant takes traffic.
    """
    from shopcore.models.tenant import Tenant
    from shopcore.models.user import User
    from shopcore.models.tenant_document import TenantDocument
    from shopcore.models.ledger import Entity, Transaction

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables and indexes ensured")
