"""
User service for business logic.
"""
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.core.security import hash_password
from shopcore.models.user import User, UserRole, UserStatus


class UserService:
    """Service for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get user by email (emails are stored lowercase)."""
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        email: str,
        password: str,
        name: str,
        tenant_id: UUID | None = None,
        role: UserRole = UserRole.STAFF,
    ) -> User:
        """Create a new user with a bcrypt-hashed password."""
        user = User(
            email=email.strip().lower(),
            password_hash=hash_password(password),
            name=name,
            tenant_id=tenant_id,
            role=role,
            status=UserStatus.ACTIVE,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def count_for_tenant(self, tenant_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(User.id)).where(User.tenant_id == tenant_id)
        )
        return result.scalar() or 0

    async def delete_for_tenant(self, tenant_id: UUID) -> int:
        """Delete every user bound to the tenant. Safe to repeat."""
        result = await self.db.execute(
            delete(User).where(User.tenant_id == tenant_id)
        )
        return result.rowcount or 0
