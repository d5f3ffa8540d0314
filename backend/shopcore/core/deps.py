"""
FastAPI dependencies for authentication and database.
"""
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.core.exceptions import ForbiddenError
from shopcore.core.security import check_permission, decode_token
from shopcore.database import get_db
from shopcore.models.user import User, UserRole, UserStatus

security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    try:
        user_uuid = UUID(str(user_id))
    except ValueError:
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if user is None:
        raise credentials_exception

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Ensure the current user is active."""
    if current_user.status != UserStatus.ACTIVE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user",
        )
    return current_user


def require_permission(permission: str):
    """Dependency factory for permission checking."""

    async def permission_checker(
        current_user: Annotated[User, Depends(get_current_active_user)],
    ) -> User:
        if not check_permission(current_user.role.value, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: {permission}",
            )
        return current_user

    return permission_checker


def require_roles(*roles: UserRole):
    """Dependency factory for role checking."""

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_active_user)],
    ) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role required: {', '.join(r.value for r in roles)}",
            )
        return current_user

    return role_checker


def ensure_can_manage_tenant(user: User, tenant_id) -> None:
    """Raise unless the user may mutate the given tenant."""
    if not user.can_manage_tenant(tenant_id):
        raise ForbiddenError("You do not have access to this tenant")


# Common dependencies
CurrentUser = Annotated[User, Depends(get_current_active_user)]
SuperAdmin = Annotated[User, Depends(require_roles(UserRole.SUPER_ADMIN))]
TenantAdmin = Annotated[User, Depends(require_roles(UserRole.SUPER_ADMIN, UserRole.TENANT_ADMIN))]
TenantUpdater = Annotated[User, Depends(require_permission("tenant:update"))]
TenantDataWriter = Annotated[User, Depends(require_permission("tenant_data:write"))]
LedgerReader = Annotated[User, Depends(require_permission("ledger:read"))]
LedgerWriter = Annotated[User, Depends(require_permission("ledger:write"))]
