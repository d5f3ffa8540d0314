"""
User schemas.
"""
from datetime import datetime
from uuid import UUID

from shopcore.models.user import UserRole, UserStatus
from shopcore.schemas.common import BaseSchema, IDSchema, TimestampSchema


class UserResponse(IDSchema, TimestampSchema):
    """User response schema."""

    email: str
    name: str
    role: UserRole
    status: UserStatus
    tenant_id: UUID | None = None
    last_login_at: datetime | None = None
