"""
SQLAlchemy models for Shopcore.
"""
from shopcore.models.base import Base, BaseModel, TenantBaseModel
from shopcore.models.tenant import Tenant, TenantPlan, TenantStatus, STATUS_TRANSITIONS
from shopcore.models.user import User, UserRole, UserStatus
from shopcore.models.tenant_document import TenantDocument
from shopcore.models.ledger import (
    Entity,
    EntityType,
    Transaction,
    TransactionDirection,
    TransactionStatus,
)

__all__ = [
    "Base",
    "BaseModel",
    "TenantBaseModel",
    "Tenant",
    "TenantPlan",
    "TenantStatus",
    "STATUS_TRANSITIONS",
    "User",
    "UserRole",
    "UserStatus",
    "TenantDocument",
    "Entity",
    "EntityType",
    "Transaction",
    "TransactionDirection",
    "TransactionStatus",
]
