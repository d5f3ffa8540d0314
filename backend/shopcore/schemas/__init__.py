"""
Pydantic schemas for Shopcore API.
"""
from shopcore.schemas.common import (
    BaseSchema,
    IDSchema,
    TimestampSchema,
    PaginatedResponse,
    MessageResponse,
    ErrorResponse,
)
from shopcore.schemas.tenant import (
    TenantCreate,
    TenantRegister,
    TenantUpdate,
    TenantStatusUpdate,
    TenantResponse,
    TenantPublic,
    TenantRegistrationResponse,
    SubdomainCheckResponse,
    TenantStats,
)
from shopcore.schemas.tenant_data import (
    DocumentWrite,
    DocumentResponse,
    DocumentKeysResponse,
    BootstrapResponse,
)
from shopcore.schemas.ledger import (
    EntityCreate,
    EntityResponse,
    TransactionCreate,
    TransactionStatusUpdate,
    TransactionResponse,
)
from shopcore.schemas.user import UserResponse

__all__ = [
    "BaseSchema",
    "IDSchema",
    "TimestampSchema",
    "PaginatedResponse",
    "MessageResponse",
    "ErrorResponse",
    "TenantCreate",
    "TenantRegister",
    "TenantUpdate",
    "TenantStatusUpdate",
    "TenantResponse",
    "TenantPublic",
    "TenantRegistrationResponse",
    "SubdomainCheckResponse",
    "TenantStats",
    "DocumentWrite",
    "DocumentResponse",
    "DocumentKeysResponse",
    "BootstrapResponse",
    "EntityCreate",
    "EntityResponse",
    "TransactionCreate",
    "TransactionStatusUpdate",
    "TransactionResponse",
    "UserResponse",
]
