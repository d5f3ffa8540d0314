"""
Tenant schemas.
"""
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import EmailStr, Field

from shopcore.models.tenant import TenantPlan, TenantStatus
from shopcore.schemas.common import BaseSchema, IDSchema, TimestampSchema


class TenantCreate(BaseSchema):
    """Create tenant request (platform admin)."""

    name: str = Field(min_length=2, max_length=255)
    subdomain: str = Field(min_length=2, max_length=63)
    contact_email: EmailStr
    contact_name: str | None = None
    phone: str | None = None
    admin_email: EmailStr
    admin_password: str = Field(min_length=6)
    plan: TenantPlan = TenantPlan.STARTER
    status: TenantStatus = TenantStatus.ACTIVE
    custom_domain: str | None = None


class TenantRegister(BaseSchema):
    """Public self-registration request."""

    name: str = Field(min_length=2, max_length=255)
    subdomain: str = Field(min_length=3, max_length=30)
    contact_email: EmailStr
    contact_name: str = Field(min_length=2, max_length=255)
    phone: str | None = None
    admin_email: EmailStr
    admin_password: str = Field(min_length=6)


class TenantUpdate(BaseSchema):
    """Update tenant request. The subdomain is immutable."""

    name: str | None = Field(default=None, min_length=2, max_length=255)
    contact_email: EmailStr | None = None
    contact_name: str | None = None
    phone: str | None = None
    custom_domain: str | None = None
    plan: TenantPlan | None = None
    branding: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None


class TenantStatusUpdate(BaseSchema):
    """Status change request."""

    status: TenantStatus
    reason: str | None = Field(default=None, max_length=1000)


class TenantResponse(IDSchema, TimestampSchema):
    """Tenant response."""

    name: str
    subdomain: str
    custom_domain: str | None = None
    status: TenantStatus
    plan: TenantPlan
    contact_email: str
    contact_name: str | None = None
    phone: str | None = None
    admin_email: str
    branding: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None
    approved_at: datetime | None = None
    approved_by: str | None = None
    approval_reason: str | None = None
    suspended_at: datetime | None = None
    suspended_by: str | None = None
    suspension_reason: str | None = None
    rejected_at: datetime | None = None
    rejected_by: str | None = None
    rejection_reason: str | None = None


class TenantPublic(BaseSchema):
    """Public-safe tenant fields for storefront resolution."""

    id: UUID
    name: str
    subdomain: str
    status: TenantStatus
    branding: dict[str, Any] | None = None


class TenantRegistrationResponse(BaseSchema):
    """Result of public self-registration."""

    id: UUID
    name: str
    subdomain: str
    status: TenantStatus
    trial_ends_at: datetime
    shop_url: str
    admin_url: str
    message: str


class TenantStatusResponse(BaseSchema):
    id: UUID
    status: TenantStatus


class SubdomainCheckResponse(BaseSchema):
    """Subdomain availability."""

    available: bool
    reason: str | None = None
    message: str | None = None


class TenantStats(BaseSchema):
    tenant_id: UUID
    document_count: int
    user_count: int
    product_count: int
    last_data_update: datetime | None = None
