"""
Tenant management endpoints.
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.config import settings
from shopcore.core.deps import CurrentUser, SuperAdmin, TenantAdmin, TenantUpdater, ensure_can_manage_tenant, get_db
from shopcore.models.tenant import TenantStatus
from shopcore.schemas.common import MessageResponse, PaginatedResponse
from shopcore.schemas.tenant import (
    SubdomainCheckResponse,
    TenantCreate,
    TenantPublic,
    TenantRegister,
    TenantRegistrationResponse,
    TenantResponse,
    TenantStats,
    TenantStatusResponse,
    TenantStatusUpdate,
    TenantUpdate,
)
from shopcore.schemas.user import UserResponse
from shopcore.services.tenant_provisioner import TenantProvisioner
from shopcore.services.tenant_resolver import TenantResolver
from shopcore.services.tenant_service import TenantService

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.post("", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    current_user: SuperAdmin,
    data: TenantCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a tenant and its admin user (super admin only)."""
    provisioner = TenantProvisioner(db)
    tenant = await provisioner.create_tenant(data, actor=current_user.email)
    return TenantResponse.model_validate(tenant)


@router.post(
    "/register",
    response_model=TenantRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_tenant(
    data: TenantRegister,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Public self-registration: starter plan with a trial period."""
    provisioner = TenantProvisioner(db)
    tenant, trial_ends_at = await provisioner.register_tenant(data)
    return TenantRegistrationResponse(
        id=tenant.id,
        name=tenant.name,
        subdomain=tenant.subdomain,
        status=tenant.status,
        trial_ends_at=trial_ends_at,
        shop_url=provisioner.shop_url(tenant),
        admin_url=settings.ADMIN_URL,
        message=f"Your store is ready. Your trial ends in {settings.TRIAL_PERIOD_DAYS} days.",
    )


@router.get("/check-subdomain/{subdomain}", response_model=SubdomainCheckResponse)
async def check_subdomain(
    subdomain: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Check whether a subdomain can be registered."""
    return await TenantProvisioner(db).check_subdomain(subdomain)


@router.get("/resolve/{subdomain}", response_model=TenantPublic)
async def resolve_tenant(
    subdomain: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Public storefront resolution. Suspended and archived stores are refused."""
    tenant = await TenantResolver(db).resolve_for_storefront(subdomain)
    return TenantPublic.model_validate(tenant)


@router.get("", response_model=PaginatedResponse[TenantResponse])
async def list_tenants(
    _: SuperAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    status: TenantStatus | None = None,
):
    """List all tenants (super admin only)."""
    service = TenantService(db)
    tenants, total = await service.list_tenants(page, per_page, status)

    return PaginatedResponse.create(
        items=[TenantResponse.model_validate(t) for t in tenants],
        total=total,
        page=page,
        per_page=per_page,
    )


@router.get("/{tenant_id}", response_model=TenantResponse)
async def get_tenant(
    tenant_id: UUID,
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a tenant by ID."""
    ensure_can_manage_tenant(current_user, tenant_id)
    tenant = await TenantService(db).get_or_404(tenant_id)
    return TenantResponse.model_validate(tenant)


@router.get("/{tenant_id}/users", response_model=list[UserResponse])
async def list_tenant_users(
    tenant_id: UUID,
    current_user: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Users bound to a tenant."""
    ensure_can_manage_tenant(current_user, tenant_id)
    users = await TenantService(db).list_users(tenant_id)
    return [UserResponse.model_validate(u) for u in users]


@router.get("/{tenant_id}/stats", response_model=TenantStats)
async def get_tenant_stats(
    tenant_id: UUID,
    current_user: TenantAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Document, user and product counts for a tenant."""
    ensure_can_manage_tenant(current_user, tenant_id)
    return await TenantService(db).get_stats(tenant_id)


@router.put("/{tenant_id}", response_model=TenantResponse)
async def update_tenant(
    tenant_id: UUID,
    data: TenantUpdate,
    current_user: TenantUpdater,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update a tenant's mutable fields."""
    ensure_can_manage_tenant(current_user, tenant_id)
    tenant = await TenantService(db).update(tenant_id, data, actor=current_user.email)
    return TenantResponse.model_validate(tenant)


@router.patch("/{tenant_id}/status", response_model=TenantStatusResponse)
async def update_tenant_status(
    tenant_id: UUID,
    data: TenantStatusUpdate,
    current_user: SuperAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Approve, suspend or archive a tenant (super admin only)."""
    tenant = await TenantService(db).update_status(
        tenant_id, data.status, reason=data.reason, actor=current_user.email
    )
    return TenantStatusResponse(id=tenant.id, status=tenant.status)


@router.delete("/{tenant_id}", response_model=MessageResponse)
async def delete_tenant(
    tenant_id: UUID,
    current_user: SuperAdmin,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete a tenant and all of its data (super admin only).

    Repeating the call after a partial failure finishes the deletion.
    """
    removed = await TenantProvisioner(db).delete_tenant(tenant_id, actor=current_user.email)
    if removed:
        return MessageResponse(message="Tenant deleted successfully")
    return MessageResponse(message="Tenant already deleted")
