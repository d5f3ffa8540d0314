"""
Tenant store: persistence, uniqueness and status transitions.
"""
import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.core.audit import record_audit_event
from shopcore.core.exceptions import ConflictError, NotFoundError, StateError
from shopcore.models.tenant import Tenant, TenantStatus
from shopcore.models.tenant_document import TenantDocument
from shopcore.models.user import User
from shopcore.schemas.tenant import TenantStats, TenantUpdate
from shopcore.services.resolution_cache import ResolutionCache, get_resolution_cache
from shopcore.services.subdomains import normalize_domain, normalize_subdomain

logger = logging.getLogger(__name__)

PRODUCTS_KEY = "products"
MAX_STATUS_RETRIES = 5


class TenantService:
    """Service for tenant record operations."""

    def __init__(self, db: AsyncSession, cache: ResolutionCache | None = None):
        self.db = db
        self.cache = cache or get_resolution_cache()

    async def get_by_id(self, tenant_id: UUID) -> Tenant | None:
        """Get tenant by ID."""
        result = await self.db.execute(
            select(Tenant).where(Tenant.id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_by_subdomain(self, subdomain: str) -> Tenant | None:
        """Get tenant by subdomain, case-insensitively."""
        result = await self.db.execute(
            select(Tenant).where(Tenant.subdomain == normalize_subdomain(subdomain))
        )
        return result.scalar_one_or_none()

    async def get_by_custom_domain(self, domain: str) -> Tenant | None:
        """Get tenant by custom domain, case-insensitively."""
        result = await self.db.execute(
            select(Tenant).where(Tenant.custom_domain == domain.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_or_404(self, tenant_id: UUID) -> Tenant:
        tenant = await self.get_by_id(tenant_id)
        if not tenant:
            raise NotFoundError("Tenant")
        return tenant

    async def _reload_or_404(self, tenant_id: UUID) -> Tenant:
        result = await self.db.execute(
            select(Tenant)
            .where(Tenant.id == tenant_id)
            .execution_options(populate_existing=True)
        )
        tenant = result.scalar_one_or_none()
        if not tenant:
            raise NotFoundError("Tenant")
        return tenant

    async def list_tenants(
        self,
        page: int = 1,
        per_page: int = 20,
        status: TenantStatus | None = None,
    ) -> tuple[list[Tenant], int]:
        """List tenants with pagination."""
        query = select(Tenant)
        count_query = select(func.count(Tenant.id))

        if status:
            query = query.where(Tenant.status == status)
            count_query = count_query.where(Tenant.status == status)

        total_result = await self.db.execute(count_query)
        total = total_result.scalar()

        query = query.order_by(Tenant.created_at.desc())
        query = query.offset((page - 1) * per_page).limit(per_page)
        result = await self.db.execute(query)
        tenants = result.scalars().all()

        return list(tenants), total

    async def update(self, tenant_id: UUID, data: TenantUpdate, actor=None) -> Tenant:
        """Update mutable tenant fields.

        ``custom_domain`` is normalized and must stay unique; an empty value
        clears it.
        """
        tenant = await self.get_or_404(tenant_id)

        update_data = data.model_dump(exclude_unset=True)
        domain_changed = False
        if "custom_domain" in update_data:
            domain = normalize_domain(update_data["custom_domain"])
            if domain != tenant.custom_domain:
                if domain:
                    existing = await self.get_by_custom_domain(domain)
                    if existing and existing.id != tenant.id:
                        raise ConflictError("Custom domain already in use")
                domain_changed = True
            update_data["custom_domain"] = domain

        for field, value in update_data.items():
            setattr(tenant, field, value)

        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("Custom domain already in use")
        await self.db.refresh(tenant)

        await self.cache.invalidate_tenant(tenant.id)
        record_audit_event(
            "tenant.updated",
            "tenant",
            tenant.id,
            actor=actor,
            fields=sorted(update_data),
            domain_changed=domain_changed,
        )
        return tenant

    async def update_status(
        self,
        tenant_id: UUID,
        new_status: TenantStatus,
        reason: str | None = None,
        actor=None,
    ) -> Tenant:
        """Move a tenant through its status state machine.

        Approval (-> active), suspension (-> suspended) and rejection
        (-> archived) stamp their own timestamp, actor and reason.

        The row update is conditional on the status that was checked. If
        another writer changed it first, the current row is re-read and the
        transition checked again.
        """
        now = datetime.now(timezone.utc)
        actor_label = str(actor) if actor is not None else None
        values = {"status": new_status}
        if new_status == TenantStatus.ACTIVE:
            values.update(approved_at=now, approved_by=actor_label, approval_reason=reason)
        elif new_status == TenantStatus.SUSPENDED:
            values.update(suspended_at=now, suspended_by=actor_label, suspension_reason=reason)
        elif new_status == TenantStatus.ARCHIVED:
            values.update(rejected_at=now, rejected_by=actor_label, rejection_reason=reason)

        tenant = await self.get_or_404(tenant_id)
        for _ in range(MAX_STATUS_RETRIES):
            old_status = tenant.status
            if not tenant.can_transition_to(new_status):
                raise StateError(
                    f"Invalid status transition: {old_status.value} -> {new_status.value}"
                )

            result = await self.db.execute(
                update(Tenant)
                .where(Tenant.id == tenant_id, Tenant.status == old_status)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            tenant = await self._reload_or_404(tenant_id)
            if result.rowcount == 1:
                break
        else:
            raise ConflictError("Tenant status was modified concurrently, try again")

        await self.cache.invalidate_tenant(tenant.id)
        logger.info(
            f"Tenant {tenant.subdomain} status {old_status.value} -> {new_status.value}"
        )
        record_audit_event(
            "tenant.status_changed",
            "tenant",
            tenant.id,
            actor=actor,
            old_status=old_status.value,
            new_status=new_status.value,
            reason=reason,
        )
        return tenant

    async def list_users(self, tenant_id: UUID) -> list[User]:
        """Users bound to the tenant."""
        await self.get_or_404(tenant_id)
        result = await self.db.execute(
            select(User).where(User.tenant_id == tenant_id).order_by(User.created_at)
        )
        return list(result.scalars().all())

    async def get_stats(self, tenant_id: UUID) -> TenantStats:
        """Counts over the tenant's documents and users."""
        await self.get_or_404(tenant_id)

        doc_result = await self.db.execute(
            select(
                func.count(TenantDocument.id),
                func.max(TenantDocument.updated_at),
            ).where(TenantDocument.tenant_id == tenant_id)
        )
        document_count, last_update = doc_result.one()

        user_count = (
            await self.db.execute(
                select(func.count(User.id)).where(User.tenant_id == tenant_id)
            )
        ).scalar()

        products = (
            await self.db.execute(
                select(TenantDocument.data).where(
                    TenantDocument.tenant_id == tenant_id,
                    TenantDocument.key == PRODUCTS_KEY,
                )
            )
        ).scalar_one_or_none()

        return TenantStats(
            tenant_id=tenant_id,
            document_count=document_count or 0,
            user_count=user_count or 0,
            product_count=len(products) if isinstance(products, list) else 0,
            last_data_update=last_update,
        )
