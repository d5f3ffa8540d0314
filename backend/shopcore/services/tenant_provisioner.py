"""
Tenant provisioning and deprovisioning.

A tenant and its first admin user are written in one database transaction:
either both exist afterwards or neither does. Deletion is a sequence of
idempotent steps (documents, users, tenant record) that can be re-run after a
partial failure until it completes.
"""
import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.config import settings
from shopcore.core.audit import record_audit_event
from shopcore.core.exceptions import ConflictError, ValidationError
from shopcore.models.tenant import Tenant, TenantPlan, TenantStatus
from shopcore.models.user import User, UserRole
from shopcore.schemas.tenant import SubdomainCheckResponse, TenantCreate, TenantRegister
from shopcore.services.resolution_cache import ResolutionCache, get_resolution_cache
from shopcore.services.subdomains import (
    normalize_domain,
    normalize_subdomain,
    subdomain_problem,
    validate_subdomain,
)
from shopcore.services.tenant_document_store import TenantDocumentStore
from shopcore.services.tenant_service import TenantService
from shopcore.services.user_service import UserService

logger = logging.getLogger(__name__)

INITIAL_STATUSES = frozenset({TenantStatus.TRIALING, TenantStatus.ACTIVE})


class TenantProvisioner:
    """Creates and removes tenants together with their owned data."""

    def __init__(self, db: AsyncSession, cache: ResolutionCache | None = None):
        self.db = db
        self.cache = cache or get_resolution_cache()
        self.tenants = TenantService(db, self.cache)
        self.users = UserService(db)
        self.documents = TenantDocumentStore(db)

    async def check_subdomain(self, subdomain: str) -> SubdomainCheckResponse:
        """Report whether a subdomain can be claimed right now."""
        subdomain = normalize_subdomain(subdomain)
        problem = subdomain_problem(subdomain)
        if problem:
            reason, message = problem
            return SubdomainCheckResponse(available=False, reason=reason, message=message)

        if await self.tenants.get_by_subdomain(subdomain):
            return SubdomainCheckResponse(
                available=False,
                reason="taken",
                message="This subdomain is already taken",
            )
        return SubdomainCheckResponse(available=True)

    async def create_tenant(self, data: TenantCreate, actor=None) -> Tenant:
        """Create a tenant and its admin user atomically."""
        if data.status not in INITIAL_STATUSES:
            raise ValidationError(
                "status", "Initial status must be 'trialing' or 'active'"
            )

        tenant = await self._provision(
            name=data.name,
            subdomain=data.subdomain,
            contact_email=data.contact_email,
            contact_name=data.contact_name,
            phone=data.phone,
            admin_email=data.admin_email,
            admin_password=data.admin_password,
            plan=data.plan,
            status=data.status,
            custom_domain=data.custom_domain,
        )
        record_audit_event(
            "tenant.created",
            "tenant",
            tenant.id,
            actor=actor,
            subdomain=tenant.subdomain,
            status=tenant.status.value,
        )
        return tenant

    async def register_tenant(self, data: TenantRegister) -> tuple[Tenant, datetime]:
        """Self-service signup: starter plan, trialing status.

        Returns the tenant and the end of its trial period.
        """
        tenant = await self._provision(
            name=data.name,
            subdomain=data.subdomain,
            contact_email=data.contact_email,
            contact_name=data.contact_name,
            phone=data.phone,
            admin_email=data.admin_email,
            admin_password=data.admin_password,
            plan=TenantPlan.STARTER,
            status=TenantStatus.TRIALING,
        )
        trial_ends_at = datetime.now(timezone.utc) + timedelta(days=settings.TRIAL_PERIOD_DAYS)
        record_audit_event(
            "tenant.registered",
            "tenant",
            tenant.id,
            subdomain=tenant.subdomain,
            trial_ends_at=trial_ends_at.isoformat(),
        )
        return tenant, trial_ends_at

    def shop_url(self, tenant: Tenant) -> str:
        if tenant.custom_domain:
            return f"https://{tenant.custom_domain}"
        return f"https://{tenant.subdomain}.{settings.BASE_DOMAIN}"

    async def delete_tenant(self, tenant_id: UUID, actor=None) -> bool:
        """Remove a tenant and everything it owns.

        Each step commits on its own and is a no-op when already done, so a
        failed run is finished by calling this again. Returns True if the
        tenant record was removed by this call.
        """
        documents = await self.documents.delete_all(tenant_id)
        await self.db.commit()

        users = await self.users.delete_for_tenant(tenant_id)
        await self.db.commit()

        result = await self.db.execute(
            delete(Tenant).where(Tenant.id == tenant_id)
        )
        await self.db.commit()
        removed = bool(result.rowcount)

        await self.cache.invalidate_tenant(tenant_id)
        logger.info(
            f"Deleted tenant {tenant_id}: {documents} documents, {users} users, "
            f"record {'removed' if removed else 'already gone'}"
        )
        record_audit_event(
            "tenant.deleted",
            "tenant",
            tenant_id,
            actor=actor,
            documents=documents,
            users=users,
            record_removed=removed,
        )
        return removed

    async def ensure_super_admin(self, email: str, password: str) -> User:
        """Create the platform super admin if it does not exist yet."""
        existing = await self.users.get_by_email(email)
        if existing:
            return existing

        user = await self.users.create(
            email=email,
            password=password,
            name="Super Admin",
            role=UserRole.SUPER_ADMIN,
        )
        await self.db.commit()
        logger.info(f"Created super admin {user.email}")
        return user

    async def _provision(
        self,
        *,
        name: str,
        subdomain: str,
        contact_email: str,
        contact_name: str | None,
        phone: str | None,
        admin_email: str,
        admin_password: str,
        plan: TenantPlan,
        status: TenantStatus,
        custom_domain: str | None = None,
    ) -> Tenant:
        subdomain = validate_subdomain(subdomain)
        custom_domain = normalize_domain(custom_domain)
        admin_email = admin_email.strip().lower()

        if await self.tenants.get_by_subdomain(subdomain):
            raise ConflictError("Subdomain already in use")
        if custom_domain and await self.tenants.get_by_custom_domain(custom_domain):
            raise ConflictError("Custom domain already in use")
        if await self.users.get_by_email(admin_email):
            raise ConflictError("Admin email already registered")

        now = datetime.now(timezone.utc)
        tenant = Tenant(
            name=name,
            subdomain=subdomain,
            custom_domain=custom_domain,
            status=status,
            plan=plan,
            contact_email=str(contact_email).lower(),
            contact_name=contact_name,
            phone=phone,
            admin_email=admin_email,
            branding={},
            settings={},
        )
        if status == TenantStatus.ACTIVE:
            tenant.approved_at = now

        try:
            self.db.add(tenant)
            await self.db.flush()
            await self.users.create(
                email=admin_email,
                password=admin_password,
                name=contact_name or name,
                tenant_id=tenant.id,
                role=UserRole.TENANT_ADMIN,
            )
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise await self._conflict_for(subdomain, admin_email, custom_domain)
        except Exception as e:
            await self.db.rollback()
            logger.warning(f"Provisioning of {subdomain} rolled back: {e}")
            raise

        await self.db.refresh(tenant)
        logger.info(f"Provisioned tenant {tenant.subdomain} ({tenant.id})")
        return tenant

    async def _conflict_for(
        self,
        subdomain: str,
        admin_email: str,
        custom_domain: str | None,
    ) -> ConflictError:
        """Work out which unique field lost a concurrent race."""
        if await self.tenants.get_by_subdomain(subdomain):
            return ConflictError("Subdomain already in use")
        if await self.users.get_by_email(admin_email):
            return ConflictError("Admin email already registered")
        if custom_domain and await self.tenants.get_by_custom_domain(custom_domain):
            return ConflictError("Custom domain already in use")
        return ConflictError("Tenant already exists")
