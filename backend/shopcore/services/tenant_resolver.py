"""
Tenant resolution: map a subdomain, custom domain, host header or id to a
Tenant.

Resolution is a pure read and never applies the reserved-subdomain rule.
"""
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.config import settings
from shopcore.core.exceptions import NotFoundError, TenantArchivedError, TenantSuspendedError
from shopcore.models.tenant import Tenant, TenantStatus
from shopcore.services.resolution_cache import ResolutionCache, get_resolution_cache

logger = logging.getLogger(__name__)


def classify_identifier(identifier: str) -> tuple[str, str]:
    """Return ``(kind, value)`` where kind is ``id``, ``domain`` or ``sub``."""
    value = identifier.strip().lower()
    try:
        return "id", str(UUID(value))
    except ValueError:
        pass
    if "." in value:
        return "domain", value.rstrip(".")
    return "sub", value


class TenantResolver:
    """Resolve inbound identifiers to tenants, with an optional cache."""

    def __init__(
        self,
        db: AsyncSession,
        cache: ResolutionCache | None = None,
        base_domain: str | None = None,
    ):
        self.db = db
        self.cache = cache or get_resolution_cache()
        self.base_domain = (base_domain or settings.BASE_DOMAIN).lower()

    async def find(self, identifier: str) -> Tenant | None:
        """Resolve an identifier, returning None when nothing matches."""
        kind, value = classify_identifier(identifier)
        lookup = f"{kind}:{value}"

        cached_id = await self.cache.get(lookup)
        if cached_id is not None:
            tenant = await self.db.get(Tenant, UUID(cached_id))
            if tenant is not None and self._matches(tenant, kind, value):
                return tenant
            # Stale mapping (domain moved or tenant deleted)
            await self.cache.discard(lookup)

        tenant = await self._load(kind, value)
        if tenant is not None:
            await self.cache.set(lookup, str(tenant.id))
        return tenant

    async def resolve(self, identifier: str) -> Tenant:
        """Admin-facing resolution: succeeds for any status."""
        tenant = await self.find(identifier)
        if tenant is None:
            raise NotFoundError("Tenant")
        return tenant

    async def resolve_for_storefront(self, identifier: str) -> Tenant:
        """Storefront resolution: archived and suspended stores are refused."""
        tenant = await self.resolve(identifier)
        ensure_servable(tenant)
        return tenant

    async def resolve_host(self, host: str, storefront: bool = True) -> Tenant:
        """Resolve a Host header value.

        Hosts under the platform domain route by their first label; any other
        host is treated as a custom domain (with or without ``www.``).
        """
        hostname = host.strip().lower().split(":", 1)[0].rstrip(".")
        suffix = f".{self.base_domain}"

        if hostname.endswith(suffix):
            label = hostname[: -len(suffix)].split(".")[0]
            if not label:
                raise NotFoundError("Tenant")
            tenant = await self.find(label)
        elif hostname == self.base_domain or not hostname:
            raise NotFoundError("Tenant")
        else:
            tenant = await self.find(hostname)
            if tenant is None and hostname.startswith("www."):
                tenant = await self.find(hostname[4:])

        if tenant is None:
            raise NotFoundError("Tenant")
        if storefront:
            ensure_servable(tenant)
        return tenant

    async def _load(self, kind: str, value: str) -> Tenant | None:
        if kind == "id":
            query = select(Tenant).where(Tenant.id == UUID(value))
        elif kind == "domain":
            query = select(Tenant).where(Tenant.custom_domain == value)
        else:
            query = select(Tenant).where(Tenant.subdomain == value)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    def _matches(tenant: Tenant, kind: str, value: str) -> bool:
        if kind == "id":
            return str(tenant.id) == value
        if kind == "domain":
            return tenant.custom_domain == value
        return tenant.subdomain == value


def ensure_servable(tenant: Tenant) -> None:
    """Raise if the storefront for this tenant must not be served."""
    if tenant.status == TenantStatus.ARCHIVED:
        raise TenantArchivedError(tenant.subdomain)
    if tenant.status == TenantStatus.SUSPENDED:
        raise TenantSuspendedError(tenant.subdomain)
