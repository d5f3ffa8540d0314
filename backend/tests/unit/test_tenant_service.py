"""
Unit tests for tenant record operations and the status state machine.
"""
import uuid

import pytest
from sqlalchemy import select, update

from shopcore.core.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from shopcore.models.tenant import STATUS_TRANSITIONS, Tenant, TenantStatus
from shopcore.schemas.tenant import TenantUpdate
from shopcore.services.tenant_document_store import TenantDocumentStore
from shopcore.services.tenant_service import TenantService


class TestStatusTransitions:
    """Test the status state machine table."""

    def test_archived_is_terminal(self):
        assert STATUS_TRANSITIONS[TenantStatus.ARCHIVED] == frozenset()

    def test_suspended_can_be_reactivated(self):
        assert TenantStatus.ACTIVE in STATUS_TRANSITIONS[TenantStatus.SUSPENDED]

    def test_nothing_returns_to_trialing(self):
        for allowed in STATUS_TRANSITIONS.values():
            assert TenantStatus.TRIALING not in allowed


class TestUpdateStatus:

    @pytest.mark.asyncio
    async def test_approval_stamps_fields(self, db_session, tenant, memory_cache):
        tenant.status = TenantStatus.TRIALING
        await db_session.commit()
        service = TenantService(db_session, memory_cache)

        updated = await service.update_status(
            tenant.id, TenantStatus.ACTIVE, actor="root@platform.example.com"
        )

        assert updated.status == TenantStatus.ACTIVE
        assert updated.approved_at is not None
        assert updated.approved_by == "root@platform.example.com"

    @pytest.mark.asyncio
    async def test_approval_records_reason(self, db_session, tenant, memory_cache):
        tenant.status = TenantStatus.SUSPENDED
        await db_session.commit()
        service = TenantService(db_session, memory_cache)

        updated = await service.update_status(
            tenant.id, TenantStatus.ACTIVE, reason="Invoice settled", actor="ops"
        )

        assert updated.approval_reason == "Invoice settled"

    @pytest.mark.asyncio
    async def test_suspension_records_reason(self, db_session, tenant, memory_cache):
        service = TenantService(db_session, memory_cache)

        updated = await service.update_status(
            tenant.id, TenantStatus.SUSPENDED, reason="Unpaid invoice", actor="ops"
        )

        assert updated.status == TenantStatus.SUSPENDED
        assert updated.suspension_reason == "Unpaid invoice"
        assert updated.suspended_by == "ops"
        assert updated.suspended_at is not None

    @pytest.mark.asyncio
    async def test_archive_records_rejection(self, db_session, tenant, memory_cache):
        service = TenantService(db_session, memory_cache)

        updated = await service.update_status(
            tenant.id, TenantStatus.ARCHIVED, reason="Fraud"
        )

        assert updated.rejection_reason == "Fraud"
        assert updated.rejected_at is not None

    @pytest.mark.asyncio
    async def test_archived_cannot_be_revived(self, db_session, tenant, memory_cache):
        service = TenantService(db_session, memory_cache)
        await service.update_status(tenant.id, TenantStatus.ARCHIVED)

        with pytest.raises(StateError) as exc_info:
            await service.update_status(tenant.id, TenantStatus.ACTIVE)

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_trial_suspended_then_reactivated(self, db_session, tenant, memory_cache):
        tenant.status = TenantStatus.TRIALING
        await db_session.commit()
        service = TenantService(db_session, memory_cache)

        await service.update_status(tenant.id, TenantStatus.SUSPENDED)
        updated = await service.update_status(tenant.id, TenantStatus.ACTIVE)

        assert updated.status == TenantStatus.ACTIVE
        assert updated.suspended_at is not None
        assert updated.approved_at is not None

    @pytest.mark.asyncio
    async def test_archive_by_another_writer_is_not_undone(
        self, db_session, tenant, memory_cache
    ):
        # Another admin archives the tenant after this session loaded it as active
        await db_session.execute(
            update(Tenant)
            .where(Tenant.id == tenant.id)
            .values(status=TenantStatus.ARCHIVED)
            .execution_options(synchronize_session=False)
        )
        assert tenant.status == TenantStatus.ACTIVE
        service = TenantService(db_session, memory_cache)

        with pytest.raises(StateError) as exc_info:
            await service.update_status(tenant.id, TenantStatus.SUSPENDED)

        assert "archived -> suspended" in exc_info.value.detail
        current = await db_session.execute(
            select(Tenant.status, Tenant.suspended_at).where(Tenant.id == tenant.id)
        )
        assert current.one() == (TenantStatus.ARCHIVED, None)

    @pytest.mark.asyncio
    async def test_transition_rechecked_after_concurrent_change(
        self, db_session, tenant, memory_cache
    ):
        # Another admin suspends first; suspended -> archived is still allowed
        await db_session.execute(
            update(Tenant)
            .where(Tenant.id == tenant.id)
            .values(status=TenantStatus.SUSPENDED)
            .execution_options(synchronize_session=False)
        )
        service = TenantService(db_session, memory_cache)

        updated = await service.update_status(tenant.id, TenantStatus.ARCHIVED, reason="Fraud")

        assert updated.status == TenantStatus.ARCHIVED
        assert updated.rejection_reason == "Fraud"

    @pytest.mark.asyncio
    async def test_same_status_is_rejected(self, db_session, tenant, memory_cache):
        service = TenantService(db_session, memory_cache)

        with pytest.raises(StateError):
            await service.update_status(tenant.id, TenantStatus.ACTIVE)

    @pytest.mark.asyncio
    async def test_status_change_invalidates_cache(self, db_session, tenant, memory_cache):
        await memory_cache.set("sub:acme", str(tenant.id))
        service = TenantService(db_session, memory_cache)

        await service.update_status(tenant.id, TenantStatus.SUSPENDED)

        assert await memory_cache.get("sub:acme") is None

    @pytest.mark.asyncio
    async def test_unknown_tenant(self, db_session, memory_cache):
        service = TenantService(db_session, memory_cache)

        with pytest.raises(NotFoundError):
            await service.update_status(uuid.uuid4(), TenantStatus.ACTIVE)


class TestUpdate:

    @pytest.mark.asyncio
    async def test_updates_fields_and_normalizes_domain(self, db_session, tenant, memory_cache):
        service = TenantService(db_session, memory_cache)

        updated = await service.update(
            tenant.id,
            TenantUpdate(name="Acme Outlet", custom_domain="HTTPS://Shop.Acme.com/"),
        )

        assert updated.name == "Acme Outlet"
        assert updated.custom_domain == "shop.acme.com"
        assert updated.subdomain == "acme"

    @pytest.mark.asyncio
    async def test_custom_domain_must_be_unique(
        self, db_session, tenant, other_tenant, memory_cache
    ):
        service = TenantService(db_session, memory_cache)
        await service.update(other_tenant.id, TenantUpdate(custom_domain="shared.com"))

        with pytest.raises(ConflictError):
            await service.update(tenant.id, TenantUpdate(custom_domain="Shared.com"))

    @pytest.mark.asyncio
    async def test_empty_custom_domain_clears(self, db_session, tenant, memory_cache):
        service = TenantService(db_session, memory_cache)
        await service.update(tenant.id, TenantUpdate(custom_domain="shop.acme.com"))

        updated = await service.update(tenant.id, TenantUpdate(custom_domain=""))

        assert updated.custom_domain is None

    @pytest.mark.asyncio
    async def test_invalid_custom_domain(self, db_session, tenant, memory_cache):
        service = TenantService(db_session, memory_cache)

        with pytest.raises(ValidationError):
            await service.update(tenant.id, TenantUpdate(custom_domain="not a domain"))

    @pytest.mark.asyncio
    async def test_domain_change_invalidates_cache(self, db_session, tenant, memory_cache):
        await memory_cache.set("sub:acme", str(tenant.id))
        service = TenantService(db_session, memory_cache)

        await service.update(tenant.id, TenantUpdate(custom_domain="shop.acme.com"))

        assert memory_cache.memory_entries == 0


class TestQueries:

    @pytest.mark.asyncio
    async def test_list_tenants_paginates(self, db_session, tenant, other_tenant, memory_cache):
        service = TenantService(db_session, memory_cache)

        items, total = await service.list_tenants(page=1, per_page=1)

        assert total == 2
        assert len(items) == 1

    @pytest.mark.asyncio
    async def test_list_tenants_filters_status(self, db_session, tenant, other_tenant, memory_cache):
        service = TenantService(db_session, memory_cache)
        await service.update_status(other_tenant.id, TenantStatus.SUSPENDED)

        items, total = await service.list_tenants(status=TenantStatus.SUSPENDED)

        assert total == 1
        assert items[0].subdomain == "globex"

    @pytest.mark.asyncio
    async def test_get_by_subdomain_is_case_insensitive(self, db_session, tenant, memory_cache):
        service = TenantService(db_session, memory_cache)

        assert (await service.get_by_subdomain("ACME")).id == tenant.id

    @pytest.mark.asyncio
    async def test_stats(self, db_session, tenant, tenant_admin, staff_user, memory_cache):
        store = TenantDocumentStore(db_session)
        await store.save(tenant.id, "products", [{"id": 1}, {"id": 2}, {"id": 3}])
        await store.save(tenant.id, "theme_config", {"color": "red"})
        service = TenantService(db_session, memory_cache)

        stats = await service.get_stats(tenant.id)

        assert stats.document_count == 2
        assert stats.user_count == 2
        assert stats.product_count == 3
        assert stats.last_data_update is not None

    @pytest.mark.asyncio
    async def test_list_users(self, db_session, tenant, tenant_admin, super_admin, memory_cache):
        service = TenantService(db_session, memory_cache)

        users = await service.list_users(tenant.id)

        assert [u.email for u in users] == ["admin@acme.example.com"]
