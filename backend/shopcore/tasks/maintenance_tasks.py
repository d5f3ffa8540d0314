"""
Maintenance tasks.

Both tasks re-derive state that an interrupted request may have left
inconsistent, and are safe to run at any time.
"""
import asyncio
import logging
from uuid import UUID

from celery import shared_task

from shopcore.database import async_session_maker
from shopcore.services.ledger_service import LedgerService
from shopcore.services.tenant_provisioner import TenantProvisioner

logger = logging.getLogger(__name__)

__all__ = ["reconcile_ledger_totals", "finish_tenant_deletion"]


def run_async(coro):
    """Helper to run async code in sync context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@shared_task(bind=True)
def reconcile_ledger_totals(self):
    """Recompute every entity's totals from its Pending transactions."""
    return run_async(_reconcile_ledger_totals())


async def _reconcile_ledger_totals() -> dict:
    async with async_session_maker() as db:
        repaired = await LedgerService(db).reconcile_all()
        await db.commit()

    if repaired:
        logger.warning(f"Ledger reconciliation repaired {repaired} entities")
    else:
        logger.info("Ledger reconciliation found no drift")
    return {"repaired": repaired}


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def finish_tenant_deletion(self, tenant_id: str):
    """Re-run the deletion cascade for a tenant whose delete was interrupted."""
    try:
        return run_async(_finish_tenant_deletion(UUID(tenant_id)))
    except Exception as exc:
        logger.error(f"Tenant deletion for {tenant_id} failed: {exc}")
        raise self.retry(exc=exc)


async def _finish_tenant_deletion(tenant_id: UUID) -> dict:
    async with async_session_maker() as db:
        removed = await TenantProvisioner(db).delete_tenant(tenant_id, actor="system")
    return {"tenant_id": str(tenant_id), "record_removed": removed}
