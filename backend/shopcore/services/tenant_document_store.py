"""
Generic tenant-scoped document store.

One JSON document per ``(tenant_id, key)``. Every feature (catalog, website
config, carousel, inventory thresholds, landing pages) keeps its data here
instead of in a bespoke table; the store never looks inside ``data``.

Write semantics:
- ``save`` is an unconditional upsert: the document is replaced wholesale and
  the last committed write wins. No merge, no append.
- ``save_if_version`` is the opt-in compare-and-swap variant for keys where
  clobbering is not acceptable.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.core.exceptions import ConflictError, ValidationError
from shopcore.models.tenant_document import TenantDocument

logger = logging.getLogger(__name__)

KEY_MAX_LENGTH = 100

UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def validate_key(key: str) -> str:
    """Keys are stored exactly as given; surrounding whitespace is rejected."""
    if not key or not key.strip():
        raise ValidationError("key", "Document key is required")
    if key != key.strip():
        raise ValidationError("key", "Document key must not start or end with whitespace")
    if len(key) > KEY_MAX_LENGTH:
        raise ValidationError("key", f"Document key must be at most {KEY_MAX_LENGTH} characters")
    return key


class TenantDocumentStore:
    """Per-tenant key -> JSON document store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _insert(self):
        # Unsupported dialects are refused when the engine is created.
        return UPSERT_INSERTS[self.db.get_bind().dialect.name](TenantDocument)

    async def get_record(self, tenant_id: UUID, key: str) -> TenantDocument | None:
        key = validate_key(key)
        result = await self.db.execute(
            select(TenantDocument)
            .where(TenantDocument.tenant_id == tenant_id, TenantDocument.key == key)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get(self, tenant_id: UUID, key: str, default: Any = None) -> Any:
        """Return the stored document, or ``default`` when absent."""
        record = await self.get_record(tenant_id, key)
        if record is None:
            return default
        return record.data

    async def get_many(self, tenant_id: UUID, keys: Iterable[str]) -> dict[str, Any]:
        """Return ``{key: data}`` for the requested keys that exist."""
        keys = list(dict.fromkeys(validate_key(key) for key in keys))
        if not keys:
            return {}
        result = await self.db.execute(
            select(TenantDocument.key, TenantDocument.data).where(
                TenantDocument.tenant_id == tenant_id,
                TenantDocument.key.in_(keys),
            )
        )
        return {key: data for key, data in result.all()}

    async def list_keys(self, tenant_id: UUID) -> list[str]:
        result = await self.db.execute(
            select(TenantDocument.key)
            .where(TenantDocument.tenant_id == tenant_id)
            .order_by(TenantDocument.key)
        )
        return list(result.scalars().all())

    async def save(self, tenant_id: UUID, key: str, data: Any) -> TenantDocument:
        """Create or wholesale-replace the document (last write wins)."""
        key = validate_key(key)
        now = datetime.now(timezone.utc)

        stmt = self._insert().values(
            id=uuid.uuid4(),
            tenant_id=tenant_id,
            key=key,
            data=data,
            version=1,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[TenantDocument.tenant_id, TenantDocument.key],
            set_={
                "data": stmt.excluded["data"],
                "version": TenantDocument.version + 1,
                "updated_at": now,
            },
        )
        await self.db.execute(stmt)

        record = await self.get_record(tenant_id, key)
        logger.debug(f"Saved document {key} for tenant {tenant_id} (v{record.version})")
        return record

    async def save_if_version(
        self,
        tenant_id: UUID,
        key: str,
        data: Any,
        expected_version: int,
    ) -> TenantDocument:
        """Compare-and-swap save.

        ``expected_version`` 0 means the document must not exist yet;
        otherwise it must match the stored version. Raises ConflictError on
        mismatch and leaves the stored document untouched.
        """
        key = validate_key(key)
        if expected_version < 0:
            raise ValidationError("version", "Expected version must not be negative")
        now = datetime.now(timezone.utc)

        if expected_version == 0:
            stmt = self._insert().values(
                id=uuid.uuid4(),
                tenant_id=tenant_id,
                key=key,
                data=data,
                version=1,
                created_at=now,
                updated_at=now,
            ).on_conflict_do_nothing(
                index_elements=[TenantDocument.tenant_id, TenantDocument.key],
            )
        else:
            stmt = (
                update(TenantDocument)
                .where(
                    TenantDocument.tenant_id == tenant_id,
                    TenantDocument.key == key,
                    TenantDocument.version == expected_version,
                )
                .values(
                    data=data,
                    version=TenantDocument.version + 1,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )

        result = await self.db.execute(stmt)
        if result.rowcount != 1:
            current = await self.get_record(tenant_id, key)
            current_version = current.version if current else 0
            raise ConflictError(
                f"Document '{key}' is at version {current_version}, "
                f"expected {expected_version}"
            )
        return await self.get_record(tenant_id, key)

    async def delete(self, tenant_id: UUID, key: str) -> bool:
        """Remove one document. Deleting an absent key is not an error."""
        key = validate_key(key)
        result = await self.db.execute(
            delete(TenantDocument)
            .where(TenantDocument.tenant_id == tenant_id, TenantDocument.key == key)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    async def delete_all(self, tenant_id: UUID) -> int:
        """Remove every document of the tenant. Safe to repeat."""
        result = await self.db.execute(
            delete(TenantDocument)
            .where(TenantDocument.tenant_id == tenant_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0
