"""
Tenant document endpoints.

``{tenant}`` accepts a tenant id or subdomain. Reads are public so
storefronts can load their data; writes need the ``tenant_data:write``
capability on that tenant.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.core.audit import record_audit_event
from shopcore.core.deps import TenantDataWriter, ensure_can_manage_tenant, get_db
from shopcore.core.exceptions import ValidationError
from shopcore.schemas.common import MessageResponse
from shopcore.schemas.tenant_data import (
    BootstrapResponse,
    DocumentKeysResponse,
    DocumentResponse,
    DocumentWrite,
)
from shopcore.services.tenant_document_store import TenantDocumentStore
from shopcore.services.tenant_resolver import TenantResolver

router = APIRouter(prefix="/tenant-data", tags=["Tenant Data"])

BOOTSTRAP_KEYS = ("products", "theme_config", "website_config")


def parse_if_match(value: str | None) -> int | None:
    """Read an expected document version from an ``If-Match`` header."""
    if value is None:
        return None
    raw = value.strip()
    if raw.startswith("W/"):
        raw = raw[2:]
    raw = raw.strip('"')
    try:
        version = int(raw)
    except ValueError:
        raise ValidationError("If-Match", "If-Match must be a document version number")
    if version < 0:
        raise ValidationError("If-Match", "If-Match must not be negative")
    return version


@router.get("/{tenant}", response_model=DocumentKeysResponse)
async def list_document_keys(
    tenant: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List the keys stored for a tenant."""
    record = await TenantResolver(db).resolve(tenant)
    keys = await TenantDocumentStore(db).list_keys(record.id)
    return DocumentKeysResponse(keys=keys)


@router.get("/{tenant}/bootstrap", response_model=BootstrapResponse)
async def bootstrap(
    tenant: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    keys: str | None = Query(default=None, description="Comma-separated document keys"),
):
    """Fetch several storefront documents in one request."""
    record = await TenantResolver(db).resolve_for_storefront(tenant)
    requested = [k.strip() for k in keys.split(",") if k.strip()] if keys else list(BOOTSTRAP_KEYS)
    data = await TenantDocumentStore(db).get_many(record.id, requested)
    return BootstrapResponse(
        tenant_id=str(record.id),
        data={key: data.get(key) for key in requested},
    )


@router.get("/{tenant}/{key}", response_model=DocumentResponse)
async def get_document(
    tenant: str,
    key: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Read one document. A missing key yields null data at version 0."""
    record = await TenantResolver(db).resolve(tenant)
    document = await TenantDocumentStore(db).get_record(record.id, key)
    if document is None:
        return DocumentResponse(key=key)
    return DocumentResponse(
        key=document.key,
        data=document.data,
        version=document.version,
        updated_at=document.updated_at,
    )


@router.put("/{tenant}/{key}", response_model=DocumentResponse)
async def save_document(
    tenant: str,
    key: str,
    body: DocumentWrite,
    current_user: TenantDataWriter,
    db: Annotated[AsyncSession, Depends(get_db)],
    if_match: Annotated[str | None, Header()] = None,
):
    """Replace a document wholesale.

    Without ``If-Match`` the last write wins. With it the save only applies
    if the stored version matches (``0`` means the key must not exist yet).
    """
    record = await TenantResolver(db).resolve(tenant)
    ensure_can_manage_tenant(current_user, record.id)

    store = TenantDocumentStore(db)
    expected_version = parse_if_match(if_match)
    if expected_version is None:
        document = await store.save(record.id, key, body.data)
    else:
        document = await store.save_if_version(record.id, key, body.data, expected_version)

    record_audit_event(
        "tenant_data.saved",
        "tenant_document",
        record.id,
        actor=current_user.email,
        key=document.key,
        version=document.version,
    )
    return DocumentResponse(
        key=document.key,
        data=document.data,
        version=document.version,
        updated_at=document.updated_at,
    )


@router.delete("/{tenant}/{key}", response_model=MessageResponse, status_code=status.HTTP_200_OK)
async def delete_document(
    tenant: str,
    key: str,
    current_user: TenantDataWriter,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete one document. Deleting an absent key succeeds."""
    record = await TenantResolver(db).resolve(tenant)
    ensure_can_manage_tenant(current_user, record.id)

    removed = await TenantDocumentStore(db).delete(record.id, key)
    if removed:
        record_audit_event(
            "tenant_data.deleted",
            "tenant_document",
            record.id,
            actor=current_user.email,
            key=key,
        )
    return MessageResponse(message="Document deleted" if removed else "Document not found")
