"""
Generic per-tenant document record.
"""
from sqlalchemy import Column, Integer, String, UniqueConstraint

from shopcore.models.base import Base, JSONType, TenantBaseModel


class TenantDocument(Base, TenantBaseModel):
    """One JSON document per (tenant, key).

    ``key`` is an open namespace ("products", "website_config", ...). The
    shape of ``data`` belongs to the feature that owns the key.
    """

    __tablename__ = "tenant_documents"

    key = Column(String(100), nullable=False)
    data = Column(JSONType, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("tenant_id", "key", name="uq_tenant_documents_tenant_key"),
    )

    def __repr__(self) -> str:
        return f"<TenantDocument tenant={self.tenant_id} key={self.key} v{self.version}>"
