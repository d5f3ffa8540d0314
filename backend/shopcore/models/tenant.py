"""
Tenant model: one isolated merchant storefront.
"""
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.orm import relationship

from shopcore.models.base import Base, BaseModel, JSONType, enum_values


class TenantStatus(str, PyEnum):
    TRIALING = "trialing"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


class TenantPlan(str, PyEnum):
    STARTER = "starter"
    GROWTH = "growth"
    ENTERPRISE = "enterprise"


# Allowed status transitions; archived is terminal.
STATUS_TRANSITIONS: dict[TenantStatus, frozenset[TenantStatus]] = {
    TenantStatus.TRIALING: frozenset(
        {TenantStatus.ACTIVE, TenantStatus.SUSPENDED, TenantStatus.ARCHIVED}
    ),
    TenantStatus.ACTIVE: frozenset({TenantStatus.SUSPENDED, TenantStatus.ARCHIVED}),
    TenantStatus.SUSPENDED: frozenset({TenantStatus.ACTIVE, TenantStatus.ARCHIVED}),
    TenantStatus.ARCHIVED: frozenset(),
}


class Tenant(Base, BaseModel):
    """Tenant model representing a merchant store."""

    __tablename__ = "tenants"

    name = Column(String(255), nullable=False)
    # Always stored lowercase; immutable after creation.
    subdomain = Column(String(30), unique=True, nullable=False, index=True)
    custom_domain = Column(String(255), unique=True, nullable=True, index=True)
    status = Column(
        Enum(TenantStatus, name="tenant_status", values_callable=enum_values),
        default=TenantStatus.TRIALING,
        nullable=False,
    )
    plan = Column(
        Enum(TenantPlan, name="tenant_plan", values_callable=enum_values),
        default=TenantPlan.STARTER,
        nullable=False,
    )
    contact_email = Column(String(255), nullable=False)
    contact_name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    admin_email = Column(String(255), nullable=False)
    branding = Column(JSONType, default=dict)
    settings = Column(JSONType, default=dict)

    # Status transition bookkeeping
    approved_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(255), nullable=True)
    approval_reason = Column(String(1000), nullable=True)
    suspended_at = Column(DateTime(timezone=True), nullable=True)
    suspended_by = Column(String(255), nullable=True)
    suspension_reason = Column(String(1000), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by = Column(String(255), nullable=True)
    rejection_reason = Column(String(1000), nullable=True)

    # Relationships
    users = relationship("User", back_populates="tenant", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Tenant {self.name} ({self.subdomain})>"

    def can_transition_to(self, new_status: TenantStatus) -> bool:
        return new_status in STATUS_TRANSITIONS[self.status]
