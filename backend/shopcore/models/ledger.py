"""
Due-list ledger: entities and the transactions that feed their running totals.
"""
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Numeric, String, Uuid
from sqlalchemy.orm import relationship

from shopcore.models.base import Base, BaseModel, enum_values


class EntityType(str, PyEnum):
    CUSTOMER = "Customer"
    SUPPLIER = "Supplier"
    EMPLOYEE = "Employee"


class TransactionDirection(str, PyEnum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class TransactionStatus(str, PyEnum):
    PENDING = "Pending"
    PAID = "Paid"
    CANCELLED = "Cancelled"


class Entity(Base, BaseModel):
    """Counterparty with cached totals over its Pending transactions.

    ``total_owed_to_me`` and ``total_i_owe_them`` are a materialized view:
    always derivable from the transaction set, never authoritative.
    """

    __tablename__ = "ledger_entities"

    name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=False, unique=True, index=True)
    type = Column(
        Enum(EntityType, name="ledger_entity_type", values_callable=enum_values),
        nullable=False,
    )
    total_owed_to_me = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    total_i_owe_them = Column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    transactions = relationship("Transaction", back_populates="entity", passive_deletes=True)

    __table_args__ = (
        Index("ix_ledger_entities_type_name", "type", "name"),
    )

    def __repr__(self) -> str:
        return f"<Entity {self.name} ({self.type.value})>"


class Transaction(Base, BaseModel):
    """A single receivable (INCOME) or payable (EXPENSE)."""

    __tablename__ = "ledger_transactions"

    entity_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("ledger_entities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    entity_name = Column(String(100), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    direction = Column(
        Enum(TransactionDirection, name="ledger_direction", values_callable=enum_values),
        nullable=False,
    )
    transaction_date = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)
    notes = Column(String(500), nullable=True)
    status = Column(
        Enum(TransactionStatus, name="ledger_status", values_callable=enum_values),
        default=TransactionStatus.PENDING,
        nullable=False,
    )

    entity = relationship("Entity", back_populates="transactions")

    __table_args__ = (
        Index("ix_ledger_transactions_status_date", "status", "transaction_date"),
    )

    def __repr__(self) -> str:
        return f"<Transaction {self.direction.value} {self.amount} ({self.status.value})>"
