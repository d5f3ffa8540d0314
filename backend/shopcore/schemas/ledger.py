"""
Ledger schemas.
"""
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import Field

from shopcore.models.ledger import EntityType, TransactionDirection, TransactionStatus
from shopcore.schemas.common import BaseSchema, IDSchema, TimestampSchema


class EntityCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=50)
    type: EntityType


class EntityResponse(IDSchema, TimestampSchema):
    name: str
    phone: str
    type: EntityType
    total_owed_to_me: Decimal
    total_i_owe_them: Decimal


class TransactionCreate(BaseSchema):
    entity_id: UUID
    entity_name: str | None = Field(default=None, max_length=100)
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    direction: TransactionDirection
    transaction_date: datetime
    due_date: datetime | None = None
    notes: str | None = Field(default=None, max_length=500)


class TransactionStatusUpdate(BaseSchema):
    status: TransactionStatus


class TransactionResponse(IDSchema, TimestampSchema):
    entity_id: UUID
    entity_name: str
    amount: Decimal
    direction: TransactionDirection
    transaction_date: datetime
    due_date: datetime | None = None
    notes: str | None = None
    status: TransactionStatus
