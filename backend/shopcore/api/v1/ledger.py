"""
Due-list ledger endpoints.
"""
from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.core.deps import LedgerReader, LedgerWriter, get_db
from shopcore.models.ledger import EntityType, TransactionStatus
from shopcore.schemas.ledger import (
    EntityCreate,
    EntityResponse,
    TransactionCreate,
    TransactionResponse,
    TransactionStatusUpdate,
)
from shopcore.services.ledger_service import LedgerService

router = APIRouter(tags=["Ledger"])


@router.post("/entities", response_model=EntityResponse, status_code=status.HTTP_201_CREATED)
async def create_entity(
    data: EntityCreate,
    _: LedgerWriter,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    entity = await LedgerService(db).create_entity(data)
    return EntityResponse.model_validate(entity)


@router.get("/entities", response_model=list[EntityResponse])
async def list_entities(
    _: LedgerReader,
    db: Annotated[AsyncSession, Depends(get_db)],
    type: EntityType | None = None,
    search: str | None = Query(default=None, max_length=100),
):
    """List entities, optionally filtered by type or name/phone search."""
    entities = await LedgerService(db).list_entities(type, search)
    return [EntityResponse.model_validate(e) for e in entities]


@router.get("/entities/{entity_id}", response_model=EntityResponse)
async def get_entity(
    entity_id: UUID,
    _: LedgerReader,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    entity = await LedgerService(db).get_entity_or_404(entity_id)
    return EntityResponse.model_validate(entity)


@router.post("/entities/{entity_id}/recalculate", response_model=EntityResponse)
async def recalculate_entity(
    entity_id: UUID,
    _: LedgerWriter,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Rebuild an entity's totals from its Pending transactions."""
    entity = await LedgerService(db).recalculate_entity_totals(entity_id)
    return EntityResponse.model_validate(entity)


@router.post(
    "/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    data: TransactionCreate,
    _: LedgerWriter,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    txn = await LedgerService(db).create_transaction(data)
    return TransactionResponse.model_validate(txn)


@router.get("/transactions", response_model=list[TransactionResponse])
async def list_transactions(
    _: LedgerReader,
    db: Annotated[AsyncSession, Depends(get_db)],
    entity_id: UUID | None = None,
    status: TransactionStatus | None = None,
    date_from: date | None = Query(default=None, alias="from"),
    date_to: date | None = Query(default=None, alias="to"),
):
    """List transactions, newest first. ``to`` includes the whole day."""
    txns = await LedgerService(db).list_transactions(entity_id, date_from, date_to, status)
    return [TransactionResponse.model_validate(t) for t in txns]


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: UUID,
    _: LedgerReader,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    txn = await LedgerService(db).get_transaction_or_404(transaction_id)
    return TransactionResponse.model_validate(txn)


@router.patch("/transactions/{transaction_id}/status", response_model=TransactionResponse)
async def update_transaction_status(
    transaction_id: UUID,
    data: TransactionStatusUpdate,
    _: LedgerWriter,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Mark a transaction Paid, Cancelled or back to Pending."""
    txn = await LedgerService(db).update_transaction_status(transaction_id, data.status)
    return TransactionResponse.model_validate(txn)


@router.delete("/transactions/{transaction_id}", response_model=TransactionResponse)
async def delete_transaction(
    transaction_id: UUID,
    _: LedgerWriter,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    txn = await LedgerService(db).delete_transaction(transaction_id)
    return TransactionResponse.model_validate(txn)
