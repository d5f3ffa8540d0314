"""
Due-list ledger.

Entities carry two cached totals that must always equal the sum of their
Pending transactions per direction. Totals are maintained by
``LedgerAggregator`` with in-database increments issued in the same
transaction as the transaction-row write, and can be rebuilt from scratch
with ``recalculate_entity_totals``.
"""
import logging
from datetime import date, datetime, time, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, or_, select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shopcore.core.exceptions import ConflictError, NotFoundError, ValidationError
from shopcore.models.ledger import (
    Entity,
    EntityType,
    Transaction,
    TransactionDirection,
    TransactionStatus,
)
from shopcore.schemas.ledger import EntityCreate, TransactionCreate

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")
MAX_STATUS_RETRIES = 5


def _total_column(direction: TransactionDirection):
    if direction == TransactionDirection.INCOME:
        return Entity.total_owed_to_me
    return Entity.total_i_owe_them


class LedgerAggregator:
    """Keeps entity totals in step with transaction lifecycle events.

    Only Pending transactions count toward a total.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def apply_delta(
        self,
        entity_id: UUID,
        direction: TransactionDirection,
        delta: Decimal,
    ) -> None:
        column = _total_column(direction)
        await self.db.execute(
            update(Entity)
            .where(Entity.id == entity_id)
            .values({column.key: column + delta})
            .execution_options(synchronize_session=False)
        )

    async def on_created(self, txn: Transaction) -> None:
        if txn.status == TransactionStatus.PENDING:
            await self.apply_delta(txn.entity_id, txn.direction, txn.amount)

    async def on_status_changed(
        self,
        txn: Transaction,
        old_status: TransactionStatus,
        new_status: TransactionStatus,
    ) -> None:
        if old_status == new_status:
            return
        if old_status == TransactionStatus.PENDING:
            await self.apply_delta(txn.entity_id, txn.direction, -txn.amount)
        elif new_status == TransactionStatus.PENDING:
            await self.apply_delta(txn.entity_id, txn.direction, txn.amount)

    async def on_deleted(self, txn: Transaction, status: TransactionStatus) -> None:
        if status == TransactionStatus.PENDING:
            await self.apply_delta(txn.entity_id, txn.direction, -txn.amount)

    async def pending_sums(self, entity_id: UUID) -> dict[TransactionDirection, Decimal]:
        result = await self.db.execute(
            select(Transaction.direction, func.sum(Transaction.amount))
            .where(
                Transaction.entity_id == entity_id,
                Transaction.status == TransactionStatus.PENDING,
            )
            .group_by(Transaction.direction)
        )
        sums = {direction: ZERO for direction in TransactionDirection}
        for direction, total in result.all():
            sums[direction] = Decimal(str(total or 0)).quantize(ZERO)
        return sums

    async def recalculate(self, entity_id: UUID) -> bool:
        """Overwrite the entity's totals from its Pending transactions.

        Returns True if the stored totals were wrong.
        """
        entity = (
            await self.db.execute(
                select(Entity)
                .where(Entity.id == entity_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if entity is None:
            raise NotFoundError("Entity")

        sums = await self.pending_sums(entity_id)
        owed_to_me = sums[TransactionDirection.INCOME]
        i_owe_them = sums[TransactionDirection.EXPENSE]

        drifted = (
            Decimal(str(entity.total_owed_to_me)).quantize(ZERO) != owed_to_me
            or Decimal(str(entity.total_i_owe_them)).quantize(ZERO) != i_owe_them
        )
        if drifted:
            logger.warning(
                f"Ledger totals drifted for entity {entity_id}: "
                f"owed_to_me {entity.total_owed_to_me} -> {owed_to_me}, "
                f"i_owe_them {entity.total_i_owe_them} -> {i_owe_them}"
            )
            entity.total_owed_to_me = owed_to_me
            entity.total_i_owe_them = i_owe_them
            await self.db.flush()
        return drifted


class LedgerService:
    """Service for ledger entities and transactions."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.aggregator = LedgerAggregator(db)

    # Entities

    async def create_entity(self, data: EntityCreate) -> Entity:
        phone = data.phone.strip()
        existing = await self.db.execute(select(Entity.id).where(Entity.phone == phone))
        if existing.scalar_one_or_none():
            raise ConflictError("An entity with this phone already exists")

        entity = Entity(
            name=data.name.strip(),
            phone=phone,
            type=data.type,
            total_owed_to_me=ZERO,
            total_i_owe_them=ZERO,
        )
        try:
            self.db.add(entity)
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("An entity with this phone already exists")
        await self.db.refresh(entity)
        return entity

    async def get_entity(self, entity_id: UUID) -> Entity | None:
        result = await self.db.execute(
            select(Entity)
            .where(Entity.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_entity_or_404(self, entity_id: UUID) -> Entity:
        entity = await self.get_entity(entity_id)
        if not entity:
            raise NotFoundError("Entity")
        return entity

    async def list_entities(
        self,
        entity_type: EntityType | None = None,
        search: str | None = None,
    ) -> list[Entity]:
        query = select(Entity).execution_options(populate_existing=True)
        if entity_type:
            query = query.where(Entity.type == entity_type)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(or_(Entity.name.ilike(pattern), Entity.phone.ilike(pattern)))
        result = await self.db.execute(query.order_by(Entity.name))
        return list(result.scalars().all())

    async def recalculate_entity_totals(self, entity_id: UUID) -> Entity:
        """Rebuild one entity's totals from its Pending transactions."""
        await self.aggregator.recalculate(entity_id)
        return await self.get_entity_or_404(entity_id)

    async def reconcile_all(self) -> int:
        """Recalculate every entity. Returns how many had drifted."""
        result = await self.db.execute(select(Entity.id))
        repaired = 0
        for entity_id in result.scalars().all():
            if await self.aggregator.recalculate(entity_id):
                repaired += 1
        return repaired

    # Transactions

    async def get_transaction(self, transaction_id: UUID) -> Transaction | None:
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_transaction_or_404(self, transaction_id: UUID) -> Transaction:
        txn = await self.get_transaction(transaction_id)
        if not txn:
            raise NotFoundError("Transaction")
        return txn

    async def list_transactions(
        self,
        entity_id: UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        status: TransactionStatus | None = None,
    ) -> list[Transaction]:
        """List transactions, newest first.

        ``date_to`` is inclusive through the end of that day.
        """
        query = select(Transaction)
        if entity_id:
            query = query.where(Transaction.entity_id == entity_id)
        if status:
            query = query.where(Transaction.status == status)
        if date_from:
            query = query.where(
                Transaction.transaction_date
                >= datetime.combine(date_from, time.min, tzinfo=timezone.utc)
            )
        if date_to:
            query = query.where(
                Transaction.transaction_date
                <= datetime.combine(date_to, time.max, tzinfo=timezone.utc)
            )
        query = query.order_by(Transaction.transaction_date.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_transaction(self, data: TransactionCreate) -> Transaction:
        """Record a Pending transaction and fold it into the entity's totals."""
        entity = await self.get_entity(data.entity_id)
        if not entity:
            raise ValidationError("entity_id", "Entity not found")

        txn = Transaction(
            entity_id=entity.id,
            entity_name=(data.entity_name or entity.name).strip(),
            amount=data.amount,
            direction=data.direction,
            transaction_date=data.transaction_date,
            due_date=data.due_date,
            notes=data.notes,
            status=TransactionStatus.PENDING,
        )
        self.db.add(txn)
        await self.db.flush()
        await self.aggregator.on_created(txn)
        await self.db.refresh(txn)

        logger.info(
            f"Recorded {txn.direction.value} of {txn.amount} for entity {entity.id}"
        )
        return txn

    async def update_transaction_status(
        self,
        transaction_id: UUID,
        new_status: TransactionStatus,
    ) -> Transaction:
        """Change a transaction's status and move its amount in or out of totals.

        The row update is conditional on the status that was read, so the
        delta is applied exactly once per real transition. Setting the
        current status again changes nothing.
        """
        for _ in range(MAX_STATUS_RETRIES):
            txn = await self.get_transaction_or_404(transaction_id)
            old_status = txn.status
            if old_status == new_status:
                return txn

            result = await self.db.execute(
                update(Transaction)
                .where(Transaction.id == transaction_id, Transaction.status == old_status)
                .values(status=new_status, updated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                await self.aggregator.on_status_changed(txn, old_status, new_status)
                logger.info(
                    f"Transaction {transaction_id} {old_status.value} -> {new_status.value}"
                )
                return await self.get_transaction_or_404(transaction_id)

        raise ConflictError("Transaction was modified concurrently, try again")

    async def delete_transaction(self, transaction_id: UUID) -> Transaction:
        """Delete a transaction, removing a Pending amount from its totals."""
        for _ in range(MAX_STATUS_RETRIES):
            txn = await self.get_transaction_or_404(transaction_id)
            status = txn.status

            result = await self.db.execute(
                delete(Transaction)
                .where(Transaction.id == transaction_id, Transaction.status == status)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                await self.aggregator.on_deleted(txn, status)
                self.db.expunge(txn)
                logger.info(f"Deleted transaction {transaction_id} ({status.value})")
                return txn

        raise ConflictError("Transaction was modified concurrently, try again")
