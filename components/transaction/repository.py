"""Repository for transaction operations."""

import logging
from datetime import date
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.transaction.models import Transaction
from components.transaction import schemas

logger = logging.getLogger(__name__)


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """Return the first day of the month and the first day of the next one."""
    month_start = date(year, month, 1)
    month_end = date(year, month + 1, 1) if month < 12 else date(year + 1, 1, 1)
    return month_start, month_end


class TransactionRepository:
    """Repository for transaction operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def create(self, user_id: int, transaction: schemas.TransactionCreate) -> Transaction:
        """Create a new transaction for the user."""
        db_transaction = Transaction(
            user_id=user_id,
            description=transaction.description,
            amount=transaction.amount,
            type=transaction.type.value,
            date=transaction.date,
            category_id=transaction.category_id,
            notes=transaction.notes,
            is_paid=transaction.is_paid,
        )
        self.session.add(db_transaction)
        await self.session.commit()
        await self.session.refresh(db_transaction)
        logger.info(
            "Created %s transaction %s for user %s",
            db_transaction.type, db_transaction.id, user_id
        )
        return db_transaction

    async def get_by_id(self, transaction_id: int, user_id: int) -> Optional[Transaction]:
        """Get a user's transaction by ID."""
        result = await self.session.execute(
            select(Transaction).where(
                Transaction.id == transaction_id,
                Transaction.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def get_all(
        self,
        user_id: int,
        month: Optional[int] = None,
        year: Optional[int] = None,
        category_id: Optional[int] = None,
        transaction_type: Optional[schemas.TransactionType] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Transaction]:
        """Get the user's transactions with optional filtering, newest first."""
        query = select(Transaction).where(Transaction.user_id == user_id)

        if month and year:
            month_start, month_end = month_bounds(month, year)
            query = query.where(Transaction.date >= month_start, Transaction.date < month_end)
        elif year:
            query = query.where(
                Transaction.date >= date(year, 1, 1),
                Transaction.date < date(year + 1, 1, 1)
            )
        if category_id is not None:
            query = query.where(Transaction.category_id == category_id)
        if transaction_type:
            query = query.where(Transaction.type == transaction_type.value)

        query = query.order_by(Transaction.date.desc(), Transaction.id.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_for_month(self, user_id: int, month: int, year: int) -> List[Transaction]:
        """Get every transaction of the user dated within the given month."""
        month_start, month_end = month_bounds(month, year)
        result = await self.session.execute(
            select(Transaction)
            .where(
                Transaction.user_id == user_id,
                Transaction.date >= month_start,
                Transaction.date < month_end
            )
            .order_by(Transaction.date)
        )
        return list(result.scalars().all())

    async def get_between(self, user_id: int, start_date: date, end_date: date) -> List[Transaction]:
        """Get every transaction of the user dated within [start_date, end_date]."""
        result = await self.session.execute(
            select(Transaction)
            .where(
                Transaction.user_id == user_id,
                Transaction.date >= start_date,
                Transaction.date <= end_date
            )
            .order_by(Transaction.date)
        )
        return list(result.scalars().all())

    async def delete(self, transaction_id: int, user_id: int) -> bool:
        """Delete a user's transaction by ID."""
        db_transaction = await self.get_by_id(transaction_id, user_id)
        if not db_transaction:
            return False

        await self.session.delete(db_transaction)
        await self.session.commit()
        logger.info("Deleted transaction %s for user %s", transaction_id, user_id)
        return True
