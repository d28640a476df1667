"""Repository for period budget operations."""

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from components.budget import aggregator, schemas
from components.budget.models import Budget, BudgetCategory
from components.category.repository import CategoryRepository
from components.transaction.repository import TransactionRepository

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = ("description", "color", "icon")


class BudgetRepository:
    """Repository for period budget operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    @staticmethod
    def _category_rows(category_ids: List[int]) -> List[BudgetCategory]:
        return [
            BudgetCategory(category_id=category_id, position=position)
            for position, category_id in enumerate(category_ids)
        ]

    async def get_all(self, user_id: int, active_only: bool = False) -> List[Budget]:
        """Get the user's budgets, latest period first."""
        query = select(Budget).where(Budget.user_id == user_id)
        if active_only:
            query = query.where(Budget.is_active.is_(True))
        query = query.order_by(Budget.start_date.desc(), Budget.id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, budget_id: int, user_id: int) -> Optional[Budget]:
        """Get a user's budget by ID."""
        result = await self.session.execute(
            select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: int, budget: schemas.BudgetCreate) -> Budget:
        """Create a budget for the user."""
        db_budget = Budget(
            user_id=user_id,
            name=budget.name,
            description=budget.description,
            amount=budget.amount,
            period=budget.period.value,
            start_date=budget.start_date,
            end_date=budget.end_date,
            status=schemas.BudgetStatus.ACTIVE.value,
            alert_percentage=budget.alert_percentage,
            is_active=True,
            color=budget.color,
            icon=budget.icon,
            categories=self._category_rows(budget.category_ids),
        )
        self.session.add(db_budget)
        await self.session.commit()
        await self.session.refresh(db_budget)
        logger.info("Created budget %s for user %s", db_budget.id, user_id)
        return db_budget

    async def update(
        self,
        budget_id: int,
        user_id: int,
        budget: schemas.BudgetUpdate
    ) -> Optional[Budget]:
        """
        Update the given fields of a budget.

        Raises:
            ValueError: If the resulting period ends before it starts
        """
        db_budget = await self.get_by_id(budget_id, user_id)
        if not db_budget:
            return None

        changes = {
            field: value
            for field, value in budget.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        category_ids = changes.pop("category_ids", None)
        if "period" in changes:
            changes["period"] = changes["period"].value

        start_date = changes.get("start_date", db_budget.start_date)
        end_date = changes.get("end_date", db_budget.end_date)
        if end_date < start_date:
            raise ValueError("end_date cannot be before start_date")

        for field, value in changes.items():
            setattr(db_budget, field, value)

        if category_ids is not None:
            db_budget.categories.clear()
            await self.session.flush()
            db_budget.categories.extend(self._category_rows(category_ids))

        db_budget.updated_at = datetime.now()
        await self.session.commit()
        await self.session.refresh(db_budget)
        logger.info("Updated budget %s for user %s", budget_id, user_id)
        return db_budget

    async def set_status(
        self,
        budget_id: int,
        user_id: int,
        status: schemas.BudgetStatus
    ) -> Optional[Budget]:
        """Switch the status of a budget."""
        db_budget = await self.get_by_id(budget_id, user_id)
        if not db_budget:
            return None

        db_budget.status = status.value
        db_budget.updated_at = datetime.now()
        await self.session.commit()
        await self.session.refresh(db_budget)
        logger.info("Budget %s of user %s is now %s", budget_id, user_id, status.value)
        return db_budget

    async def delete(self, budget_id: int, user_id: int) -> bool:
        """Delete a user's budget by ID."""
        db_budget = await self.get_by_id(budget_id, user_id)
        if not db_budget:
            return False

        await self.session.delete(db_budget)
        await self.session.commit()
        logger.info("Deleted budget %s for user %s", budget_id, user_id)
        return True

    async def get_summaries(self, user_id: int, today: date) -> List[schemas.BudgetSummary]:
        """Spend summaries of the user's active budgets as of the given day."""
        budgets = await self.get_all(user_id, active_only=True)
        if not budgets:
            return []

        directory = await CategoryRepository(self.session).get_directory(user_id)
        transactions = await TransactionRepository(self.session).get_between(
            user_id,
            min(budget.start_date for budget in budgets),
            max(budget.end_date for budget in budgets),
        )
        return [
            aggregator.compute_budget_summary(
                schemas.Budget.model_validate(budget), transactions, today, directory
            )
            for budget in budgets
        ]

    async def get_summary(self, budget_id: int, user_id: int, today: date) -> Optional[schemas.BudgetSummary]:
        """Spend summary of one budget as of the given day."""
        db_budget = await self.get_by_id(budget_id, user_id)
        if not db_budget:
            return None

        directory = await CategoryRepository(self.session).get_directory(user_id)
        transactions = await TransactionRepository(self.session).get_between(
            user_id, db_budget.start_date, db_budget.end_date
        )
        return aggregator.compute_budget_summary(
            schemas.Budget.model_validate(db_budget), transactions, today, directory
        )

    async def get_alerts(self, user_id: int, today: date) -> List[schemas.BudgetAlert]:
        """Alerts of the user's active budgets as of the given day."""
        alerts = aggregator.collect_alerts(await self.get_summaries(user_id, today), datetime.now())
        if alerts:
            logger.info("User %s has %d budget alerts", user_id, len(alerts))
        return alerts
