"""Repository for monthly plan operations."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import BinaryIO, Dict, List, Optional, Tuple

import pandas as pd
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from components.category.repository import CategoryRepository
from components.category.schemas import CategoryType
from components.plan import aggregator, schemas
from components.plan.models import CategoryBudget, MonthlyPlan
from components.transaction.repository import TransactionRepository

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("category_id", "planned_amount")


class PlanExistsError(Exception):
    """Raised when the user already has a plan for the month."""


class PlanRepository:
    """Repository for monthly plan operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    @staticmethod
    def _category_budget_rows(category_budgets: List[schemas.CategoryBudget]) -> List[CategoryBudget]:
        return [
            CategoryBudget(
                category_id=budget.category_id,
                planned_amount=budget.planned_amount,
                position=position,
            )
            for position, budget in enumerate(category_budgets)
        ]

    async def get_plans(self, user_id: int) -> List[MonthlyPlan]:
        """Get all plans of the user, newest month first."""
        result = await self.session.execute(
            select(MonthlyPlan)
            .where(MonthlyPlan.user_id == user_id)
            .order_by(MonthlyPlan.year.desc(), MonthlyPlan.month.desc())
        )
        return list(result.scalars().all())

    async def get_plan(self, user_id: int, month: int, year: int) -> Optional[MonthlyPlan]:
        """Get the user's plan for a month."""
        result = await self.session.execute(
            select(MonthlyPlan).where(
                MonthlyPlan.user_id == user_id,
                MonthlyPlan.month == month,
                MonthlyPlan.year == year
            )
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, plan_id: int, user_id: int) -> Optional[MonthlyPlan]:
        """Get a user's plan by ID."""
        result = await self.session.execute(
            select(MonthlyPlan).where(
                MonthlyPlan.id == plan_id,
                MonthlyPlan.user_id == user_id
            )
        )
        return result.scalar_one_or_none()

    async def _add(self, plan: schemas.MonthlyPlan) -> MonthlyPlan:
        """
        Persist a plan with its category budgets.

        Raises:
            PlanExistsError: If the user already has a plan for that month
        """
        db_plan = MonthlyPlan(
            user_id=plan.user_id,
            month=plan.month,
            year=plan.year,
            total_budget=plan.total_budget,
            created_from_previous=plan.created_from_previous,
            category_budgets=self._category_budget_rows(plan.category_budgets),
        )
        self.session.add(db_plan)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                "Plan for %02d/%d already exists (user %s)", plan.month, plan.year, plan.user_id
            )
            raise PlanExistsError(f"Plan already exists for {plan.month:02d}/{plan.year}") from e
        await self.session.refresh(db_plan)
        logger.info(
            "Created plan %s for user %s (%02d/%d, %d categories)",
            db_plan.id, plan.user_id, plan.month, plan.year, len(plan.category_budgets)
        )
        return db_plan

    async def create(self, user_id: int, plan: schemas.MonthlyPlanCreate) -> MonthlyPlan:
        """Create a plan for the month given in the payload."""
        return await self._add(
            schemas.MonthlyPlan(user_id=user_id, **plan.model_dump())
        )

    async def update(
        self,
        plan_id: int,
        user_id: int,
        plan: schemas.MonthlyPlanUpdate
    ) -> Optional[MonthlyPlan]:
        """
        Update total budget and category budgets of a plan.

        The category budget list is rebuilt from the payload rather than
        edited in place.
        """
        db_plan = await self.get_by_id(plan_id, user_id)
        if not db_plan:
            return None

        db_plan.category_budgets.clear()
        await self.session.flush()

        db_plan.total_budget = plan.total_budget
        db_plan.category_budgets.extend(self._category_budget_rows(plan.category_budgets))
        db_plan.updated_at = datetime.now()

        await self.session.commit()
        await self.session.refresh(db_plan)
        logger.info("Updated plan %s for user %s", plan_id, user_id)
        return db_plan

    async def copy_from_previous(self, user_id: int, month: int, year: int) -> Optional[MonthlyPlan]:
        """
        Create the plan of a month from the previous month's plan.

        Returns None when the previous month has no plan.
        """
        prev_month, prev_year = aggregator.previous_period(month, year)
        previous_plan = await self.get_plan(user_id, prev_month, prev_year)
        if not previous_plan:
            logger.warning(
                "No plan for %02d/%d to copy into %02d/%d (user %s)",
                prev_month, prev_year, month, year, user_id
            )
            return None

        draft = aggregator.copy_from_previous(
            schemas.MonthlyPlan.model_validate(previous_plan), month, year
        )
        return await self._add(draft)

    async def _summary_with_directory(
        self, user_id: int, month: int, year: int
    ) -> Tuple[Optional[schemas.PlanSummary], Dict]:
        directory = await CategoryRepository(self.session).get_directory(user_id)
        db_plan = await self.get_plan(user_id, month, year)
        if not db_plan:
            return None, directory

        transactions = await TransactionRepository(self.session).get_for_month(user_id, month, year)
        summary = aggregator.compute_summary(
            schemas.MonthlyPlan.model_validate(db_plan), transactions, directory
        )
        return summary, directory

    async def get_summary(self, user_id: int, month: int, year: int) -> Optional[schemas.PlanSummary]:
        """Get the spend summary of the user's plan for a month, None without a plan."""
        summary, _ = await self._summary_with_directory(user_id, month, year)
        return summary

    async def check_transaction(
        self,
        user_id: int,
        month: int,
        year: int,
        category_id: int,
        amount: Decimal
    ) -> Optional[schemas.PlanAlertBase]:
        """Advisory check of a prospective expense against the month's plan."""
        summary, directory = await self._summary_with_directory(user_id, month, year)
        alert = aggregator.check_transaction_alert(category_id, amount, summary, directory)
        if alert is not None:
            logger.info(
                "Budget advisory %s for user %s, category %s",
                alert.alert_type.value, user_id, category_id
            )
        return alert

    async def upload_category_budgets_from_csv(
        self,
        user_id: int,
        month: int,
        year: int,
        file_content: BinaryIO
    ) -> Tuple[bool, str, List[Dict]]:
        """
        Replace the category budgets of a month's plan from a CSV file.

        The file needs 'category_id' and 'planned_amount' columns. When the
        month has no plan yet, one is created with the sum of the planned
        amounts as its total budget.

        Returns:
            Tuple containing:
            - Success status (bool)
            - Message (str)
            - List of errors if any (List[Dict])
        """
        try:
            frame = pd.read_csv(file_content, dtype=str, skipinitialspace=True)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            logger.warning("Rejected plan CSV for user %s: %s", user_id, e)
            return False, f"Error processing file: {e}", []

        if not all(column in frame.columns for column in CSV_COLUMNS):
            return False, "CSV file must contain 'category_id' and 'planned_amount' columns", []
        if frame.empty:
            return False, "CSV file contains no rows", []

        category_types = await CategoryRepository(self.session).get_types(user_id)
        errors = []
        category_budgets = []
        seen = set()

        # Start at 2 to account for header row
        for row_num, row in enumerate(frame.to_dict("records"), start=2):
            raw_category, raw_amount = row["category_id"], row["planned_amount"]

            if pd.isna(raw_category):
                errors.append({"row": row_num, "message": "category_id cannot be empty"})
                continue
            try:
                category_id = int(raw_category)
            except ValueError:
                errors.append({"row": row_num, "message": f"Invalid category_id: {raw_category}"})
                continue
            if category_id not in category_types:
                errors.append({"row": row_num, "message": f"Category ID {category_id} does not exist"})
                continue
            if category_types[category_id] != CategoryType.EXPENSE:
                errors.append({"row": row_num, "message": f"Category ID {category_id} is not an expense category"})
                continue
            if category_id in seen:
                errors.append({"row": row_num, "message": f"Category ID {category_id} is listed more than once"})
                continue

            if pd.isna(raw_amount):
                errors.append({"row": row_num, "message": "planned_amount cannot be empty"})
                continue
            try:
                category_budget = schemas.CategoryBudget(
                    category_id=category_id, planned_amount=raw_amount.strip()
                )
            except ValidationError:
                errors.append({
                    "row": row_num,
                    "message": f"Invalid planned_amount value: {raw_amount}. Expected a non-negative amount"
                })
                continue

            seen.add(category_id)
            category_budgets.append(category_budget)

        if errors:
            logger.warning("Plan CSV for user %s had %d invalid rows", user_id, len(errors))
            return False, "Validation errors occurred", errors

        db_plan = await self.get_plan(user_id, month, year)
        if db_plan:
            await self.update(
                db_plan.id,
                user_id,
                schemas.MonthlyPlanUpdate(
                    total_budget=db_plan.total_budget,
                    category_budgets=category_budgets
                )
            )
        else:
            try:
                await self.create(
                    user_id,
                    schemas.MonthlyPlanCreate(
                        month=month,
                        year=year,
                        total_budget=sum((b.planned_amount for b in category_budgets), Decimal(0)),
                        category_budgets=category_budgets
                    )
                )
            except PlanExistsError as e:
                return False, str(e), []
        return True, "Category budgets uploaded successfully", []
