"""Period budget endpoints for the API."""

from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.budget.repository import BudgetRepository
from components.budget import schemas
from restapi.endpoints.auth import get_current_user
from restapi.endpoints.category import ensure_expense_categories
from components.user.models import User

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
    responses={404: {"description": "Not found"}},
)


def _reference_day(
    today: Optional[date] = Query(None, description="Reference day for the projection, defaults to today")
) -> date:
    return today or date.today()


@router.get("/", response_model=List[schemas.Budget])
async def read_budgets(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get all budgets of the user, latest period first."""
    return await BudgetRepository(db).get_all(current_user.id)


@router.post("/", response_model=schemas.Budget, status_code=status.HTTP_201_CREATED)
async def create_budget(
    budget: schemas.BudgetCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Create a budget.

    Validations:
    - Amount cannot be negative
    - end_date cannot be before start_date
    - At least one category, each listed once
    - Categories must exist and be expense categories
    - alert_percentage between 1 and 100
    """
    await ensure_expense_categories(db, current_user.id, budget.category_ids)
    return await BudgetRepository(db).create(current_user.id, budget)


@router.get("/summaries", response_model=List[schemas.BudgetSummary])
async def read_budget_summaries(
    today: date = Depends(_reference_day),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get the spend summaries of the active budgets.

    Each summary carries the spend per category (the budget amount is split
    evenly between its categories), the remaining days, the daily budget
    left and the spend projected to the end of the period.
    """
    return await BudgetRepository(db).get_summaries(current_user.id, today)


@router.get("/alerts", response_model=List[schemas.BudgetAlert])
async def read_budget_alerts(
    today: date = Depends(_reference_day),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get the alerts of the active budgets.

    Alert types: THRESHOLD_REACHED, BUDGET_EXCEEDED, CATEGORY_EXCEEDED,
    PROJECTED_OVERSPENDING.
    """
    return await BudgetRepository(db).get_alerts(current_user.id, today)


@router.get("/{budget_id}", response_model=schemas.Budget)
async def read_budget(
    budget_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a specific budget by ID."""
    budget = await BudgetRepository(db).get_by_id(budget_id, current_user.id)
    if budget is None:
        raise HTTPException(status_code=404, detail="Budget not found")
    return budget


@router.get("/{budget_id}/summary", response_model=schemas.BudgetSummary)
async def read_budget_summary(
    budget_id: int,
    today: date = Depends(_reference_day),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the spend summary of a budget, active or not."""
    summary = await BudgetRepository(db).get_summary(budget_id, current_user.id, today)
    if summary is None:
        raise HTTPException(status_code=404, detail="Budget not found")
    return summary


@router.put("/{budget_id}", response_model=schemas.Budget)
async def update_budget(
    budget_id: int,
    budget: schemas.BudgetUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the given fields of a budget. category_ids replaces the covered categories."""
    repo = BudgetRepository(db)
    if not await repo.get_by_id(budget_id, current_user.id):
        raise HTTPException(status_code=404, detail="Budget not found")

    if budget.category_ids is not None:
        await ensure_expense_categories(db, current_user.id, budget.category_ids)
    try:
        return await repo.update(budget_id, current_user.id, budget)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


@router.patch("/{budget_id}/status", response_model=schemas.Budget)
async def update_budget_status(
    budget_id: int,
    body: schemas.BudgetStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Switch the status of a budget (ACTIVE, INACTIVE, EXCEEDED, COMPLETED)."""
    budget = await BudgetRepository(db).set_status(budget_id, current_user.id, body.status)
    if budget is None:
        raise HTTPException(status_code=404, detail="Budget not found")
    return budget


@router.delete("/{budget_id}")
async def delete_budget(
    budget_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a budget."""
    if not await BudgetRepository(db).delete(budget_id, current_user.id):
        raise HTTPException(status_code=404, detail="Budget not found")
    return {"message": "Budget deleted successfully"}
