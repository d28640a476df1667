"""Monthly plan endpoints for the API."""

import io
from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Path, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.plan.repository import PlanExistsError, PlanRepository
from components.plan import schemas
from restapi.endpoints.auth import get_current_user
from restapi.endpoints.category import ensure_expense_categories
from components.user.models import User

router = APIRouter(
    prefix="/plans",
    tags=["plans"],
    responses={404: {"description": "Not found"}},
)

YearPath = Annotated[int, Path(ge=1900, le=9999, description="Year of the plan")]
MonthPath = Annotated[int, Path(ge=1, le=12, description="Month of the plan (1-12)")]


async def _check_categories(
    db: AsyncSession,
    user_id: int,
    category_budgets: List[schemas.CategoryBudget]
) -> None:
    await ensure_expense_categories(db, user_id, [b.category_id for b in category_budgets])


def _plan_exists(e: PlanExistsError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/", response_model=List[schemas.MonthlyPlan])
async def read_plans(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get all plans of the user, newest month first."""
    return await PlanRepository(db).get_plans(current_user.id)


@router.post("/", response_model=schemas.MonthlyPlan, status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan: schemas.MonthlyPlanCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Create the plan of a month.

    Validations:
    - Month must be between 1 and 12
    - Total budget and planned amounts cannot be negative
    - A category can be budgeted only once
    - Categories must exist and be expense categories
    - Only one plan per month
    """
    repo = PlanRepository(db)
    if await repo.get_plan(current_user.id, plan.month, plan.year):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Plan already exists for {plan.month:02d}/{plan.year}"
        )
    await _check_categories(db, current_user.id, plan.category_budgets)
    try:
        return await repo.create(current_user.id, plan)
    except PlanExistsError as e:
        raise _plan_exists(e) from e


@router.put("/{plan_id}", response_model=schemas.MonthlyPlan)
async def update_plan(
    plan_id: int,
    plan: schemas.MonthlyPlanUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update the total budget and replace the category budgets of a plan."""
    repo = PlanRepository(db)
    if not await repo.get_by_id(plan_id, current_user.id):
        raise HTTPException(status_code=404, detail="Plan not found")

    await _check_categories(db, current_user.id, plan.category_budgets)
    return await repo.update(plan_id, current_user.id, plan)


@router.get("/{year}/{month}", response_model=Optional[schemas.MonthlyPlan])
async def read_plan(
    year: YearPath,
    month: MonthPath,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the plan of a month, or null when the month has no plan."""
    return await PlanRepository(db).get_plan(current_user.id, month, year)


@router.post(
    "/{year}/{month}/copy-previous",
    response_model=schemas.MonthlyPlan,
    status_code=status.HTTP_201_CREATED
)
async def copy_previous_plan(
    year: YearPath,
    month: MonthPath,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create the plan of a month as a copy of the previous month's plan."""
    repo = PlanRepository(db)
    if await repo.get_plan(current_user.id, month, year):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Plan already exists for {month:02d}/{year}"
        )

    try:
        plan = await repo.copy_from_previous(current_user.id, month, year)
    except PlanExistsError as e:
        raise _plan_exists(e) from e
    if not plan:
        raise HTTPException(status_code=404, detail="No plan found for the previous month")
    return plan


@router.get("/{year}/{month}/summary", response_model=Optional[schemas.PlanSummary])
async def read_plan_summary(
    year: YearPath,
    month: MonthPath,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Get the spend summary of a month's plan.

    Returns per category:
    - Planned and spent amounts
    - % of the planned amount used
    - Status (SAFE, WARNING, DANGER, EXCEEDED)

    Plus overall totals and alerts for exceeded and nearly exhausted
    categories. Returns null when the month has no plan.
    """
    return await PlanRepository(db).get_summary(current_user.id, month, year)


@router.post("/{year}/{month}/check-transaction", response_model=Optional[schemas.PlanAlert])
async def check_transaction(
    check: schemas.TransactionCheck,
    year: YearPath,
    month: MonthPath,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Check a prospective expense against the month's plan.

    Returns NO_BUDGET when the category is not budgeted, EXCEEDED with the
    projected totals when the expense would overrun the category, and null
    otherwise or when the month has no plan.
    """
    return await PlanRepository(db).check_transaction(
        current_user.id, month, year, check.category_id, check.amount
    )


@router.post("/{year}/{month}/upload", response_model=schemas.PlanUploadResponse)
async def upload_category_budgets(
    year: YearPath,
    month: MonthPath,
    file: UploadFile = File(...),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Upload the category budgets of a month from a CSV file.

    The CSV file must have the following columns:
    - category_id: The ID of the category
    - planned_amount: The planned amount (cannot be empty, can be 0)

    The uploaded list replaces the plan's category budgets. A month without
    a plan gets one whose total budget is the sum of the planned amounts.
    Nothing is saved when any row is invalid.
    """
    if not file.filename or not file.filename.endswith('.csv'):
        return schemas.PlanUploadResponse(
            success=False,
            message="Invalid file format. Only CSV files (.csv) are supported."
        )

    file_content = await file.read()
    success, message, errors = await PlanRepository(db).upload_category_budgets_from_csv(
        current_user.id, month, year, io.BytesIO(file_content)
    )

    if not success:
        return schemas.PlanUploadResponse(
            success=False,
            message=message,
            errors=[schemas.PlanUploadError(**error) for error in errors]
        )

    return schemas.PlanUploadResponse(success=True, message=message)
