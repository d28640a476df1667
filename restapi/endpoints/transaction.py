"""Transaction endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.category.repository import CategoryRepository
from components.plan.repository import PlanRepository
from components.plan.schemas import TransactionWithAlert
from components.transaction.repository import TransactionRepository
from components.transaction import schemas
from restapi.endpoints.auth import get_current_user
from components.user.models import User

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Transaction])
async def read_transactions(
    month: Optional[int] = Query(None, ge=1, le=12, description="Filter by month (needs year)"),
    year: Optional[int] = Query(None, ge=1900, description="Filter by year"),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    type: Optional[schemas.TransactionType] = Query(None, description="Filter by type"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=500, description="Number of records to return"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the user's transactions, newest first."""
    if month and not year:
        raise HTTPException(status_code=400, detail="Filtering by month requires a year")

    return await TransactionRepository(db).get_all(
        current_user.id,
        month=month,
        year=year,
        category_id=category_id,
        transaction_type=type,
        skip=skip,
        limit=limit
    )


@router.get("/{transaction_id}", response_model=schemas.Transaction)
async def read_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a specific transaction by ID."""
    transaction = await TransactionRepository(db).get_by_id(transaction_id, current_user.id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.post("/", response_model=TransactionWithAlert, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction: schemas.TransactionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Record a transaction.

    Expenses with a category are checked against the plan of their month
    first. The resulting alert is only advisory: the transaction is saved
    either way and the alert is returned next to it.
    """
    if transaction.category_id is not None:
        category = await CategoryRepository(db).get_by_id(transaction.category_id, current_user.id)
        if category is None:
            raise HTTPException(status_code=404, detail="Category not found")

    alert = None
    if transaction.type in schemas.EXPENSE_TYPES and transaction.category_id is not None:
        alert = await PlanRepository(db).check_transaction(
            current_user.id,
            transaction.date.month,
            transaction.date.year,
            transaction.category_id,
            transaction.amount
        )

    created = await TransactionRepository(db).create(current_user.id, transaction)
    return TransactionWithAlert(
        transaction=schemas.Transaction.model_validate(created),
        alert=alert
    )


@router.delete("/{transaction_id}")
async def delete_transaction(
    transaction_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a transaction."""
    if not await TransactionRepository(db).delete(transaction_id, current_user.id):
        raise HTTPException(status_code=404, detail="Transaction not found")
    return {"message": "Transaction deleted successfully"}
