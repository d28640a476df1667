"""Category endpoints for the API."""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.category.repository import CategoryRepository
from components.category import schemas
from restapi.endpoints.auth import get_current_user
from components.user.models import User

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.Category])
async def read_categories(
    type: Optional[schemas.CategoryType] = Query(None, description="Only categories of this type"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the default categories plus the user's own ones."""
    return await CategoryRepository(db).get_all(current_user.id, type)


@router.get("/{category_id}", response_model=schemas.Category)
async def read_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a specific category by ID."""
    category = await CategoryRepository(db).get_by_id(category_id, current_user.id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("/", response_model=schemas.Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    category: schemas.CategoryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a custom category."""
    return await CategoryRepository(db).create(current_user.id, category)


async def ensure_expense_categories(db: AsyncSession, user_id: int, category_ids: List[int]) -> None:
    """Reject ids that are not expense categories visible to the user."""
    types = await CategoryRepository(db).get_types(user_id)
    unknown = [category_id for category_id in category_ids if category_id not in types]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown category IDs: {unknown}"
        )
    not_expense = [
        category_id for category_id in category_ids
        if types[category_id] != schemas.CategoryType.EXPENSE
    ]
    if not_expense:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Only expense categories can be budgeted: {not_expense}"
        )
