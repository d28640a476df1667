"""Pydantic schemas for category data validation."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class CategoryType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class CategoryInfo(BaseModel):
    """Display data of a category, as used by budget summaries."""
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None


class CategoryBase(CategoryInfo):
    name: str = Field(..., min_length=1, max_length=100)
    type: CategoryType = CategoryType.EXPENSE


class CategoryCreate(CategoryBase):
    """Schema for category creation."""
    pass


class Category(CategoryBase):
    """Schema for category response."""
    id: int
    user_id: Optional[int] = None
    is_default: bool = False

    class Config:
        from_attributes = True
