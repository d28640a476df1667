"""Pydantic schemas for transaction data validation."""

from datetime import date as date_type, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    CREDIT_CARD_EXPENSE = "CREDIT_CARD_EXPENSE"
    TRANSFER = "TRANSFER"


EXPENSE_TYPES = frozenset({TransactionType.EXPENSE, TransactionType.CREDIT_CARD_EXPENSE})


class TransactionBase(BaseModel):
    """Base transaction schema."""
    description: str = Field(..., min_length=1, max_length=255)
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    type: TransactionType
    date: date_type
    category_id: Optional[int] = None
    notes: Optional[str] = None
    is_paid: bool = True


class TransactionCreate(TransactionBase):
    """Schema for transaction creation."""
    pass


class Transaction(TransactionBase):
    """Schema for transaction response."""
    id: int
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
