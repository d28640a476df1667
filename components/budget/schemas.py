"""Pydantic schemas for period budget data validation."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Optional
from pydantic import AfterValidator, BaseModel, Field, model_validator


class BudgetPeriod(str, Enum):
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"
    CUSTOM = "CUSTOM"


class BudgetStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    EXCEEDED = "EXCEEDED"
    COMPLETED = "COMPLETED"


class BudgetAlertType(str, Enum):
    THRESHOLD_REACHED = "THRESHOLD_REACHED"
    BUDGET_EXCEEDED = "BUDGET_EXCEEDED"
    CATEGORY_EXCEEDED = "CATEGORY_EXCEEDED"
    PROJECTED_OVERSPENDING = "PROJECTED_OVERSPENDING"


def _check_category_ids(value: List[int]) -> List[int]:
    if not value:
        raise ValueError("At least one category is required")
    if len(set(value)) != len(value):
        raise ValueError("A category can be listed only once")
    return value


CategoryIds = Annotated[List[int], AfterValidator(_check_category_ids)]


class BudgetBase(BaseModel):
    """Base budget schema."""
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: date
    end_date: date
    category_ids: CategoryIds
    alert_percentage: int = Field(80, ge=1, le=100)  # Usage % that raises THRESHOLD_REACHED
    color: Optional[str] = None
    icon: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self


class BudgetCreate(BudgetBase):
    """Schema for budget creation."""
    pass


class BudgetUpdate(BaseModel):
    """Schema for budget update. Only the given fields change; category_ids is replaced as a whole."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    period: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    category_ids: Optional[CategoryIds] = None
    alert_percentage: Optional[int] = Field(None, ge=1, le=100)
    is_active: Optional[bool] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class BudgetStatusUpdate(BaseModel):
    """Schema for switching the status of a budget."""
    status: BudgetStatus


class Budget(BudgetBase):
    """Schema for budget response."""
    id: int
    user_id: int
    status: BudgetStatus = BudgetStatus.ACTIVE
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BudgetSpending(BaseModel):
    """Spend of one category inside a budget."""
    budget_id: int
    category_id: int
    category_name: str
    budgeted_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    percentage_used: Decimal
    transaction_count: int
    last_transaction_date: Optional[date] = None


class BudgetSummary(BaseModel):
    """Spend rollup of a budget over its period, with the end-of-period projection."""
    budget: Budget
    total_budgeted: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    percentage_used: Decimal
    spending_by_category: List[BudgetSpending]
    days_remaining: int
    daily_budget_remaining: Decimal
    is_over_budget: bool
    projected_spending: Decimal


class BudgetAlert(BaseModel):
    budget_id: int
    budget_name: str
    alert_type: BudgetAlertType
    percentage: Decimal
    amount_over: Optional[Decimal] = None
    category_name: Optional[str] = None
    triggered_at: datetime
