"""Pydantic schemas for monthly plan data validation."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator

from components.transaction.schemas import Transaction


class BudgetStatus(str, Enum):
    SAFE = "SAFE"
    WARNING = "WARNING"
    DANGER = "DANGER"
    EXCEEDED = "EXCEEDED"


class AlertType(str, Enum):
    NO_BUDGET = "NO_BUDGET"
    EXCEEDED = "EXCEEDED"
    APPROACHING_LIMIT = "APPROACHING_LIMIT"


class CategoryBudget(BaseModel):
    """Planned ceiling for one expense category within a plan."""
    category_id: int
    planned_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)

    class Config:
        from_attributes = True


class MonthlyPlanBase(BaseModel):
    """Base monthly plan schema."""
    total_budget: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    category_budgets: List[CategoryBudget] = Field(default_factory=list)

    @field_validator("category_budgets")
    @classmethod
    def check_unique_categories(cls, value: List[CategoryBudget]) -> List[CategoryBudget]:
        seen = set()
        for budget in value:
            if budget.category_id in seen:
                raise ValueError(f"Category {budget.category_id} is budgeted more than once")
            seen.add(budget.category_id)
        return value


class MonthlyPlanCreate(MonthlyPlanBase):
    """Schema for plan creation."""
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1900, le=9999)


class MonthlyPlanUpdate(MonthlyPlanBase):
    """Schema for plan update. The category budget list is replaced as a whole."""
    pass


class MonthlyPlan(MonthlyPlanBase):
    """Schema for plan response."""
    id: Optional[int] = None
    user_id: int
    month: int = Field(..., ge=1, le=12)
    year: int
    created_from_previous: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CategoryBudgetSummary(CategoryBudget):
    """Spend tracking of one budgeted category."""
    category_name: str
    category_icon: Optional[str] = None
    category_color: Optional[str] = None
    spent_amount: Decimal
    percentage_used: Decimal
    status: BudgetStatus
    is_over_budget: bool


class PlanAlertBase(BaseModel):
    category_id: int
    category_name: str
    current_amount: Decimal
    planned_amount: Decimal
    percentage: Decimal


class NoBudgetAlert(PlanAlertBase):
    """The category of a prospective expense has no budget in the plan."""
    alert_type: Literal[AlertType.NO_BUDGET] = AlertType.NO_BUDGET
    planned_amount: Decimal = Decimal(0)
    percentage: Decimal = Decimal(0)


class ExceededAlert(PlanAlertBase):
    """Spend is (or would be) above the planned amount."""
    alert_type: Literal[AlertType.EXCEEDED] = AlertType.EXCEEDED


class ApproachingLimitAlert(PlanAlertBase):
    """Spend reached the danger zone of the planned amount."""
    alert_type: Literal[AlertType.APPROACHING_LIMIT] = AlertType.APPROACHING_LIMIT


PlanAlert = Annotated[
    Union[NoBudgetAlert, ExceededAlert, ApproachingLimitAlert],
    Field(discriminator="alert_type"),
]


class PlanSummary(BaseModel):
    """Spend rollup of a monthly plan."""
    plan: MonthlyPlan
    total_planned: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    percentage_used: Decimal
    categories_summary: List[CategoryBudgetSummary]
    alerts: List[PlanAlert]


class TransactionCheck(BaseModel):
    """Prospective expense to check against the plan."""
    category_id: int
    amount: Decimal = Field(..., ge=0)


class TransactionWithAlert(BaseModel):
    """Recorded transaction together with the advisory computed before saving it."""
    transaction: Transaction
    alert: Optional[PlanAlert] = None


class PlanUploadError(BaseModel):
    """Schema for plan upload error."""
    row: int
    message: str


class PlanUploadResponse(BaseModel):
    """Schema for plan upload response."""
    success: bool
    message: str
    errors: Optional[List[PlanUploadError]] = None
