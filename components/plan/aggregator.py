"""
Monthly budget aggregation and alerting.

Everything here is a pure function of its arguments: the plan, the already
loaded transactions and the category directory are handed in by the caller,
and fresh summary objects are returned on every call.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Tuple

from components.category.schemas import CategoryInfo
from components.plan import schemas
from components.transaction.schemas import EXPENSE_TYPES, TransactionType

UNKNOWN_CATEGORY_NAME = "Categoria desconhecida"
UNBUDGETED_CATEGORY_NAME = "Categoria"

ZERO = Decimal(0)
HUNDRED = Decimal(100)
WARNING_PERCENTAGE = Decimal(70)
DANGER_PERCENTAGE = Decimal(90)

CategoryDirectory = Mapping[int, CategoryInfo]


def as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def percentage_of(amount: Decimal, total: Decimal) -> Decimal:
    """Share of total as a percentage; 0 when total is not positive."""
    if total > 0:
        return amount / total * HUNDRED
    return ZERO


def budget_status(percentage: Decimal) -> schemas.BudgetStatus:
    """Map a usage percentage to its status. Exactly 100% is still DANGER."""
    if percentage > HUNDRED:
        return schemas.BudgetStatus.EXCEEDED
    if percentage >= DANGER_PERCENTAGE:
        return schemas.BudgetStatus.DANGER
    if percentage >= WARNING_PERCENTAGE:
        return schemas.BudgetStatus.WARNING
    return schemas.BudgetStatus.SAFE


def previous_period(month: int, year: int) -> Tuple[int, int]:
    """Month and year right before the given one."""
    if month == 1:
        return 12, year - 1
    return month - 1, year


def _counts_as_spend(transaction, month: int, year: int) -> bool:
    return (
        transaction.date.month == month
        and transaction.date.year == year
        and TransactionType(transaction.type) in EXPENSE_TYPES
    )


def _summarize_category(
    category_budget: schemas.CategoryBudget,
    spent_amount: Decimal,
    category_directory: CategoryDirectory,
) -> schemas.CategoryBudgetSummary:
    planned_amount = category_budget.planned_amount
    percentage_used = percentage_of(spent_amount, planned_amount)
    category = category_directory.get(category_budget.category_id)

    return schemas.CategoryBudgetSummary(
        category_id=category_budget.category_id,
        planned_amount=planned_amount,
        category_name=category.name if category else UNKNOWN_CATEGORY_NAME,
        category_icon=category.icon if category else None,
        category_color=category.color if category else None,
        spent_amount=spent_amount,
        percentage_used=percentage_used,
        status=budget_status(percentage_used),
        is_over_budget=spent_amount > planned_amount,
    )


def _alert_for(category: schemas.CategoryBudgetSummary) -> Optional[schemas.PlanAlertBase]:
    if category.status == schemas.BudgetStatus.EXCEEDED:
        alert_class = schemas.ExceededAlert
    elif category.status == schemas.BudgetStatus.DANGER:
        alert_class = schemas.ApproachingLimitAlert
    else:
        return None

    return alert_class(
        category_id=category.category_id,
        category_name=category.category_name,
        current_amount=category.spent_amount,
        planned_amount=category.planned_amount,
        percentage=category.percentage_used,
    )


def compute_summary(
    plan: Optional[schemas.MonthlyPlan],
    transactions: Iterable,
    category_directory: Optional[CategoryDirectory] = None,
) -> Optional[schemas.PlanSummary]:
    """
    Compute per-category and overall spend of a plan.

    Args:
        plan: The monthly plan, or None when the month has no plan
        transactions: Objects exposing category_id, amount, type and date
        category_directory: category_id -> display data lookup

    Returns:
        The plan summary, or None when there is no plan.
        Only EXPENSE and CREDIT_CARD_EXPENSE transactions dated within the
        plan's month count, and only budgeted categories reach the totals.
    """
    if plan is None:
        return None

    category_directory = category_directory or {}

    spent_by_category = {}
    for transaction in transactions:
        if not _counts_as_spend(transaction, plan.month, plan.year):
            continue
        spent_by_category[transaction.category_id] = (
            spent_by_category.get(transaction.category_id, ZERO) + as_decimal(transaction.amount)
        )

    categories_summary = [
        _summarize_category(
            category_budget,
            spent_by_category.get(category_budget.category_id, ZERO),
            category_directory,
        )
        for category_budget in plan.category_budgets
    ]

    total_budget = plan.total_budget
    total_spent = sum((category.spent_amount for category in categories_summary), ZERO)
    alerts = [alert for alert in map(_alert_for, categories_summary) if alert is not None]

    return schemas.PlanSummary(
        plan=plan.model_copy(deep=True),
        total_planned=total_budget,
        total_spent=total_spent,
        total_remaining=max(ZERO, total_budget - total_spent),
        percentage_used=percentage_of(total_spent, total_budget),
        categories_summary=categories_summary,
        alerts=alerts,
    )


def check_transaction_alert(
    category_id: int,
    amount,
    current_summary: Optional[schemas.PlanSummary],
    category_directory: Optional[CategoryDirectory] = None,
) -> Optional[schemas.PlanAlertBase]:
    """
    Advise on a prospective expense before it is recorded.

    Never blocks anything: returns None when there is no plan or when the
    expense keeps its category within budget, a NO_BUDGET alert when the
    category is not part of the plan, and an EXCEEDED alert carrying the
    projected totals otherwise.
    """
    if current_summary is None:
        return None

    amount = as_decimal(amount)
    category = next(
        (item for item in current_summary.categories_summary if item.category_id == category_id),
        None,
    )

    if category is None:
        info = (category_directory or {}).get(category_id)
        return schemas.NoBudgetAlert(
            category_id=category_id,
            category_name=info.name if info else UNBUDGETED_CATEGORY_NAME,
            current_amount=amount,
        )

    projected_total = category.spent_amount + amount
    if projected_total > category.planned_amount:
        return schemas.ExceededAlert(
            category_id=category_id,
            category_name=category.category_name,
            current_amount=projected_total,
            planned_amount=category.planned_amount,
            percentage=percentage_of(projected_total, category.planned_amount),
        )

    return None


def copy_from_previous(
    previous_plan: Optional[schemas.MonthlyPlan],
    target_month: int,
    target_year: int,
) -> Optional[schemas.MonthlyPlan]:
    """Draft a new plan for the target month with the previous plan's budgets."""
    if previous_plan is None:
        return None

    now = datetime.now()
    return schemas.MonthlyPlan(
        user_id=previous_plan.user_id,
        month=target_month,
        year=target_year,
        total_budget=previous_plan.total_budget,
        category_budgets=[budget.model_copy() for budget in previous_plan.category_budgets],
        created_from_previous=True,
        created_at=now,
        updated_at=now,
    )
