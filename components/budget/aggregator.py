"""
Period budget aggregation, spend projection and alerting.

A budget is one spending ceiling shared by a set of categories over a date
range. The ceiling is split evenly between its categories for the
per-category breakdown. Like the monthly plan aggregator, nothing here
touches the database or the clock: the reference day and the alert
timestamp are passed in.
"""

from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional

from components.budget import schemas
from components.category.schemas import CategoryInfo
from components.plan.aggregator import (
    UNKNOWN_CATEGORY_NAME, ZERO, HUNDRED, as_decimal, percentage_of
)
from components.transaction.schemas import EXPENSE_TYPES, TransactionType


def _counts_toward(transaction, budget: schemas.Budget) -> bool:
    return (
        TransactionType(transaction.type) in EXPENSE_TYPES
        and budget.start_date <= transaction.date <= budget.end_date
        and transaction.category_id in budget.category_ids
    )


def _category_spending(
    budget: schemas.Budget,
    category_id: int,
    transactions: List,
    category_directory: Mapping[int, CategoryInfo],
) -> schemas.BudgetSpending:
    budgeted_amount = budget.amount / len(budget.category_ids)
    spent_amount = sum((as_decimal(t.amount) for t in transactions), ZERO)
    category = category_directory.get(category_id)

    return schemas.BudgetSpending(
        budget_id=budget.id,
        category_id=category_id,
        category_name=category.name if category else UNKNOWN_CATEGORY_NAME,
        budgeted_amount=budgeted_amount,
        spent_amount=spent_amount,
        remaining_amount=max(ZERO, budgeted_amount - spent_amount),
        percentage_used=percentage_of(spent_amount, budgeted_amount),
        transaction_count=len(transactions),
        last_transaction_date=max((t.date for t in transactions), default=None),
    )


def compute_budget_summary(
    budget: schemas.Budget,
    transactions: Iterable,
    today: date,
    category_directory: Optional[Mapping[int, CategoryInfo]] = None,
) -> schemas.BudgetSummary:
    """
    Compute the spend of a budget over its period.

    Args:
        budget: The budget
        transactions: Objects exposing category_id, amount, type and date
        today: Reference day for the remaining days and the projection
        category_directory: category_id -> display data lookup

    Returns:
        The budget summary. Only EXPENSE and CREDIT_CARD_EXPENSE
        transactions of the budget's categories dated within
        [start_date, end_date] count. The projection extends the daily
        average spend so far over the whole period.
    """
    category_directory = category_directory or {}
    counted = [t for t in transactions if _counts_toward(t, budget)]

    spending_by_category = [
        _category_spending(
            budget,
            category_id,
            [t for t in counted if t.category_id == category_id],
            category_directory,
        )
        for category_id in budget.category_ids
    ]

    total_spent = sum((as_decimal(t.amount) for t in counted), ZERO)
    total_remaining = max(ZERO, budget.amount - total_spent)

    days_remaining = max(0, (budget.end_date - today).days)
    days_passed = (today - budget.start_date).days
    total_days = (budget.end_date - budget.start_date).days
    daily_average = total_spent / days_passed if days_passed > 0 else ZERO

    return schemas.BudgetSummary(
        budget=budget.model_copy(deep=True),
        total_budgeted=budget.amount,
        total_spent=total_spent,
        total_remaining=total_remaining,
        percentage_used=percentage_of(total_spent, budget.amount),
        spending_by_category=spending_by_category,
        days_remaining=days_remaining,
        daily_budget_remaining=total_remaining / days_remaining if days_remaining > 0 else ZERO,
        is_over_budget=total_spent > budget.amount,
        projected_spending=daily_average * total_days,
    )


def budget_alerts(summary: schemas.BudgetSummary, triggered_at: datetime) -> List[schemas.BudgetAlert]:
    """
    Alerts raised by one budget summary, in this order:

    - THRESHOLD_REACHED when usage is at or above the budget's
      alert_percentage but below 100%
    - BUDGET_EXCEEDED when the total spend is above the budget amount
    - CATEGORY_EXCEEDED for every category above its share
    - PROJECTED_OVERSPENDING when the projection is above the budget amount
      and the budget is not exceeded yet
    """
    budget = summary.budget
    percentage = summary.percentage_used

    def alert(alert_type, percentage, **extra):
        return schemas.BudgetAlert(
            budget_id=budget.id,
            budget_name=budget.name,
            alert_type=alert_type,
            percentage=percentage,
            triggered_at=triggered_at,
            **extra
        )

    alerts = []
    if budget.alert_percentage <= percentage < HUNDRED:
        alerts.append(alert(schemas.BudgetAlertType.THRESHOLD_REACHED, percentage))

    if summary.is_over_budget:
        alerts.append(alert(
            schemas.BudgetAlertType.BUDGET_EXCEEDED,
            percentage,
            amount_over=summary.total_spent - budget.amount,
        ))

    for spending in summary.spending_by_category:
        if spending.percentage_used > HUNDRED:
            alerts.append(alert(
                schemas.BudgetAlertType.CATEGORY_EXCEEDED,
                spending.percentage_used,
                category_name=spending.category_name,
                amount_over=spending.spent_amount - spending.budgeted_amount,
            ))

    if summary.projected_spending > budget.amount and not summary.is_over_budget:
        alerts.append(alert(
            schemas.BudgetAlertType.PROJECTED_OVERSPENDING,
            percentage_of(summary.projected_spending, budget.amount),
            amount_over=summary.projected_spending - budget.amount,
        ))

    return alerts


def collect_alerts(
    summaries: Iterable[schemas.BudgetSummary], triggered_at: datetime
) -> List[schemas.BudgetAlert]:
    """Alerts of several budgets, budget by budget."""
    return [alert for summary in summaries for alert in budget_alerts(summary, triggered_at)]
