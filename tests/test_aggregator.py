from datetime import date
from decimal import Decimal

import pytest

from components.category.schemas import CategoryInfo
from components.plan import aggregator
from components.plan.schemas import (
    AlertType,
    BudgetStatus,
    CategoryBudget,
    MonthlyPlan,
)
from components.transaction.schemas import TransactionCreate, TransactionType

FOOD, TRANSPORT, HOUSING, UNTRACKED = 1, 2, 3, 99

DIRECTORY = {
    FOOD: CategoryInfo(name="Alimentação", icon="utensils", color="#f97316"),
    TRANSPORT: CategoryInfo(name="Transporte", icon="car", color="#3b82f6"),
    UNTRACKED: CategoryInfo(name="Pets"),
}


def make_plan(*budgets, total_budget="4500", month=5, year=2025):
    return MonthlyPlan(
        id=1,
        user_id=1,
        month=month,
        year=year,
        total_budget=Decimal(total_budget),
        category_budgets=[
            CategoryBudget(category_id=category_id, planned_amount=Decimal(amount))
            for category_id, amount in budgets
        ],
    )


def expense(category_id, amount, day=date(2025, 5, 10), type=TransactionType.EXPENSE):
    return TransactionCreate(
        description="expense",
        amount=Decimal(amount),
        type=type,
        date=day,
        category_id=category_id,
    )


def food_summary(*amounts):
    plan = make_plan((FOOD, "1200"))
    return aggregator.compute_summary(plan, [expense(FOOD, a) for a in amounts], DIRECTORY)


def test_no_plan_means_no_summary():
    assert aggregator.compute_summary(None, [expense(FOOD, "10")], DIRECTORY) is None


def test_spend_just_over_budget_is_exceeded():
    summary = food_summary("1000", "200.01")
    food = summary.categories_summary[0]

    assert food.spent_amount == Decimal("1200.01")
    assert food.status == BudgetStatus.EXCEEDED
    assert food.is_over_budget is True
    assert len(summary.alerts) == 1
    alert = summary.alerts[0]
    assert alert.alert_type == AlertType.EXCEEDED
    assert alert.current_amount == Decimal("1200.01")
    assert alert.planned_amount == Decimal("1200")
    assert round(alert.percentage, 4) == Decimal("100.0008")


def test_ninety_percent_is_danger_with_approaching_limit_alert():
    summary = food_summary("1080")
    food = summary.categories_summary[0]

    assert food.percentage_used == Decimal("90")
    assert food.status == BudgetStatus.DANGER
    assert food.is_over_budget is False
    assert [a.alert_type for a in summary.alerts] == [AlertType.APPROACHING_LIMIT]


def test_just_under_seventy_percent_is_safe():
    summary = food_summary("839")

    assert summary.categories_summary[0].status == BudgetStatus.SAFE
    assert summary.alerts == []


def test_zero_budget_category_reports_zero_percent():
    plan = make_plan((TRANSPORT, "0"))
    summary = aggregator.compute_summary(plan, [expense(TRANSPORT, "250")], DIRECTORY)
    transport = summary.categories_summary[0]

    assert transport.spent_amount == Decimal("250")
    assert transport.percentage_used == 0
    assert transport.status == BudgetStatus.SAFE
    assert transport.is_over_budget is True
    assert summary.alerts == []


@pytest.mark.parametrize("spent, status", [
    ("0", BudgetStatus.SAFE),
    ("699.99", BudgetStatus.SAFE),
    ("700", BudgetStatus.WARNING),
    ("899.99", BudgetStatus.WARNING),
    ("900", BudgetStatus.DANGER),
    ("1000", BudgetStatus.DANGER),
    ("1000.01", BudgetStatus.EXCEEDED),
])
def test_status_thresholds(spent, status):
    plan = make_plan((FOOD, "1000"))
    summary = aggregator.compute_summary(plan, [expense(FOOD, spent)], DIRECTORY)
    assert summary.categories_summary[0].status == status


def test_status_never_gets_less_severe_as_spend_grows():
    order = list(BudgetStatus)
    plan = make_plan((FOOD, "200"))
    severities = [
        order.index(aggregator.compute_summary(plan, [expense(FOOD, spent)], DIRECTORY)
                    .categories_summary[0].status)
        for spent in range(0, 301, 5)
    ]
    assert severities == sorted(severities)


def test_only_in_month_expenses_count():
    plan = make_plan((FOOD, "1200"))
    transactions = [
        expense(FOOD, "100"),
        expense(FOOD, "50", type=TransactionType.CREDIT_CARD_EXPENSE),
        expense(FOOD, "1000", type=TransactionType.INCOME),
        expense(FOOD, "1000", type=TransactionType.TRANSFER),
        expense(FOOD, "1000", day=date(2025, 4, 30)),
        expense(FOOD, "1000", day=date(2024, 5, 10)),
    ]
    summary = aggregator.compute_summary(plan, transactions, DIRECTORY)
    assert summary.categories_summary[0].spent_amount == Decimal("150")


def test_rollup_counts_only_budgeted_categories():
    plan = make_plan((FOOD, "1200"), (TRANSPORT, "600"), total_budget="2000")
    transactions = [
        expense(FOOD, "700"),
        expense(TRANSPORT, "100"),
        expense(UNTRACKED, "5000"),
    ]
    summary = aggregator.compute_summary(plan, transactions, DIRECTORY)

    assert summary.total_planned == Decimal("2000")
    assert summary.total_spent == sum(c.spent_amount for c in summary.categories_summary)
    assert summary.total_spent == Decimal("800")
    assert summary.total_remaining == Decimal("1200")
    assert summary.percentage_used == Decimal("40")


def test_remaining_is_floored_at_zero():
    plan = make_plan((FOOD, "1200"), total_budget="1000")
    summary = aggregator.compute_summary(plan, [expense(FOOD, "1500")], DIRECTORY)
    assert summary.total_remaining == 0
    assert summary.percentage_used == Decimal("150")


def test_zero_total_budget_reports_zero_percent():
    plan = make_plan((FOOD, "100"), total_budget="0")
    summary = aggregator.compute_summary(plan, [expense(FOOD, "50")], DIRECTORY)
    assert summary.percentage_used == 0
    assert summary.total_remaining == 0


def test_category_order_and_alert_order_follow_the_plan():
    plan = make_plan((TRANSPORT, "100"), (HOUSING, "100"), (FOOD, "100"))
    transactions = [expense(FOOD, "95"), expense(TRANSPORT, "150"), expense(HOUSING, "10")]
    summary = aggregator.compute_summary(plan, transactions, DIRECTORY)

    assert [c.category_id for c in summary.categories_summary] == [TRANSPORT, HOUSING, FOOD]
    assert [(a.category_id, a.alert_type) for a in summary.alerts] == [
        (TRANSPORT, AlertType.EXCEEDED),
        (FOOD, AlertType.APPROACHING_LIMIT),
    ]


def test_display_fields_come_from_directory():
    plan = make_plan((FOOD, "100"), (HOUSING, "100"))
    summary = aggregator.compute_summary(plan, [], DIRECTORY)
    food, housing = summary.categories_summary

    assert (food.category_name, food.category_icon, food.category_color) == (
        "Alimentação", "utensils", "#f97316"
    )
    assert housing.category_name == aggregator.UNKNOWN_CATEGORY_NAME
    assert housing.category_icon is None
    assert housing.category_color is None


def test_summary_is_repeatable_and_leaves_inputs_alone():
    plan = make_plan((FOOD, "1200"), (TRANSPORT, "600"))
    transactions = [expense(FOOD, "1100"), expense(TRANSPORT, "700")]
    plan_before = plan.model_copy(deep=True)

    first = aggregator.compute_summary(plan, transactions, DIRECTORY)
    second = aggregator.compute_summary(plan, transactions, DIRECTORY)

    assert first == second
    assert plan == plan_before
    assert [t.amount for t in transactions] == [Decimal("1100"), Decimal("700")]


def test_check_projects_overrun_of_budgeted_category():
    summary = food_summary("1100")
    alert = aggregator.check_transaction_alert(FOOD, Decimal("200"), summary)

    assert alert.alert_type == AlertType.EXCEEDED
    assert alert.current_amount == Decimal("1300")
    assert alert.planned_amount == Decimal("1200")
    assert round(alert.percentage, 2) == Decimal("108.33")
    assert summary.categories_summary[0].spent_amount == Decimal("1100")


def test_check_allows_expense_that_fills_budget_exactly():
    summary = food_summary("1100")
    assert aggregator.check_transaction_alert(FOOD, Decimal("100"), summary) is None
    assert aggregator.check_transaction_alert(FOOD, Decimal("0.01"), summary) is None


def test_check_flags_unbudgeted_category():
    summary = food_summary("1100")

    alert = aggregator.check_transaction_alert(UNTRACKED, Decimal("50"), summary, DIRECTORY)
    assert alert.alert_type == AlertType.NO_BUDGET
    assert alert.category_name == "Pets"
    assert alert.current_amount == Decimal("50")
    assert alert.planned_amount == 0
    assert alert.percentage == 0

    anonymous = aggregator.check_transaction_alert(HOUSING, Decimal("50"), summary)
    assert anonymous.category_name == aggregator.UNBUDGETED_CATEGORY_NAME


def test_check_without_plan_is_silent():
    assert aggregator.check_transaction_alert(FOOD, Decimal("99999"), None) is None


def test_check_on_zero_budget_category():
    plan = make_plan((TRANSPORT, "0"))
    summary = aggregator.compute_summary(plan, [], DIRECTORY)
    alert = aggregator.check_transaction_alert(TRANSPORT, Decimal("10"), summary)

    assert alert.alert_type == AlertType.EXCEEDED
    assert alert.percentage == 0


def test_copy_from_previous_builds_independent_draft():
    previous = make_plan((FOOD, "1200"), (TRANSPORT, "600"), month=12, year=2024)
    draft = aggregator.copy_from_previous(previous, 1, 2025)

    assert draft.id is None
    assert (draft.month, draft.year, draft.user_id) == (1, 2025, previous.user_id)
    assert draft.total_budget == previous.total_budget
    assert draft.category_budgets == previous.category_budgets
    assert draft.created_from_previous is True
    assert draft.created_at is not None

    draft.category_budgets[0].planned_amount = Decimal("1")
    draft.category_budgets.append(CategoryBudget(category_id=HOUSING, planned_amount=Decimal("10")))
    assert previous.category_budgets[0].planned_amount == Decimal("1200")
    assert len(previous.category_budgets) == 2


def test_copy_without_previous_plan():
    assert aggregator.copy_from_previous(None, 1, 2025) is None


@pytest.mark.parametrize("month, year, expected", [
    (1, 2025, (12, 2024)),
    (2, 2025, (1, 2025)),
    (12, 2025, (11, 2025)),
])
def test_previous_period(month, year, expected):
    assert aggregator.previous_period(month, year) == expected
