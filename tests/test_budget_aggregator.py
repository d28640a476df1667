from datetime import date, datetime
from decimal import Decimal

import pytest

from components.budget import aggregator
from components.budget.schemas import Budget, BudgetAlertType
from components.category.schemas import CategoryInfo
from components.transaction.schemas import TransactionCreate, TransactionType

FOOD, TRANSPORT, FUN = 1, 2, 3

DIRECTORY = {
    FOOD: CategoryInfo(name="Alimentação"),
    TRANSPORT: CategoryInfo(name="Transporte"),
    FUN: CategoryInfo(name="Lazer"),
}

MID_MAY = date(2025, 5, 11)
END_OF_MAY = date(2025, 5, 31)
TRIGGERED_AT = datetime(2025, 5, 31, 12, 0)


def make_budget(amount="3000", category_ids=(FOOD, TRANSPORT), alert_percentage=80, id=1, name="Essenciais"):
    return Budget(
        id=id,
        user_id=1,
        name=name,
        amount=Decimal(amount),
        start_date=date(2025, 5, 1),
        end_date=END_OF_MAY,
        category_ids=list(category_ids),
        alert_percentage=alert_percentage,
    )


def expense(category_id, amount, day=date(2025, 5, 3), type=TransactionType.EXPENSE):
    return TransactionCreate(
        description="expense",
        amount=Decimal(amount),
        type=type,
        date=day,
        category_id=category_id,
    )


def alert_types(summary):
    return [alert.alert_type for alert in aggregator.budget_alerts(summary, TRIGGERED_AT)]


def test_projection_extends_daily_average_over_the_period():
    summary = aggregator.compute_budget_summary(
        make_budget(),
        [expense(FOOD, "700"), expense(TRANSPORT, "500", day=date(2025, 5, 8))],
        MID_MAY,
        DIRECTORY,
    )

    assert summary.total_spent == Decimal("1200")
    assert summary.total_remaining == Decimal("1800")
    assert summary.percentage_used == Decimal("40")
    assert summary.days_remaining == 20
    assert summary.daily_budget_remaining == Decimal("90")
    # 1200 over 10 days, extended to the 30 days between start and end
    assert summary.projected_spending == Decimal("3600")
    assert summary.is_over_budget is False


def test_projected_overspending_alert():
    summary = aggregator.compute_budget_summary(
        make_budget(), [expense(FOOD, "700"), expense(TRANSPORT, "500")], MID_MAY, DIRECTORY
    )
    [alert] = aggregator.budget_alerts(summary, TRIGGERED_AT)

    assert alert.alert_type == BudgetAlertType.PROJECTED_OVERSPENDING
    assert alert.percentage == Decimal("120")
    assert alert.amount_over == Decimal("600")
    assert alert.budget_name == "Essenciais"
    assert alert.triggered_at == TRIGGERED_AT


def test_projection_within_budget_raises_nothing():
    summary = aggregator.compute_budget_summary(
        make_budget(), [expense(FOOD, "600"), expense(TRANSPORT, "400")], MID_MAY, DIRECTORY
    )
    assert summary.projected_spending == Decimal("3000")
    assert alert_types(summary) == []


@pytest.mark.parametrize("food, transport", [("1400", "1150"), ("1400", "1000")])
def test_threshold_reached(food, transport):
    summary = aggregator.compute_budget_summary(
        make_budget(), [expense(FOOD, food), expense(TRANSPORT, transport)], END_OF_MAY, DIRECTORY
    )
    [alert] = aggregator.budget_alerts(summary, TRIGGERED_AT)

    assert alert.alert_type == BudgetAlertType.THRESHOLD_REACHED
    assert alert.percentage == summary.percentage_used
    assert alert.amount_over is None


def test_threshold_uses_the_budget_alert_percentage():
    transactions = [expense(FOOD, "1000"), expense(TRANSPORT, "800")]

    strict = aggregator.compute_budget_summary(make_budget(alert_percentage=60), transactions, END_OF_MAY)
    assert alert_types(strict) == [BudgetAlertType.THRESHOLD_REACHED]

    relaxed = aggregator.compute_budget_summary(make_budget(alert_percentage=61), transactions, END_OF_MAY)
    assert alert_types(relaxed) == []


def test_budget_and_category_exceeded():
    summary = aggregator.compute_budget_summary(
        make_budget(), [expense(FOOD, "2000"), expense(TRANSPORT, "1100")], END_OF_MAY, DIRECTORY
    )
    budget_alert, category_alert = aggregator.budget_alerts(summary, TRIGGERED_AT)

    assert summary.is_over_budget is True
    assert summary.total_remaining == 0
    assert budget_alert.alert_type == BudgetAlertType.BUDGET_EXCEEDED
    assert budget_alert.amount_over == Decimal("100")
    assert category_alert.alert_type == BudgetAlertType.CATEGORY_EXCEEDED
    assert category_alert.category_name == "Alimentação"
    assert category_alert.amount_over == Decimal("500")


def test_category_exceeded_while_budget_is_not():
    summary = aggregator.compute_budget_summary(
        make_budget(), [expense(FOOD, "1600")], END_OF_MAY, DIRECTORY
    )
    assert alert_types(summary) == [BudgetAlertType.CATEGORY_EXCEEDED]


def test_spending_is_split_evenly_per_category():
    summary = aggregator.compute_budget_summary(
        make_budget(),
        [
            expense(FOOD, "100", day=date(2025, 5, 2)),
            expense(FOOD, "50", day=date(2025, 5, 20)),
            expense(TRANSPORT, "1600"),
        ],
        MID_MAY,
        DIRECTORY,
    )
    food, transport = summary.spending_by_category

    assert (food.category_id, food.category_name) == (FOOD, "Alimentação")
    assert food.budgeted_amount == Decimal("1500")
    assert food.spent_amount == Decimal("150")
    assert food.remaining_amount == Decimal("1350")
    assert food.percentage_used == Decimal("10")
    assert food.transaction_count == 2
    assert food.last_transaction_date == date(2025, 5, 20)
    assert food.budget_id == 1

    assert transport.remaining_amount == 0
    assert transport.percentage_used > 100


def test_only_period_expenses_of_budget_categories_count():
    summary = aggregator.compute_budget_summary(
        make_budget(),
        [
            expense(FOOD, "10", day=date(2025, 5, 1)),
            expense(FOOD, "20", day=END_OF_MAY, type=TransactionType.CREDIT_CARD_EXPENSE),
            expense(FOOD, "1000", day=date(2025, 4, 30)),
            expense(FOOD, "1000", day=date(2025, 6, 1)),
            expense(FOOD, "1000", type=TransactionType.INCOME),
            expense(FUN, "1000"),
            expense(None, "1000"),
        ],
        END_OF_MAY,
        DIRECTORY,
    )
    assert summary.total_spent == Decimal("30")
    assert summary.spending_by_category[1].last_transaction_date is None


def test_before_the_period_starts():
    summary = aggregator.compute_budget_summary(
        make_budget(), [expense(FOOD, "300")], date(2025, 4, 21), DIRECTORY
    )
    assert summary.projected_spending == 0
    assert summary.days_remaining == 40
    assert summary.daily_budget_remaining == Decimal("67.5")


def test_after_the_period_ends():
    summary = aggregator.compute_budget_summary(
        make_budget(), [expense(FOOD, "300")], date(2025, 6, 15), DIRECTORY
    )
    assert summary.days_remaining == 0
    assert summary.daily_budget_remaining == 0


def test_zero_amount_budget():
    summary = aggregator.compute_budget_summary(
        make_budget(amount="0"), [expense(FOOD, "10")], MID_MAY, DIRECTORY
    )
    assert summary.percentage_used == 0
    assert summary.spending_by_category[0].percentage_used == 0
    assert alert_types(summary) == [BudgetAlertType.BUDGET_EXCEEDED]


def test_unknown_category_name():
    summary = aggregator.compute_budget_summary(make_budget(category_ids=(FOOD, 42)), [], MID_MAY, DIRECTORY)
    assert summary.spending_by_category[1].category_name == "Categoria desconhecida"


def test_summary_leaves_budget_alone():
    budget = make_budget()
    before = budget.model_dump()
    first = aggregator.compute_budget_summary(budget, [expense(FOOD, "10")], MID_MAY, DIRECTORY)
    second = aggregator.compute_budget_summary(budget, [expense(FOOD, "10")], MID_MAY, DIRECTORY)

    assert first == second
    assert budget.model_dump() == before


def test_collect_alerts_keeps_budget_order():
    essentials = aggregator.compute_budget_summary(
        make_budget(), [expense(FOOD, "1600")], END_OF_MAY, DIRECTORY
    )
    fun = aggregator.compute_budget_summary(
        make_budget(amount="100", category_ids=(FUN,), id=2, name="Lazer"),
        [expense(FUN, "150")],
        END_OF_MAY,
        DIRECTORY,
    )
    alerts = aggregator.collect_alerts([essentials, fun], TRIGGERED_AT)

    assert [(a.budget_id, a.alert_type) for a in alerts] == [
        (1, BudgetAlertType.CATEGORY_EXCEEDED),
        (2, BudgetAlertType.BUDGET_EXCEEDED),
        (2, BudgetAlertType.CATEGORY_EXCEEDED),
    ]
