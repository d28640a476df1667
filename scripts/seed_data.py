"""Script to seed demo data into the database."""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select

from components.core.init_db import db_manager
from components.budget import schemas as budget_schemas
from components.budget.repository import BudgetRepository
from components.category.models import Category
from components.plan import schemas as plan_schemas
from components.plan.repository import PlanRepository
from components.transaction import schemas as transaction_schemas
from components.transaction.repository import TransactionRepository, month_bounds
from components.user.repository import UserRepository
from components.user.schemas import UserCreate

DEFAULT_CATEGORIES = [
    ("Alimentação", "EXPENSE", "utensils", "#f97316"),
    ("Transporte", "EXPENSE", "car", "#3b82f6"),
    ("Moradia", "EXPENSE", "home", "#8b5cf6"),
    ("Lazer", "EXPENSE", "gamepad", "#ec4899"),
    ("Compras", "EXPENSE", "shopping-bag", "#14b8a6"),
    ("Saúde", "EXPENSE", "heart", "#ef4444"),
    ("Salário", "INCOME", "wallet", "#22c55e"),
]

PLANNED = {
    "Alimentação": Decimal("1200"),
    "Transporte": Decimal("600"),
    "Moradia": Decimal("1500"),
    "Lazer": Decimal("400"),
    "Compras": Decimal("500"),
    "Saúde": Decimal("300"),
}


BUDGETS = [
    ("Gastos Essenciais", "Alimentação, transporte e moradia", Decimal("3000"), ["Alimentação", "Transporte", "Moradia"], 80),
    ("Entretenimento", "Lazer e compras", Decimal("800"), ["Lazer", "Compras"], 75),
]


async def seed_data():
    """Seed default categories, a demo user, this month's plan and budgets, and a few transactions."""
    await db_manager.create_all()
    today = date.today()

    async with db_manager.get_db() as db:
        result = await db.execute(select(Category).where(Category.user_id.is_(None)))
        categories = {category.name: category for category in result.scalars().all()}
        for name, category_type, icon, color in DEFAULT_CATEGORIES:
            if name not in categories:
                category = Category(name=name, type=category_type, icon=icon, color=color, is_default=True)
                db.add(category)
                categories[name] = category
        await db.commit()
        print(f"Default categories: {len(categories)}")

        user_repo = UserRepository(db)
        user = await user_repo.get_by_login("demo")
        if not user:
            user = await user_repo.create(UserCreate(login="demo", password="demo1234"))
        print(f"Demo user: {user.login} (id={user.id})")

        plan_repo = PlanRepository(db)
        if not await plan_repo.get_plan(user.id, today.month, today.year):
            await plan_repo.create(user.id, plan_schemas.MonthlyPlanCreate(
                month=today.month,
                year=today.year,
                total_budget=Decimal("4500"),
                category_budgets=[
                    plan_schemas.CategoryBudget(category_id=categories[name].id, planned_amount=amount)
                    for name, amount in PLANNED.items()
                ],
            ))
            print(f"Created plan for {today.month:02d}/{today.year}")

        transaction_repo = TransactionRepository(db)
        if not await transaction_repo.get_for_month(user.id, today.month, today.year):
            samples = [
                ("Supermercado", Decimal("950.40"), "EXPENSE", "Alimentação"),
                ("Combustível", Decimal("320.00"), "CREDIT_CARD_EXPENSE", "Transporte"),
                ("Aluguel", Decimal("1500.00"), "EXPENSE", "Moradia"),
                ("Cinema", Decimal("90.00"), "CREDIT_CARD_EXPENSE", "Lazer"),
                ("Salário", Decimal("6000.00"), "INCOME", "Salário"),
            ]
            for description, amount, transaction_type, category_name in samples:
                await transaction_repo.create(user.id, transaction_schemas.TransactionCreate(
                    description=description,
                    amount=amount,
                    type=transaction_type,
                    date=today.replace(day=1),
                    category_id=categories[category_name].id,
                ))
            print(f"Created {len(samples)} transactions")

        budget_repo = BudgetRepository(db)
        if not await budget_repo.get_all(user.id):
            month_start, next_month = month_bounds(today.month, today.year)
            month_end = next_month - timedelta(days=1)
            for name, description, amount, category_names, alert_percentage in BUDGETS:
                await budget_repo.create(user.id, budget_schemas.BudgetCreate(
                    name=name,
                    description=description,
                    amount=amount,
                    period=budget_schemas.BudgetPeriod.MONTHLY,
                    start_date=month_start,
                    end_date=month_end,
                    category_ids=[categories[category_name].id for category_name in category_names],
                    alert_percentage=alert_percentage,
                ))
            print(f"Created {len(BUDGETS)} budgets")

        summary = await plan_repo.get_summary(user.id, today.month, today.year)
        print(f"Spent {summary.total_spent} of {summary.total_planned} ({summary.percentage_used:.1f}%)")
        for alert in await budget_repo.get_alerts(user.id, today):
            print(f"Budget alert: {alert.budget_name} {alert.alert_type.value} ({alert.percentage:.1f}%)")

    await db_manager.engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_data())
