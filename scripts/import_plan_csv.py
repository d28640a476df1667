"""Script to import a month's category budgets from a CSV file."""

import argparse
import asyncio
from pathlib import Path

from components.core.init_db import db_manager
from components.plan.repository import PlanRepository
from components.user.repository import UserRepository


async def import_plan_csv(csv_path: Path, login: str, month: int, year: int):
    """Import the category budgets of one month for a user."""
    if not csv_path.exists():
        print(f"Error: File not found at {csv_path}")
        return

    async with db_manager.get_db() as db:
        user = await UserRepository(db).get_by_login(login)
        if not user:
            print(f"Error: User {login} not found")
            return

        with open(csv_path, "rb") as f:
            success, message, errors = await PlanRepository(db).upload_category_budgets_from_csv(
                user.id, month, year, f
            )

        print(f"Success: {success}")
        print(f"Message: {message}")
        for error in errors:
            print(f"  Row {error['row']}: {error['message']}")

    await db_manager.engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("csv_path", type=Path)
    parser.add_argument("--login", required=True)
    parser.add_argument("--month", type=int, required=True)
    parser.add_argument("--year", type=int, required=True)
    args = parser.parse_args()
    asyncio.run(import_plan_csv(args.csv_path, args.login, args.month, args.year))
