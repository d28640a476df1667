"""Shared fixtures: a throwaway SQLite database behind the FastAPI app."""

import asyncio
import os
import tempfile

os.environ.setdefault(
    "DB_URL", f"sqlite+aiosqlite:///{os.path.join(tempfile.mkdtemp(), 'bootstrap.db')}"
)
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from components.core.database import DatabaseManager
from components.core.init_db import get_db
from components.category.models import Category
from restapi.router import create_app

DEFAULT_CATEGORIES = [
    ("Alimentação", "EXPENSE", "utensils", "#f97316"),
    ("Transporte", "EXPENSE", "car", "#3b82f6"),
    ("Lazer", "EXPENSE", "gamepad", "#ec4899"),
    ("Salário", "INCOME", "wallet", "#22c55e"),
]


@pytest.fixture
def db_manager(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    manager = DatabaseManager(engine)
    asyncio.run(manager.create_all())
    yield manager
    asyncio.run(engine.dispose())


@pytest.fixture
def categories(db_manager):
    """System default categories, keyed by name."""
    async def seed():
        async with db_manager.get_db() as session:
            rows = [
                Category(name=name, type=category_type, icon=icon, color=color, is_default=True)
                for name, category_type, icon, color in DEFAULT_CATEGORIES
            ]
            session.add_all(rows)
            await session.commit()
            return {row.name: row.id for row in rows}

    return asyncio.run(seed())


@pytest.fixture
def client(db_manager):
    app = create_app()

    async def override_get_db():
        async with db_manager.get_db() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client


def register(client, login="alice", password="secret123"):
    response = client.post("/auth/register", json={"login": login, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def auth_headers(client):
    return register(client)
