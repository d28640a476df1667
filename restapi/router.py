"""Application configuration and router setup."""

import fastapi
from fastapi.middleware import cors
from fastapi.openapi.utils import get_openapi

from components.core import init_db
from components.core.log_config import setup_logging
from restapi.endpoints import health_check, auth, category, transaction, plan, budget

TITLE = "Budget Planner"
DESCRIPTION = "Monthly budget planning, period budgets and spend tracking API"
VERSION = "1.0.0"


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging()

    app = fastapi.FastAPI(
        title=TITLE,
        description=DESCRIPTION,
        version=VERSION,
    )

    # Initialize database
    init_db.init_db(app)

    # Add CORS middleware
    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_check.router)
    app.include_router(auth.router)
    app.include_router(category.router)
    app.include_router(transaction.router)
    app.include_router(plan.router)
    app.include_router(budget.router)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        app.openapi_schema = get_openapi(
            title=TITLE,
            version=VERSION,
            description=DESCRIPTION,
            routes=app.routes,
        )
        return app.openapi_schema

    app.openapi = custom_openapi

    return app
