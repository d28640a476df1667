"""Monthly plan models for the database."""

from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, Numeric, UniqueConstraint, func
)
from sqlalchemy.orm import relationship

from components.core.database import Base


class MonthlyPlan(Base):
    """Monthly plan model storing a user's spending ceiling for one month."""
    __tablename__ = "monthly_plans"
    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_monthly_plans_user_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)
    total_budget = Column(Numeric(12, 2), nullable=False)
    created_from_previous = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="monthly_plans")
    category_budgets = relationship(
        "CategoryBudget",
        back_populates="monthly_plan",
        order_by="CategoryBudget.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class CategoryBudget(Base):
    """Planned amount of one category inside a monthly plan."""
    __tablename__ = "category_budgets"
    __table_args__ = (
        UniqueConstraint("monthly_plan_id", "category_id", name="uq_category_budgets_plan_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    monthly_plan_id = Column(
        Integer, ForeignKey("monthly_plans.id", ondelete="CASCADE"), nullable=False
    )
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    planned_amount = Column(Numeric(12, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # Order within the plan

    # Relationships
    monthly_plan = relationship("MonthlyPlan", back_populates="category_budgets")
