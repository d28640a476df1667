"""Period budget models for the database."""

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text,
    UniqueConstraint, func
)
from sqlalchemy.orm import relationship

from components.core.database import Base


class Budget(Base):
    """Budget model: a spending ceiling shared by a set of categories over a date range."""
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    period = Column(String(20), nullable=False)  # MONTHLY, QUARTERLY, YEARLY, CUSTOM
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="ACTIVE")
    alert_percentage = Column(Integer, nullable=False, default=80)
    is_active = Column(Boolean, nullable=False, default=True)
    color = Column(String(20), nullable=True)
    icon = Column(String(50), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="budgets")
    categories = relationship(
        "BudgetCategory",
        back_populates="budget",
        order_by="BudgetCategory.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def category_ids(self):
        return [category.category_id for category in self.categories]


class BudgetCategory(Base):
    """Category covered by a budget."""
    __tablename__ = "budget_categories"
    __table_args__ = (
        UniqueConstraint("budget_id", "category_id", name="uq_budget_categories_budget_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    budget_id = Column(Integer, ForeignKey("budgets.id", ondelete="CASCADE"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    budget = relationship("Budget", back_populates="categories")
