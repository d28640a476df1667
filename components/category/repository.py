"""Repository for category operations."""

import logging
from typing import Dict, List, Optional
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from components.category.models import Category
from components.category import schemas

logger = logging.getLogger(__name__)


class CategoryRepository:
    """Repository for category operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    def _visible_to(self, user_id: int):
        return or_(Category.user_id == user_id, Category.user_id.is_(None))

    async def get_all(
        self,
        user_id: int,
        category_type: Optional[schemas.CategoryType] = None
    ) -> List[Category]:
        """Get system default categories plus the user's own ones."""
        query = select(Category).where(self._visible_to(user_id))
        if category_type:
            query = query.where(Category.type == category_type.value)
        query = query.order_by(Category.name)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_id(self, category_id: int, user_id: int) -> Optional[Category]:
        """Get a category visible to the user by ID."""
        result = await self.session.execute(
            select(Category).where(Category.id == category_id, self._visible_to(user_id))
        )
        return result.scalar_one_or_none()

    async def create(self, user_id: int, category: schemas.CategoryCreate) -> Category:
        """Create a custom category for the user."""
        db_category = Category(
            user_id=user_id,
            name=category.name,
            type=category.type.value,
            icon=category.icon,
            color=category.color,
            is_default=False,
        )
        self.session.add(db_category)
        await self.session.commit()
        await self.session.refresh(db_category)
        logger.info("Created category %s for user %s", db_category.id, user_id)
        return db_category

    async def get_directory(self, user_id: int) -> Dict[int, schemas.CategoryInfo]:
        """Build the id -> display data lookup used by budget summaries."""
        categories = await self.get_all(user_id)
        return {
            category.id: schemas.CategoryInfo(
                name=category.name,
                icon=category.icon,
                color=category.color,
            )
            for category in categories
        }

    async def get_types(self, user_id: int) -> Dict[int, schemas.CategoryType]:
        """Map the ids of the categories visible to the user to their type."""
        categories = await self.get_all(user_id)
        return {category.id: schemas.CategoryType(category.type) for category in categories}
