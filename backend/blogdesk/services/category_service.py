"""
Blogdesk Backend: Category Service
====================================

What:  CRUD for categories.
How:   Stateless methods taking the request's AsyncSession. Uniqueness of
       name and slug is checked before writing and again by the database
       constraints (IntegrityError → ConflictError), so a duplicate never
       persists anything.
Who:   Admin category routes and the public category list.

Deleting a category is a hard delete and does not touch blogs that point at
it; their `category` simply resolves to null afterwards.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.database import translate_db_errors
from blogdesk.exceptions import ConflictError, NotFoundError
from blogdesk.models.category import Category, slugify_name
from blogdesk.schemas.category import CategoryCreate, CategoryUpdate
from blogdesk.services.params import parse_uuid

logger = logging.getLogger(__name__)


class CategoryService:
    async def _name_taken(
        self,
        db: AsyncSession,
        name: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> bool:
        query = select(Category.id).where(
            or_(Category.name == name, Category.slug == slugify_name(name))
        )
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def create_category(self, db: AsyncSession, data: CategoryCreate) -> Category:
        async with translate_db_errors("creating category", name=data.name):
            if await self._name_taken(db, data.name):
                raise ConflictError(message="Category already exists", context={"name": data.name})

            category = Category(name=data.name, description=data.description)
            db.add(category)
            try:
                await db.flush()
            except IntegrityError:
                raise ConflictError(message="Category already exists", context={"name": data.name})

            logger.info("Category created: %s (slug=%s)", category.id, category.slug)
            return category

    async def list_categories(self, db: AsyncSession) -> List[Category]:
        """All categories, name ascending."""
        async with translate_db_errors("listing categories"):
            result = await db.execute(select(Category).order_by(Category.name.asc()))
            return list(result.scalars().all())

    async def get_category(self, db: AsyncSession, category_id: str) -> Category:
        async with translate_db_errors("fetching category", category_id=str(category_id)):
            cid = parse_uuid(category_id)
            category = None
            if cid is not None:
                result = await db.execute(select(Category).where(Category.id == cid))
                category = result.scalar_one_or_none()
            if category is None:
                raise NotFoundError(resource="category", resource_id=str(category_id))
            return category

    async def update_category(
        self,
        db: AsyncSession,
        category_id: str,
        data: CategoryUpdate,
    ) -> Category:
        """
        Apply the fields present in `data`.

        A new name recomputes the slug (model validator) and must not collide
        with another category's name or slug.
        """
        category = await self.get_category(db, category_id)
        updates = data.model_dump(exclude_unset=True)

        async with translate_db_errors("updating category", category_id=str(category_id)):
            new_name = updates.get("name")
            if new_name is not None and new_name != category.name:
                if await self._name_taken(db, new_name, exclude_id=category.id):
                    raise ConflictError(
                        message="Category name already exists",
                        context={"name": new_name},
                    )

            for field, value in updates.items():
                setattr(category, field, value)

            try:
                await db.flush()
            except IntegrityError:
                raise ConflictError(
                    message="Category name already exists",
                    context={"name": new_name},
                )

            logger.info("Category updated: %s (%s)", category.id, ", ".join(updates) or "no changes")
            return category

    async def delete_category(self, db: AsyncSession, category_id: str) -> None:
        category = await self.get_category(db, category_id)
        async with translate_db_errors("deleting category", category_id=str(category_id)):
            await db.delete(category)
            await db.flush()
            logger.info("Category deleted: %s", category.id)


category_service = CategoryService()
