"""
Blogdesk Backend: Category Service Unit Tests
===============================================

What:  CategoryService CRUD against a mocked AsyncSession.

What we test:
    ✅ Duplicate names are rejected before anything is added
    ✅ Database uniqueness violations map to ConflictError
    ✅ Malformed and unknown ids are NotFoundError
    ✅ Updates apply only the fields that were sent
    ✅ Unexpected database failures become DatabaseError
"""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from blogdesk.exceptions import ConflictError, DatabaseError, NotFoundError
from blogdesk.models.category import Category
from blogdesk.schemas.category import CategoryCreate, CategoryUpdate
from blogdesk.services.category_service import CategoryService


class TestCreateCategory:
    def setup_method(self):
        self.service = CategoryService()

    @pytest.mark.asyncio
    async def test_creates_with_slug(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(scalar=None)

        category = await self.service.create_category(
            mock_db_session, CategoryCreate(name="Tech News!", description="All things tech")
        )

        assert category.slug == "tech-news-"
        assert category.description == "All things tech"
        mock_db_session.add.assert_called_once_with(category)
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_name_persists_nothing(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(scalar=uuid4())

        with pytest.raises(ConflictError) as exc_info:
            await self.service.create_category(mock_db_session, CategoryCreate(name="Tech"))

        assert exc_info.value.message == "Category already exists"
        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_integrity_error_is_conflict(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(scalar=None)
        mock_db_session.flush = AsyncMock(side_effect=IntegrityError("INSERT", {}, Exception("dup")))

        with pytest.raises(ConflictError):
            await self.service.create_category(mock_db_session, CategoryCreate(name="Tech"))

    @pytest.mark.asyncio
    async def test_unexpected_failure_is_database_error(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("connection reset"))

        with pytest.raises(DatabaseError):
            await self.service.create_category(mock_db_session, CategoryCreate(name="Tech"))


class TestGetCategory:
    def setup_method(self):
        self.service = CategoryService()

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.get_category(mock_db_session, "not-a-uuid")
        assert exc_info.value.message == "Category not found"
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_id_is_not_found(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(scalar=None)
        with pytest.raises(NotFoundError):
            await self.service.get_category(mock_db_session, str(uuid4()))

    @pytest.mark.asyncio
    async def test_list_returns_rows(self, mock_db_session, db_result):
        rows = [Category(name="A"), Category(name="B")]
        mock_db_session.execute.return_value = db_result(rows=rows)
        assert await self.service.list_categories(mock_db_session) == rows


class TestUpdateCategory:
    def setup_method(self):
        self.service = CategoryService()

    @pytest.mark.asyncio
    async def test_rename_recomputes_slug(self, mock_db_session, db_result):
        category = Category(name="Old", description="keep me")
        category.id = uuid4()
        mock_db_session.execute.side_effect = [
            db_result(scalar=category),  # get_category
            db_result(scalar=None),      # name check
        ]

        updated = await self.service.update_category(
            mock_db_session, str(category.id), CategoryUpdate(name="Brand New")
        )

        assert updated.name == "Brand New"
        assert updated.slug == "brand-new"
        assert updated.description == "keep me"

    @pytest.mark.asyncio
    async def test_rename_to_taken_name_is_conflict(self, mock_db_session, db_result):
        category = Category(name="Old")
        category.id = uuid4()
        mock_db_session.execute.side_effect = [
            db_result(scalar=category),
            db_result(scalar=uuid4()),
        ]

        with pytest.raises(ConflictError) as exc_info:
            await self.service.update_category(mock_db_session, str(category.id), CategoryUpdate(name="Taken"))

        assert exc_info.value.message == "Category name already exists"
        assert category.name == "Old"

    @pytest.mark.asyncio
    async def test_null_description_clears(self, mock_db_session, db_result):
        category = Category(name="Tech", description="old")
        category.id = uuid4()
        mock_db_session.execute.return_value = db_result(scalar=category)

        updated = await self.service.update_category(
            mock_db_session, str(category.id), CategoryUpdate(description=None)
        )

        assert updated.description is None
        assert updated.name == "Tech"

    @pytest.mark.asyncio
    async def test_delete_is_hard_delete(self, mock_db_session, db_result):
        category = Category(name="Tech")
        category.id = uuid4()
        mock_db_session.execute.return_value = db_result(scalar=category)

        await self.service.delete_category(mock_db_session, str(category.id))

        mock_db_session.delete.assert_awaited_once_with(category)
