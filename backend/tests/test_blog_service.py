"""
Blogdesk Backend: Blog Service Unit Tests
===========================================

What:  BlogService against a mocked AsyncSession and the in-memory image host.

What we test:
    ✅ Create uploads files in order and stores {url, public_id} pairs
    ✅ Bad or too many files fail before anything is uploaded
    ✅ A failed upload discards the uploads made so far
    ✅ New files replace all images and delete the previous ones
    ✅ Soft delete is idempotent; unknown ids are NotFoundError
    ✅ Pagination math and search query handling
    ✅ Search skips deleted blogs and ranks by relevance, newest first on ties
"""

import re
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from blogdesk.exceptions import DatabaseError, ImageHostError, NotFoundError, ValidationError
from blogdesk.models.blog import Blog
from blogdesk.schemas.blog import BlogCreate, BlogUpdate
from blogdesk.services.blog_service import BlogService, search_terms

from conftest import FakeImageHost


def _postgres_sql(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))


def _create_data(category_id=None):
    return BlogCreate(
        title="Hello",
        description="Desc",
        content="Body",
        author="Ada",
        category=category_id or uuid4(),
    )


def _stored_blog(images=None, is_deleted=False):
    blog = Blog(
        title="Stored",
        description="Desc",
        content="Body",
        author="Ada",
        category_id=uuid4(),
        images=images or [],
        is_deleted=is_deleted,
    )
    blog.id = uuid4()
    return blog


@pytest.fixture
def capture_added(mock_db_session, db_result):
    """Give added objects an id and make the post-flush reload return them."""
    added = []

    def _add(obj):
        obj.id = uuid4()
        added.append(obj)
        mock_db_session.execute.return_value = db_result(scalar=obj)

    mock_db_session.add.side_effect = _add
    return added


class TestCreateBlog:
    def setup_method(self):
        self.service = BlogService()

    @pytest.mark.asyncio
    async def test_uploads_in_order_and_persists(self, mock_db_session, capture_added, sample_image_bytes):
        host = FakeImageHost()
        files = [("one.png", sample_image_bytes), ("two.jpg", sample_image_bytes)]

        blog = await self.service.create_blog(mock_db_session, _create_data(), files, host)

        assert blog is capture_added[0]
        assert blog.is_deleted is False
        assert [img["public_id"] for img in blog.images] == [
            "blog-images/1-one.png",
            "blog-images/2-two.jpg",
        ]
        assert set(blog.images[0]) == {"url", "public_id"}

    @pytest.mark.asyncio
    async def test_without_files_has_no_images(self, mock_db_session, capture_added):
        blog = await self.service.create_blog(mock_db_session, _create_data(), [], FakeImageHost())
        assert blog.images == []

    @pytest.mark.asyncio
    async def test_more_than_five_files_is_rejected(self, mock_db_session, sample_image_bytes):
        host = FakeImageHost()
        files = [(f"{i}.png", sample_image_bytes) for i in range(6)]

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_blog(mock_db_session, _create_data(), files, host)

        assert exc_info.value.errors[0]["field"] == "images"
        assert host.uploaded == []
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_bad_file_is_rejected_before_any_upload(self, mock_db_session, sample_image_bytes):
        host = FakeImageHost()
        files = [("ok.png", sample_image_bytes), ("bad.pdf", sample_image_bytes)]

        with pytest.raises(ValidationError):
            await self.service.create_blog(mock_db_session, _create_data(), files, host)

        assert host.uploaded == []

    @pytest.mark.asyncio
    async def test_failed_upload_discards_earlier_uploads(self, mock_db_session, sample_image_bytes):
        host = FakeImageHost(fail_on_upload=2)
        files = [("one.png", sample_image_bytes), ("two.png", sample_image_bytes)]

        with pytest.raises(ImageHostError):
            await self.service.create_blog(mock_db_session, _create_data(), files, host)

        assert host.deleted == ["blog-images/1-one.png"]
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_database_failure_discards_uploads(self, mock_db_session, capture_added, sample_image_bytes):
        host = FakeImageHost()
        mock_db_session.flush = AsyncMock(side_effect=RuntimeError("db down"))

        with pytest.raises(DatabaseError):
            await self.service.create_blog(mock_db_session, _create_data(), [("a.png", sample_image_bytes)], host)

        assert host.deleted == ["blog-images/1-a.png"]


class TestUpdateBlog:
    def setup_method(self):
        self.service = BlogService()

    @pytest.mark.asyncio
    async def test_new_files_replace_all_images(self, mock_db_session, db_result, sample_image_bytes):
        old_images = [
            {"url": "https://img.test/old1", "public_id": "blog-images/old1"},
            {"url": "https://img.test/old2", "public_id": "blog-images/old2"},
        ]
        blog = _stored_blog(images=old_images)
        mock_db_session.execute.return_value = db_result(scalar=blog)
        host = FakeImageHost()

        updated = await self.service.update_blog(
            mock_db_session,
            str(blog.id),
            BlogUpdate(title="New title"),
            [("new.png", sample_image_bytes)],
            host,
        )

        assert updated.title == "New title"
        assert updated.images == [host.uploaded[0].as_dict()]
        assert host.deleted == ["blog-images/old1", "blog-images/old2"]

    @pytest.mark.asyncio
    async def test_without_files_keeps_images(self, mock_db_session, db_result):
        images = [{"url": "https://img.test/old1", "public_id": "blog-images/old1"}]
        blog = _stored_blog(images=images)
        mock_db_session.execute.return_value = db_result(scalar=blog)
        host = FakeImageHost()

        updated = await self.service.update_blog(mock_db_session, str(blog.id), BlogUpdate(), [], host)

        assert updated.images == images
        assert updated.title == "Stored"
        assert host.deleted == []

    @pytest.mark.asyncio
    async def test_category_field_maps_to_category_id(self, mock_db_session, db_result):
        blog = _stored_blog()
        mock_db_session.execute.return_value = db_result(scalar=blog)
        new_category = uuid4()

        await self.service.update_blog(
            mock_db_session, str(blog.id), BlogUpdate(category=new_category), [], FakeImageHost()
        )

        assert blog.category_id == new_category

    @pytest.mark.asyncio
    async def test_failed_upload_leaves_blog_untouched(self, mock_db_session, db_result, sample_image_bytes):
        images = [{"url": "https://img.test/old1", "public_id": "blog-images/old1"}]
        blog = _stored_blog(images=images)
        mock_db_session.execute.return_value = db_result(scalar=blog)
        host = FakeImageHost(fail_on_upload=2)

        with pytest.raises(ImageHostError):
            await self.service.update_blog(
                mock_db_session,
                str(blog.id),
                BlogUpdate(title="Changed"),
                [("a.png", sample_image_bytes), ("b.png", sample_image_bytes)],
                host,
            )

        assert blog.images == images
        assert blog.title == "Stored"
        assert host.deleted == ["blog-images/1-a.png"]

    @pytest.mark.asyncio
    async def test_old_image_delete_failure_is_not_fatal(self, mock_db_session, db_result, sample_image_bytes):
        blog = _stored_blog(images=[{"url": "u", "public_id": "blog-images/old"}])
        mock_db_session.execute.return_value = db_result(scalar=blog)
        host = FakeImageHost(fail_on_delete=True)

        updated = await self.service.update_blog(
            mock_db_session, str(blog.id), BlogUpdate(), [("new.png", sample_image_bytes)], host
        )

        assert updated.images[0]["public_id"] == "blog-images/1-new.png"

    @pytest.mark.asyncio
    async def test_unknown_blog_is_not_found(self, mock_db_session, db_result):
        mock_db_session.execute.return_value = db_result(scalar=None)
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.update_blog(mock_db_session, str(uuid4()), BlogUpdate(), [], FakeImageHost())
        assert exc_info.value.message == "Blog not found"


class TestDeleteAndGet:
    def setup_method(self):
        self.service = BlogService()

    @pytest.mark.asyncio
    async def test_soft_delete_is_idempotent(self, mock_db_session, db_result):
        blog = _stored_blog(images=[{"url": "u", "public_id": "p"}])
        mock_db_session.execute.return_value = db_result(scalar=blog)

        await self.service.delete_blog(mock_db_session, str(blog.id))
        await self.service.delete_blog(mock_db_session, str(blog.id))

        assert blog.is_deleted is True
        assert blog.images == [{"url": "u", "public_id": "p"}]

    @pytest.mark.asyncio
    async def test_malformed_id_is_not_found(self, mock_db_session):
        with pytest.raises(NotFoundError):
            await self.service.get_blog(mock_db_session, "123")
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_public_get_of_deleted_blog_is_not_found(self, mock_db_session, db_result):
        # The is_deleted filter is part of the query; the row does not come back
        mock_db_session.execute.return_value = db_result(scalar=None)
        with pytest.raises(NotFoundError):
            await self.service.get_blog(mock_db_session, str(uuid4()), include_deleted=False)


class TestListAndSearch:
    def setup_method(self):
        self.service = BlogService()

    @pytest.mark.asyncio
    async def test_page_three_of_twenty_five(self, mock_db_session, db_result, make_blog):
        rows = [make_blog(title=f"Post {i}") for i in range(5)]
        mock_db_session.execute.side_effect = [db_result(count=25), db_result(rows=rows)]

        page = await self.service.list_blogs(mock_db_session, page=3, limit=10)

        assert page.total == 25
        assert page.total_pages == 3
        assert page.current_page == 3
        assert len(page.blogs) == 5

    @pytest.mark.asyncio
    async def test_list_query_excludes_deleted(self, mock_db_session, db_result):
        mock_db_session.execute.side_effect = [db_result(count=0), db_result(rows=[])]

        await self.service.list_blogs(mock_db_session, page=1, limit=10)

        list_query = mock_db_session.execute.await_args_list[1].args[0]
        assert "blogs.is_deleted" in str(list_query)
        assert "ORDER BY blogs.created_at DESC" in str(list_query)

    @pytest.mark.asyncio
    async def test_malformed_category_filter_matches_nothing(self, mock_db_session):
        page = await self.service.list_blogs(mock_db_session, page=1, limit=10, category="bogus")
        assert page.total == 0 and page.blogs == []
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("q", [None, "", "   "])
    async def test_search_requires_query(self, mock_db_session, q):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.search_blogs(mock_db_session, q, page=1, limit=10)
        assert exc_info.value.message == "Search query is required"

    @pytest.mark.asyncio
    async def test_search_with_only_punctuation_is_empty(self, mock_db_session):
        page = await self.service.search_blogs(mock_db_session, "?!*", page=1, limit=10)
        assert page.total == 0
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_search_returns_page(self, mock_db_session, db_result, make_blog):
        rows = [make_blog(title="Rust in production")]
        mock_db_session.execute.side_effect = [db_result(count=1), db_result(rows=rows)]

        page = await self.service.search_blogs(mock_db_session, "rust", page=1, limit=10)

        assert [b.title for b in page.blogs] == ["Rust in production"]
        assert page.total_pages == 1

    @pytest.mark.asyncio
    async def test_search_query_filters_deleted_and_orders_by_rank(self, mock_db_session, db_result):
        mock_db_session.execute.side_effect = [db_result(count=0), db_result(rows=[])]

        await self.service.search_blogs(mock_db_session, "rust & async", page=2, limit=5)

        count_sql, list_sql = (
            _postgres_sql(call.args[0]) for call in mock_db_session.execute.await_args_list
        )
        match = "blogs.search_vector @@ to_tsquery('english', 'rust | async')"
        for sql in (count_sql, list_sql):
            assert "blogs.is_deleted" in sql
            assert match in sql
        assert re.search(
            r"ORDER BY ts_rank\(blogs\.search_vector, to_tsquery\('english', 'rust \| async'\)\) DESC, "
            r"blogs\.created_at DESC",
            list_sql,
        )
        assert re.search(r"LIMIT 5 OFFSET 5", list_sql)

    def test_search_terms_split_on_non_word_characters(self):
        assert search_terms("rust & async-io!") == ["rust", "async", "io"]
