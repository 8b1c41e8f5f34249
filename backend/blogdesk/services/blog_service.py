"""
Blogdesk Backend: Blog Service (Business Logic Orchestrator)
==============================================================

What:  Create/read/update/soft-delete/search for blog posts, including the
       image upload workflow against the configured ImageHost.
How:   Stateless methods; the route passes the request's AsyncSession and
       the app's ImageHost. Reads return ORM objects with `category` loaded
       (selectin); lists and search return a BlogListResponse page.
Who:   Admin blog routes and the public read routes.

Create flow (POST /api/blogs):
    ┌──────────┐    ┌────────────┐    ┌──────────────┐    ┌──────────┐
    │ Validate │───▶│  Validate  │───▶│   Upload     │───▶│  Insert  │
    │  fields  │    │   files    │    │ sequentially │    │  (flush) │
    └──────────┘    └────────────┘    └──────────────┘    └──────────┘
    Upload failure → already-uploaded images are deleted, nothing inserted.

Image replacement (PUT with files):
    1. Upload every new file (failure → discard the new uploads, fail)
    2. Assign the new images list and flush
    3. Delete the previous images, logging failures
"""

import logging
import re
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.config import settings
from blogdesk.database import translate_db_errors
from blogdesk.exceptions import ValidationError, NotFoundError
from blogdesk.models.blog import SEARCH_CONFIG, Blog
from blogdesk.schemas.blog import BlogCreate, BlogListResponse, BlogResponse, BlogUpdate
from blogdesk.services.image_host_base import ImageHost
from blogdesk.services.params import page_offset, parse_uuid, total_pages

logger = logging.getLogger(__name__)

# (original filename, bytes) as read from the multipart upload
ImageFile = Tuple[Optional[str], bytes]


def search_terms(q: str) -> List[str]:
    """Words of a search query; joined with OR for to_tsquery."""
    return re.findall(r"\w+", q)


class BlogService:
    """
    Business logic for blog posts.

    Error Handling:
        Application exceptions (ValidationError, NotFoundError,
        ImageHostError) propagate unchanged; anything else raised while
        talking to the database becomes DatabaseError.
    """

    # ── Images ────────────────────────────────────────────────────────────

    def _check_files(self, image_host: ImageHost, files: Sequence[ImageFile]) -> None:
        if len(files) > settings.max_images_per_blog:
            raise ValidationError(
                message=f"A blog can have at most {settings.max_images_per_blog} images",
                field="images",
                location="form",
                context={"count": len(files)},
            )
        for filename, content in files:
            image_host.validate_upload(filename, content)

    async def _upload_all(self, image_host: ImageHost, files: Sequence[ImageFile]) -> List[dict]:
        """Uploads in order; on failure removes whatever this call uploaded."""
        uploaded = []
        try:
            for filename, content in files:
                image = await image_host.upload(content, filename)
                uploaded.append(image.as_dict())
        except Exception:
            await self._discard_images(image_host, uploaded)
            raise
        return uploaded

    async def _discard_images(self, image_host: ImageHost, images: Sequence[dict]) -> None:
        """Best-effort delete; failures are logged, never raised."""
        for image in images:
            public_id = image.get("public_id")
            if not public_id:
                continue
            try:
                await image_host.delete(public_id)
            except Exception as e:
                logger.warning("Failed to delete image %s: %s", public_id, str(e))

    # ── Queries ───────────────────────────────────────────────────────────

    async def _find(self, db: AsyncSession, blog_id, include_deleted: bool = True) -> Optional[Blog]:
        bid = parse_uuid(blog_id)
        if bid is None:
            return None
        query = select(Blog).where(Blog.id == bid)
        if not include_deleted:
            query = query.where(Blog.is_deleted.is_(False))
        result = await db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def _page(
        self,
        db: AsyncSession,
        conditions: list,
        order_by: list,
        page: int,
        limit: int,
    ) -> BlogListResponse:
        count_result = await db.execute(select(func.count(Blog.id)).where(*conditions))
        total = count_result.scalar() or 0

        result = await db.execute(
            select(Blog)
            .where(*conditions)
            .order_by(*order_by)
            .offset(page_offset(page, limit))
            .limit(limit)
        )
        blogs = list(result.scalars().all())

        return BlogListResponse(
            blogs=[BlogResponse.model_validate(blog) for blog in blogs],
            current_page=page,
            total_pages=total_pages(total, limit),
            total=total,
        )

    @staticmethod
    def _empty_page(page: int) -> BlogListResponse:
        return BlogListResponse(blogs=[], current_page=page, total_pages=0, total=0)

    # ── Operations ────────────────────────────────────────────────────────

    async def create_blog(
        self,
        db: AsyncSession,
        data: BlogCreate,
        files: Sequence[ImageFile],
        image_host: ImageHost,
    ) -> Blog:
        """
        Validate files, upload them, then insert the blog.

        Raises:
            ValidationError: too many files or a bad file (nothing uploaded)
            ImageHostError:  an upload failed (earlier uploads discarded)
            DatabaseError:   the insert failed (uploads discarded)
        """
        self._check_files(image_host, files)
        images = await self._upload_all(image_host, files)

        try:
            async with translate_db_errors("creating blog", title=data.title):
                blog = Blog(
                    title=data.title,
                    description=data.description,
                    content=data.content,
                    author=data.author,
                    category_id=data.category,
                    images=images,
                    is_deleted=False,
                )
                db.add(blog)
                await db.flush()
                logger.info("Blog created: %s (%d images)", blog.id, len(images))
                return await self._find(db, blog.id)
        except Exception:
            await self._discard_images(image_host, images)
            raise

    async def list_blogs(
        self,
        db: AsyncSession,
        page: int,
        limit: int,
        category: Optional[str] = None,
    ) -> BlogListResponse:
        """
        Non-deleted blogs, newest first.

        `category` filters by category id; a malformed id matches nothing.
        """
        conditions = [Blog.is_deleted.is_(False)]
        if category:
            category_id = parse_uuid(category)
            if category_id is None:
                return self._empty_page(page)
            conditions.append(Blog.category_id == category_id)

        async with translate_db_errors("listing blogs", page=page, limit=limit):
            return await self._page(db, conditions, [Blog.created_at.desc()], page, limit)

    async def get_blog(self, db: AsyncSession, blog_id: str, include_deleted: bool = True) -> Blog:
        """Admin reads see soft-deleted blogs; public reads pass include_deleted=False."""
        async with translate_db_errors("fetching blog", blog_id=str(blog_id)):
            blog = await self._find(db, blog_id, include_deleted=include_deleted)
        if blog is None:
            raise NotFoundError(resource="blog", resource_id=str(blog_id))
        return blog

    async def update_blog(
        self,
        db: AsyncSession,
        blog_id: str,
        data: BlogUpdate,
        files: Sequence[ImageFile],
        image_host: ImageHost,
    ) -> Blog:
        """
        Apply the form fields that were sent; new files replace all images.

        Only title, description, content, category and author can change.
        """
        blog = await self.get_blog(db, blog_id)
        updates = data.model_dump(exclude_unset=True)
        if "category" in updates:
            updates["category_id"] = updates.pop("category")

        new_images = None
        if files:
            self._check_files(image_host, files)
            new_images = await self._upload_all(image_host, files)
        old_images = list(blog.images or [])

        try:
            async with translate_db_errors("updating blog", blog_id=str(blog_id)):
                for field, value in updates.items():
                    setattr(blog, field, value)
                if new_images is not None:
                    blog.images = new_images
                await db.flush()
        except Exception:
            if new_images:
                await self._discard_images(image_host, new_images)
            raise

        if new_images is not None:
            await self._discard_images(image_host, old_images)

        logger.info(
            "Blog updated: %s (fields=%s, images_replaced=%s)",
            blog.id,
            ", ".join(updates) or "none",
            new_images is not None,
        )
        async with translate_db_errors("reloading blog", blog_id=str(blog_id)):
            return await self._find(db, blog.id)

    async def delete_blog(self, db: AsyncSession, blog_id: str) -> None:
        """Soft delete; repeating it on a deleted blog succeeds again."""
        blog = await self.get_blog(db, blog_id)
        async with translate_db_errors("deleting blog", blog_id=str(blog_id)):
            blog.is_deleted = True
            await db.flush()
        logger.info("Blog soft-deleted: %s", blog.id)

    async def search_blogs(self, db: AsyncSession, q: Optional[str], page: int, limit: int) -> BlogListResponse:
        """
        Full-text search over title and content of non-deleted blogs.

        Any query word may match (OR). Ordered by ts_rank, newest first on ties.
        """
        q = (q or "").strip()
        if not q:
            raise ValidationError(message="Search query is required", field="q", location="query")

        terms = search_terms(q)
        if not terms:
            return self._empty_page(page)

        ts_query = func.to_tsquery(SEARCH_CONFIG, " | ".join(terms))
        conditions = [
            Blog.is_deleted.is_(False),
            Blog.search_vector.op("@@")(ts_query),
        ]
        order_by = [func.ts_rank(Blog.search_vector, ts_query).desc(), Blog.created_at.desc()]

        async with translate_db_errors("searching blogs", q=q):
            return await self._page(db, conditions, order_by, page, limit)


blog_service = BlogService()
