"""
Blogdesk Backend: Admin Blog Routes
=====================================

What:  Authenticated CRUD for blog posts under /api/blogs.
How:   Thin handlers: read the multipart form, build BlogCreate/BlogUpdate,
       delegate to BlogService. The router depends on `require_admin`, so
       the auth gate runs before every handler here.

Endpoints:
    POST   /api/blogs        multipart form + up to 5 `images` files → 201
    GET    /api/blogs        paginated, non-deleted, newest first
    GET    /api/blogs/{id}   includes soft-deleted blogs
    PUT    /api/blogs/{id}   partial update; new files replace all images
    DELETE /api/blogs/{id}   soft delete (idempotent)
"""

import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.database import get_db_session
from blogdesk.dependencies import get_image_host, get_page_params, require_admin
from blogdesk.schemas.blog import BlogCreate, BlogListResponse, BlogResponse, BlogUpdate
from blogdesk.schemas.common import ErrorResponse, MessageResponse
from blogdesk.services.blog_service import ImageFile, blog_service
from blogdesk.services.image_host_base import ImageHost

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/blogs",
    tags=["Blogs"],
    dependencies=[Depends(require_admin)],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


async def read_uploads(images: Optional[List[UploadFile]]) -> List[ImageFile]:
    """Read uploaded files into memory, skipping empty file inputs."""
    files = []
    for upload in images or []:
        content = await upload.read()
        if not upload.filename and not content:
            continue
        files.append((upload.filename, content))
    return files


@router.post(
    "",
    status_code=201,
    response_model=BlogResponse,
    responses={400: {"description": "Invalid fields or files", "model": ErrorResponse}},
    summary="Create a blog post",
)
async def create_blog(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    db: AsyncSession = Depends(get_db_session),
    image_host: ImageHost = Depends(get_image_host),
):
    data = BlogCreate.from_form(
        title=title,
        description=description,
        content=content,
        category=category,
        author=author,
    )
    files = await read_uploads(images)
    return await blog_service.create_blog(db, data, files, image_host)


@router.get("", response_model=BlogListResponse, summary="List blog posts")
async def list_blogs(
    paging: Tuple[int, int] = Depends(get_page_params),
    db: AsyncSession = Depends(get_db_session),
) -> BlogListResponse:
    page, limit = paging
    return await blog_service.list_blogs(db, page=page, limit=limit)


@router.get(
    "/{blog_id}",
    response_model=BlogResponse,
    responses={404: {"description": "Blog not found", "model": ErrorResponse}},
    summary="Get a blog post (including soft-deleted)",
)
async def get_blog(blog_id: str, db: AsyncSession = Depends(get_db_session)):
    return await blog_service.get_blog(db, blog_id, include_deleted=True)


@router.put(
    "/{blog_id}",
    response_model=BlogResponse,
    responses={
        400: {"description": "Invalid fields or files", "model": ErrorResponse},
        404: {"description": "Blog not found", "model": ErrorResponse},
    },
    summary="Update a blog post",
)
async def update_blog(
    blog_id: str,
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    db: AsyncSession = Depends(get_db_session),
    image_host: ImageHost = Depends(get_image_host),
):
    data = BlogUpdate.from_form(
        title=title,
        description=description,
        content=content,
        category=category,
        author=author,
    )
    files = await read_uploads(images)
    return await blog_service.update_blog(db, blog_id, data, files, image_host)


@router.delete(
    "/{blog_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Blog not found", "model": ErrorResponse}},
    summary="Soft-delete a blog post",
)
async def delete_blog(blog_id: str, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    await blog_service.delete_blog(db, blog_id)
    return MessageResponse(message="Blog deleted successfully")
