"""
Blogdesk Backend: Public Read Routes
======================================

What:  Unauthenticated reads under /api/public for the blog frontend.
How:   Same services as the admin routes, but soft-deleted blogs are never
       visible here, not even by id.

Endpoints:
    GET /api/public/blogs?page&limit&category
    GET /api/public/blogs/{id}
    GET /api/public/categories
    GET /api/public/search?q&page&limit
"""

from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.database import get_db_session
from blogdesk.dependencies import get_page_params
from blogdesk.schemas.blog import BlogListResponse, BlogResponse
from blogdesk.schemas.category import CategoryResponse
from blogdesk.schemas.common import ErrorResponse
from blogdesk.services.blog_service import blog_service
from blogdesk.services.category_service import category_service

router = APIRouter(
    prefix="/api/public",
    tags=["Public"],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
)


@router.get("/blogs", response_model=BlogListResponse, summary="List published blogs")
async def list_public_blogs(
    paging: Tuple[int, int] = Depends(get_page_params),
    category: Optional[str] = Query(default=None, description="Only blogs in this category id"),
    db: AsyncSession = Depends(get_db_session),
) -> BlogListResponse:
    page, limit = paging
    return await blog_service.list_blogs(db, page=page, limit=limit, category=category)


@router.get(
    "/blogs/{blog_id}",
    response_model=BlogResponse,
    responses={404: {"description": "Blog not found", "model": ErrorResponse}},
    summary="Get a published blog",
)
async def get_public_blog(blog_id: str, db: AsyncSession = Depends(get_db_session)):
    return await blog_service.get_blog(db, blog_id, include_deleted=False)


@router.get("/categories", response_model=List[CategoryResponse], summary="List categories")
async def list_public_categories(db: AsyncSession = Depends(get_db_session)):
    return await category_service.list_categories(db)


@router.get(
    "/search",
    response_model=BlogListResponse,
    responses={400: {"description": "Missing search query", "model": ErrorResponse}},
    summary="Full-text search over published blogs",
)
async def search_blogs(
    q: Optional[str] = Query(default=None, description="Search words; any word may match"),
    paging: Tuple[int, int] = Depends(get_page_params),
    db: AsyncSession = Depends(get_db_session),
) -> BlogListResponse:
    page, limit = paging
    return await blog_service.search_blogs(db, q, page=page, limit=limit)
