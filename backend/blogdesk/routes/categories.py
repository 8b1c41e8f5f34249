"""
Blogdesk Backend: Admin Category Routes
=========================================

What:  Authenticated CRUD for categories under /api/categories (JSON bodies).
How:   Body validation errors become 400 through the RequestValidationError
       handler; duplicates raise ConflictError (400).
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blogdesk.database import get_db_session
from blogdesk.dependencies import require_admin
from blogdesk.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from blogdesk.schemas.common import ErrorResponse, MessageResponse
from blogdesk.services.category_service import category_service

router = APIRouter(
    prefix="/api/categories",
    tags=["Categories"],
    dependencies=[Depends(require_admin)],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)


@router.post(
    "",
    status_code=201,
    response_model=CategoryResponse,
    responses={400: {"description": "Invalid or duplicate name", "model": ErrorResponse}},
)
async def create_category(data: CategoryCreate, db: AsyncSession = Depends(get_db_session)):
    return await category_service.create_category(db, data)


@router.get("", response_model=List[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db_session)):
    return await category_service.list_categories(db)


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"description": "Category not found", "model": ErrorResponse}},
)
async def get_category(category_id: str, db: AsyncSession = Depends(get_db_session)):
    return await category_service.get_category(db, category_id)


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={
        400: {"description": "Invalid or duplicate name", "model": ErrorResponse},
        404: {"description": "Category not found", "model": ErrorResponse},
    },
)
async def update_category(
    category_id: str,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db_session),
):
    return await category_service.update_category(db, category_id, data)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Category not found", "model": ErrorResponse}},
)
async def delete_category(category_id: str, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    await category_service.delete_category(db, category_id)
    return MessageResponse(message="Category deleted successfully")
