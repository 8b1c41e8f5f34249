"""
Blogdesk Backend: Blog SQLAlchemy Model
=========================================

What:  ORM model for the `blogs` table.
How:   Soft-deleted via `is_deleted`; full-text search runs against the
       generated `search_vector` column (title + content) through a GIN index.
Who:   BlogService for CRUD/search; Alembic for the schema.

Table Design:
    - category_id: plain UUID column, no foreign key. Category deletion does
      not cascade or block; the `category` relationship resolves to None.
    - images: JSONB array of {"url", "public_id"} in upload order.
    - search_vector: STORED generated column, never written by the ORM and
      deferred so ordinary selects do not fetch it.

Query Patterns:
    - Lists:  WHERE is_deleted = false ORDER BY created_at DESC OFFSET/LIMIT
    - Search: WHERE is_deleted = false AND search_vector @@ to_tsquery(...)
              ORDER BY ts_rank(search_vector, query) DESC
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import Boolean, Computed, Index, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, TSVECTOR, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from blogdesk.database import Base
from blogdesk.models.category import Category

# Text search configuration shared by the generated column and search queries
SEARCH_CONFIG = "english"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Blog(Base):
    """
    A blog post.

    Lifecycle:
        1. Created by an admin with 0-5 uploaded images (is_deleted = false)
        2. Updated by an admin; new files replace the whole image list
        3. Soft-deleted (is_deleted = true); the row and images are kept,
           and every list/search/public read filters it out
    """

    __tablename__ = "blogs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)

    category_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    category: Mapped[Optional[Category]] = relationship(
        Category,
        primaryjoin="foreign(Blog.category_id) == Category.id",
        viewonly=True,
        lazy="selectin",
    )

    images: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )
    is_deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    search_vector: Mapped[str] = mapped_column(
        TSVECTOR,
        Computed(
            f"to_tsvector('{SEARCH_CONFIG}', coalesce(title, '') || ' ' || coalesce(content, ''))",
            persisted=True,
        ),
        deferred=True,
    )

    __table_args__ = (
        Index("idx_blogs_created_at", "created_at"),
        Index("idx_blogs_is_deleted", "is_deleted"),
        Index("idx_blogs_category_id", "category_id"),
        Index("idx_blogs_search_vector", "search_vector", postgresql_using="gin"),
    )

    __mapper_args__ = {"eager_defaults": True}

    @validates("title")
    def _trim_title(self, key: str, value: str) -> str:
        return value.strip()

    def __repr__(self) -> str:
        return f"<Blog(id={self.id}, is_deleted={self.is_deleted}, created_at='{self.created_at}')>"
