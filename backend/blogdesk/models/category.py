"""
Blogdesk Backend: Category SQLAlchemy Model
=============================================

What:  ORM model for the `categories` table.
How:   `name` is trimmed and `slug` re-derived by an attribute validator every
       time `name` is assigned, so the slug is always current before flush.

Slug rule:
    name.lower(), then every character outside [a-zA-Z0-9] becomes "-".
    One dash per character; nothing is collapsed or stripped.
    "Tech News!" → "tech-news-"
"""

import re
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, validates

from blogdesk.database import Base

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


def slugify_name(name: str) -> str:
    """Derives a category slug from its (already trimmed) name."""
    return _NON_ALPHANUMERIC.sub("-", name.lower())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Category(Base):
    """
    A blog category.

    Lifecycle:
        Created, renamed and hard-deleted through the admin API. Blogs keep
        a plain id reference, so deleting a category can leave blogs pointing
        at nothing; those serialize with `category: null`.
    """

    __tablename__ = "categories"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)

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

    __mapper_args__ = {"eager_defaults": True}

    @validates("name")
    def _trim_name_and_derive_slug(self, key: str, value: str) -> str:
        name = value.strip()
        self.slug = slugify_name(name)
        return name

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, slug='{self.slug}')>"
