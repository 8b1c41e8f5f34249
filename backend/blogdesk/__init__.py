"""
Blogdesk Backend: Application Package
=======================================

What: Blog and category CRUD service with an admin write path, a public read
      path, image uploads to an external media host, and full-text search.
Who:  Imported by uvicorn (`blogdesk.main:app`), Alembic, the admin CLI and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │     Routes (admin / public API)     │  ← HTTP concerns, auth gate
    ├─────────────────────────────────────┤
    │   Services (blogs, categories, ...) │  ← validation, store operations
    ├──────────────────┬──────────────────┤
    │  Models/Schemas  │   Image hosts    │  ← SQLAlchemy ORM, Pydantic, media
    ├──────────────────┴──────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
