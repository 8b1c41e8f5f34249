# Importing the models registers them on Base.metadata (Alembic, create_all)
from blogdesk.models.admin import Admin
from blogdesk.models.blog import Blog
from blogdesk.models.category import Category, slugify_name

__all__ = ["Admin", "Blog", "Category", "slugify_name"]
