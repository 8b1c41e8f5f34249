# Routes package init
"""
Blogdesk Backend: API Routes Package
======================================

Route Inventory:
    - admin.py:       POST /api/admin/login, GET /api/admin/me
    - blogs.py:       /api/blogs        (admin CRUD, auth required)
    - categories.py:  /api/categories   (admin CRUD, auth required)
    - public.py:      /api/public/...   (reads and search, no auth)
    - files.py:       GET /api/files/{path} (local image host only)
    - health.py:      GET /_health

Handlers stay thin: parse the request, call a service, return the result.
"""
