"""
Blogdesk Backend: Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    - Request ID runs first so every later log line can carry the ID
    - Access Log measures the full handler duration and final status
"""
