# Services package init
"""
Blogdesk Backend: Services Layer
==================================

What:  Business logic between the routes (HTTP) and the database.
How:   Stateless service singletons receive the request's session and the
       app's collaborators as arguments.

Service Inventory:
    - BlogService / CategoryService / AdminService: CRUD, search, login
    - ImageHost (abstract): CloudinaryImageHost, LocalImageHost
    - AuthGate (abstract): JWTAuthGate
    - params: pagination and id parsing helpers
"""
