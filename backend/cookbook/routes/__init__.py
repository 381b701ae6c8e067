# Routes package init
"""
Family Cookbook Backend — API Routes Package
==============================================

Route Inventory:
    - auth.py:     /api/login, /api/logout, /api/check-auth
    - pending.py:  /api/upload-document, /api/pending-recipes[...]   (session only)
    - recipes.py:  /api/recipes[...], /api/categories
    - health.py:   /health

Routes stay thin: read the request, resolve identity through the
dependencies, call one service method, return a schema.
"""
