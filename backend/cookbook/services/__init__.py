# Services package init
"""
Family Cookbook Backend — Services Layer
==========================================

What:  Business logic between the routes (HTTP) and the database.

Service Inventory:
    - extractors:      DocumentExtractor interface + txt/docx/pdf implementations
    - FileService:     upload validation, temporary storage, extraction, cleanup
    - AuthService:     bcrypt credentials, server-side sessions, admin seed
    - PendingService:  moderation queue and atomic publish
    - RecipeService:   browse/search, aggregates, ratings, comments, categories

Services never read the HTTP request. They receive an AsyncSession and plain
values, which lets the tests drive them with a real SQLite database or a mock.
"""
