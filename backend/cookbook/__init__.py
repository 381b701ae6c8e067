"""
Family Cookbook Backend — Application Package
==============================================

What: The `cookbook` package: a small recipe-sharing REST API.
Who:  Imported by uvicorn (`cookbook.main:app`), pytest, and the services themselves.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns, auth gating
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← moderation workflow, ingestion
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes stay thin: they read the request, resolve the caller's identity,
    call a service and shape the JSON response. Services take an explicit
    database session and never touch the request object.
"""

__version__ = "1.0.0"
