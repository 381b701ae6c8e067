# Schemas package init
"""
Family Cookbook Backend — API Schemas
=======================================

What:  Pydantic models for request bodies and response payloads.
How:   Kept separate from the ORM models so the API contract (for example the
       computed avgRating/ratingCount fields) can differ from the table layout.
"""
