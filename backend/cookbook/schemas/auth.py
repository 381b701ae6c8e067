"""
Family Cookbook Backend — Authentication Schemas
==================================================

What:  Request/response bodies for /api/login, /api/logout and /api/check-auth.
"""

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=80)
    password: str = Field(min_length=1, max_length=256)


class LoginResponse(BaseModel):
    success: bool = Field(default=True)
    name: str = Field(description="Display name of the logged-in user")


class AuthStatusResponse(BaseModel):
    """
    What:  Answer to "am I logged in?".
    Why:   The UI calls this on load to decide whether to show moderator tools.

    `name` is omitted from the JSON when not authenticated.
    """
    authenticated: bool
    name: Optional[str] = None
