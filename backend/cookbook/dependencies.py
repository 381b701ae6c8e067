"""
Family Cookbook Backend — Request Dependencies
================================================

What:  FastAPI dependencies that hand each handler its collaborators and the
       caller's identity.
How:   The application factory stores one AuthService and one FileService on
       `app.state`; these functions read them from the request. Identity is
       resolved from the session cookie per request and never stored globally.

    get_identity      → Optional[Identity]   (public routes that adapt to login)
    require_identity  → Identity or 401      (the auth gate for protected routes)
"""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cookbook.database import get_db_session
from cookbook.exceptions import AuthenticationRequiredError
from cookbook.services.auth_service import AuthService, Identity
from cookbook.services.file_service import FileService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_file_service(request: Request) -> FileService:
    return request.app.state.file_service


async def get_identity(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[Identity]:
    """Identity of the caller, or None when the request has no valid session."""
    cookie_name = request.app.state.settings.session_cookie_name
    identity = await auth.resolve(db, request.cookies.get(cookie_name))
    request.state.identity = identity
    return identity


async def require_identity(
    identity: Optional[Identity] = Depends(get_identity),
) -> Identity:
    """
    Auth gate for protected routes.

    Raises:
        AuthenticationRequiredError (401) before the handler body runs.
    """
    if identity is None:
        raise AuthenticationRequiredError()
    return identity
