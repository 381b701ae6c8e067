"""
Family Cookbook Backend — Authentication Routes
=================================================

What:  POST /api/login, POST /api/logout, GET /api/check-auth.
How:   AuthService does the work; these handlers only move the signed
       session value in and out of the cookie.

Cookie attributes:
    HttpOnly         : scripts cannot read the session
    SameSite=Lax     : not sent on cross-site POSTs
    Max-Age          : session_max_age (24h by default), fixed from login
    Secure           : SESSION_COOKIE_SECURE (enable behind HTTPS)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from cookbook.database import get_db_session
from cookbook.dependencies import get_auth_service, get_identity, require_identity
from cookbook.schemas.auth import AuthStatusResponse, LoginRequest, LoginResponse
from cookbook.schemas.common import ErrorResponse, SuccessResponse
from cookbook.services.auth_service import AuthService, Identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in and start a session",
)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    settings = request.app.state.settings
    user, cookie_value = await auth.login(db, body.username, body.password)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=cookie_value,
        max_age=settings.session_max_age,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return LoginResponse(success=True, name=user.name)


@router.post(
    "/logout",
    response_model=SuccessResponse,
    responses={401: {"description": "Not logged in", "model": ErrorResponse}},
    summary="End the current session",
)
async def logout(
    request: Request,
    response: Response,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
    auth: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    await auth.logout(db, identity)
    response.delete_cookie(request.app.state.settings.session_cookie_name)
    return SuccessResponse()


@router.get(
    "/check-auth",
    response_model=AuthStatusResponse,
    response_model_exclude_none=True,
    summary="Report whether the caller is logged in",
)
async def check_auth(
    identity: Optional[Identity] = Depends(get_identity),
) -> AuthStatusResponse:
    if identity is None:
        return AuthStatusResponse(authenticated=False)
    return AuthStatusResponse(authenticated=True, name=identity.display_name)
