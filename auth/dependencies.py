"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer authentication.

Tokens arrive as `Authorization: Bearer <token>`. A valid token's subject is
resolved to an AdminAccount through AdminService.

try_get_current_admin() is the soft variant (returns None on failure).
get_current_admin() wraps it and raises HTTP 401 if unauthenticated.

Layer rule: no imports from api/ or sessions/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import AdminAccount
from auth.service import AdminService
from auth.tokens import TokenService
from core.errors import TokenError


def bearer_token(request: Request) -> str | None:
    """Return the raw token from the Authorization header, or None."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def try_get_current_admin(request: Request) -> AdminAccount | None:
    """Authenticate the request by bearer token.

    Returns the AdminAccount on success, None on any failure: no header, bad
    token, or a token whose subject no longer exists. Never raises for
    authentication reasons -- store failures still propagate as RepositoryError.
    """
    token = bearer_token(request)
    if token is None:
        return None

    token_service: TokenService = request.app.state.token_service
    admin_service: AdminService = request.app.state.admin_service
    try:
        claims = token_service.verify_token(token)
    except TokenError:
        return None
    return admin_service.find_one(claims.subject)


def get_current_admin(request: Request) -> AdminAccount:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(admin: AdminAccount = Depends(get_current_admin)): ...
    """
    admin = try_get_current_admin(request)
    if admin is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
            headers={"WWW-Authenticate": "Bearer"},
        )
    return admin
