"""
api/routes/v1/admins.py -- Admin account and login REST endpoints.

Routes:
  POST   /api/v1/admins/login   -- credentials -> bearer token (rate-limited)
  POST   /api/v1/admins         -- register a new admin
  GET    /api/v1/admins/me      -- current admin (requires auth)
  PUT    /api/v1/admins/me      -- rename current admin (requires auth)
  DELETE /api/v1/admins/me      -- delete current admin (requires auth)
  POST   /api/v1/admins/verify  -- resolve a token to the admin it names

Security:
  POST /login is rate-limited per client IP (LOGIN_RATE_LIMIT).
  Wrong password and unknown email produce the same 401 body; see
  AdminService.authenticate() for the timing side.
  Cache-Control: no-store on token responses.

Handlers are plain `def` so Starlette runs each one on its thread pool; the
stores block on database I/O. Domain errors (InvalidCredentialsError,
TokenError, AdminAlreadyExistsError, ...) are not caught here -- the handler
in api/main.py maps them to statuses.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import (
    AdminCreate,
    AdminResponse,
    AdminUpdate,
    LoginRequest,
    TokenResponse,
    TokenVerifyRequest,
)
from auth.dependencies import get_current_admin
from auth.models import AdminAccount
from auth.service import AdminService
from auth.strategies import Authenticator
from auth.tokens import TokenService
from core.config import get_settings
from core.errors import AdminAlreadyExistsError

logger = logging.getLogger("sigma.api.admins")

# Auth policy:
# - POST   /api/v1/admins/login:   public -- login endpoint must be unauthenticated
# - POST   /api/v1/admins:         public -- first admin has nobody to authenticate as
# - POST   /api/v1/admins/verify:  public -- the token in the body is the credential
# - GET    /api/v1/admins/me:      requires auth (get_current_admin)
# - PUT    /api/v1/admins/me:      requires auth (get_current_admin)
# - DELETE /api/v1/admins/me:      requires auth (get_current_admin)
router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit(get_settings().login_rate_limit)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/admins/login", response_model=TokenResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange credentials for a bearer token.

    body.strategy picks the credential kind ("password" by default). Failures
    raise InvalidCredentialsError / TokenError, both answered with 401.
    """
    authenticator: Authenticator = request.app.state.authenticator
    token = authenticator.login(body.to_credentials())
    resp = JSONResponse(status_code=200, content=TokenResponse(token=token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/admins", response_model=AdminResponse, status_code=201)
def create_admin(request: Request, body: AdminCreate) -> AdminResponse:
    """Register a new admin.

    The find_one() pre-check only gives the common case a cheap answer. A
    concurrent registration can still slip between the check and the insert;
    the store's unique constraint then raises AdminAlreadyExistsError, which
    is answered with the same 409.
    """
    admin_service: AdminService = request.app.state.admin_service
    if admin_service.find_one(body.email) is not None:
        raise AdminAlreadyExistsError(body.email)
    admin = admin_service.register_admin(body.email, body.name, body.password)
    return AdminResponse.from_account(admin)


@router.post("/admins/verify", response_model=AdminResponse)
def verify_admin(request: Request, body: TokenVerifyRequest) -> AdminResponse:
    """Return the admin named by a token. 401 if the token is invalid, 404 if the admin is gone."""
    token_service: TokenService = request.app.state.token_service
    admin_service: AdminService = request.app.state.admin_service
    claims = token_service.verify_token(body.token)
    admin = admin_service.find_one(claims.subject)
    if admin is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Admin not found."},
        )
    return AdminResponse.from_account(admin)


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/admins/me", response_model=AdminResponse)
def read_admin(current_admin: AdminAccount = Depends(get_current_admin)) -> AdminResponse:
    """Return the currently authenticated admin."""
    return AdminResponse.from_account(current_admin)


@router.put("/admins/me", response_model=AdminResponse)
def update_admin(
    request: Request,
    body: AdminUpdate,
    current_admin: AdminAccount = Depends(get_current_admin),
) -> AdminResponse:
    """Rename the currently authenticated admin."""
    admin_service: AdminService = request.app.state.admin_service
    admin = admin_service.update_one(current_admin.email, body.new_name)
    if admin is None:
        # Deleted between authentication and the update.
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Admin not found."},
        )
    return AdminResponse.from_account(admin)


@router.delete("/admins/me", status_code=204)
def delete_admin(
    request: Request,
    current_admin: AdminAccount = Depends(get_current_admin),
) -> Response:
    """Permanently delete the currently authenticated admin.

    Tokens already issued for this admin stay cryptographically valid until
    they expire, but get_current_admin() no longer resolves their subject.
    """
    admin_service: AdminService = request.app.state.admin_service
    admin_service.delete_one(current_admin.email)
    return Response(status_code=204)
