"""
api/main.py -- FastAPI application entry point for Sigma.

Exposes the admin and table-session services over HTTP. The services
themselves are transport-agnostic; this module only wires them up and maps
their errors to status codes.

Run with:      uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware        -- adds CORS headers for allowed browser origins
  2. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan builds the one Engine (connection pool) the process uses, the stores
and services on top of it, and disposes the Engine on shutdown.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.admins import router as admins_router
from api.routes.v1.table_sessions import router as table_sessions_router
from auth.service import AdminService
from auth.store import AdminStore
from auth.strategies import Authenticator
from auth.tokens import TokenService
from core.config import get_settings
from core.database import create_db_engine, ping
from core.errors import (
    AdminAlreadyExistsError,
    HashingError,
    InvalidCredentialsError,
    MissingFieldError,
    RepositoryError,
    SigmaError,
    TableOccupiedError,
    TokenError,
    UnsupportedStrategyError,
)
from sessions.service import TableSessionService
from sessions.store import TableSessionStore

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("sigma.api")


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build and tear down the process-wide resources.

    Everything before yield runs on startup; everything after yield runs on
    shutdown. The Engine is created first because both stores share it.
    """
    settings = get_settings()
    logger.info("Sigma API starting up")
    app.state.engine = create_db_engine(settings.database_url, pool_size=settings.db_pool_size)
    app.state.admin_service = AdminService(AdminStore(app.state.engine))
    app.state.token_service = TokenService(secret=settings.secret_key, issuer=settings.service_name)
    app.state.authenticator = Authenticator(app.state.admin_service, app.state.token_service)
    app.state.table_session_service = TableSessionService(
        TableSessionStore(app.state.engine),
        allow_concurrent_sessions=settings.allow_concurrent_table_sessions,
    )
    logger.info(
        "Services initialized (issuer=%s, concurrent_table_sessions=%s)",
        settings.service_name,
        settings.allow_concurrent_table_sessions,
    )

    yield

    app.state.engine.dispose()
    logger.info("Sigma API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Sigma API",
    description="Administrator authentication and table-session records.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(admins_router, prefix="/api/v1", tags=["Admins"])
app.include_router(table_sessions_router, prefix="/api/v1", tags=["Table Sessions"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------

# Most specific class first: AdminAlreadyExistsError is a RepositoryError.
_DOMAIN_ERRORS: list[tuple[type[SigmaError], int, str]] = [
    (AdminAlreadyExistsError, 409, "conflict"),
    (TableOccupiedError, 409, "table_occupied"),
    (InvalidCredentialsError, 401, "bad_credentials"),
    (TokenError, 401, "unauthorized"),
    (MissingFieldError, 400, "missing_field"),
    (UnsupportedStrategyError, 400, "unsupported_strategy"),
    (HashingError, 500, "internal_error"),
    (RepositoryError, 500, "database_error"),
]


@app.exception_handler(SigmaError)
async def domain_error_handler(request: Request, exc: SigmaError) -> JSONResponse:
    """Map a domain error raised by a service to its HTTP status.

    Credential and token failures share fixed messages that never mention
    whether the email is registered. Server-side failures get a generic
    message; their cause was already logged by the store.
    """
    status, code = 500, "internal_error"
    for error_type, error_status, error_code in _DOMAIN_ERRORS:
        if isinstance(exc, error_type):
            status, code = error_status, error_code
            break
    message = str(exc) if status < 500 else "An unexpected error occurred."
    response = JSONResponse(
        status_code=status,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message)).model_dump(),
    )
    if status == 401:
        response.headers["WWW-Authenticate"] = "Bearer"
        response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with a structured error when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="rate_limited",
                message="Too many requests.",
                detail=str(exc),
            )
        ).model_dump(),
    )
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or path params fail validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route handlers raise HTTPException with detail={"code": ..., "message": ...}.
    When detail is already a dict, use it directly as the error field rather
    than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=exc.headers,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No rate limit applied.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", include_in_schema=True, tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version and a database probe."""
    database = "ok" if ping(request.app.state.engine) else "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})
