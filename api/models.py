"""
API request and response models for Sigma REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
sessions/models.py, which own the internal domain representation. Route
handlers map between the two.

Boundary validation lives here: email syntax, name length and the password
policy are checked before any service is called. The core only enforces what
the database can (email uniqueness).
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import AdminAccount, Credentials
from auth.tokens import TOKEN_TTL
from sessions.models import TableSession

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

_SPECIAL_CHARACTERS = "!@#$%^&*()-_=+[{]}\\|;:'\",<.>/?"


# ---------------------------------------------------------------------------
# Shared envelopes
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Admin request models
# ---------------------------------------------------------------------------


class AdminCreate(BaseModel):
    """Request body for POST /api/v1/admins."""

    email: str = Field(max_length=320, pattern=EMAIL_PATTERN)
    name: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=8, max_length=1024)

    @field_validator("password")
    @classmethod
    def check_password_policy(cls, value: str) -> str:
        """Require at least one uppercase, lowercase, digit and special character."""
        if not any(c.isupper() for c in value):
            raise ValueError("Password must contain at least one uppercase letter")
        if not any(c.islower() for c in value):
            raise ValueError("Password must contain at least one lowercase letter")
        if not any(c.isdigit() for c in value):
            raise ValueError("Password must contain at least one digit")
        if not any(c in _SPECIAL_CHARACTERS for c in value):
            raise ValueError("Password must contain at least one special character")
        return value


class AdminUpdate(BaseModel):
    """Request body for PUT /api/v1/admins/me."""

    model_config = ConfigDict(str_strip_whitespace=True)

    new_name: str = Field(min_length=1, max_length=255)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/admins/login.

    strategy selects which of the other fields are read. Missing fields are
    reported by the authenticator, not here, so every strategy shares one body.
    """

    strategy: Literal["password", "token"] = "password"
    email: Optional[str] = Field(default=None, max_length=320)
    password: Optional[str] = Field(default=None, max_length=1024)
    token: Optional[str] = Field(default=None, max_length=4096)

    def to_credentials(self) -> Credentials:
        return Credentials(
            strategy=self.strategy,
            email=self.email,
            password=self.password,
            token=self.token,
        )


class TokenVerifyRequest(BaseModel):
    """Request body for POST /api/v1/admins/verify."""

    token: str = Field(min_length=1, max_length=4096)


# ---------------------------------------------------------------------------
# Admin response models
# ---------------------------------------------------------------------------


class AdminResponse(BaseModel):
    """Public view of an admin. The password hash is never serialized."""

    model_config = ConfigDict(frozen=True)

    email: str
    name: str

    @classmethod
    def from_account(cls, admin: AdminAccount) -> "AdminResponse":
        return cls(email=admin.email, name=admin.name)


class TokenResponse(BaseModel):
    """Response for a successful login."""

    model_config = ConfigDict(frozen=True)

    token: str
    token_type: str = "bearer"
    expires_in: int = int(TOKEN_TTL.total_seconds())


# ---------------------------------------------------------------------------
# Table session models
# ---------------------------------------------------------------------------


class TableSessionCreate(BaseModel):
    """Request body for POST /api/v1/table-sessions."""

    table_id: uuid.UUID
    order_id: uuid.UUID


class CheckoutUpdate(BaseModel):
    """Request body for PUT /api/v1/table-sessions/{id}/checkout. null detaches."""

    checkout_id: Optional[uuid.UUID] = None


class TableSessionResponse(BaseModel):
    """Full view of one table session."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    table_id: uuid.UUID
    order_id: uuid.UUID
    checkout_id: Optional[uuid.UUID]
    is_active: bool
    created_at: datetime

    @classmethod
    def from_session(cls, session: TableSession) -> "TableSessionResponse":
        return cls(
            id=session.id,
            table_id=session.table_id,
            order_id=session.order_id,
            checkout_id=session.checkout_id,
            is_active=session.is_active,
            created_at=session.created_at,
        )
