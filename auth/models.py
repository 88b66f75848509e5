"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and services do
the work; the API layer maps these to its own Pydantic response models.

Layer rule: no imports from api/ or sessions/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class AdminAccount:
    """An administrator identity.

    email is the natural key (unique in the admins table). password_hash is
    the Argon2 encoded hash with its embedded salt -- the plaintext is never stored
    and never leaves AdminStore.create().
    """

    email: str
    name: str
    password_hash: str


@dataclass
class TokenClaims:
    """Decoded payload of a bearer token.

    subject is opaque to the token layer: an admin email for login tokens,
    but any stable principal identifier works. expires_at is always exactly
    issued_at + TOKEN_TTL.
    """

    subject: str
    issued_at: datetime
    expires_at: datetime
    issuer: str


@dataclass
class Credentials:
    """Input to Authenticator.authenticate().

    strategy is the explicit discriminator ("password" or "token"). Each
    strategy reads only the fields it needs and reports the first missing one.
    """

    strategy: str
    email: str | None = None
    password: str | None = None
    token: str | None = None
