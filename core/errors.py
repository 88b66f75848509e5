"""
core/errors.py -- Domain error taxonomy shared by auth/ and sessions/.

Stores raise RepositoryError (or its AdminAlreadyExistsError subclass) for
anything the database rejects. Services raise the credential, token and
policy errors. The API layer maps each class to an HTTP status in one place
(api/main.py) so route handlers never inspect store internals.

Not-found is not an error: lookups and partial updates return None.

Layer rule: core/ is the kernel. No imports from api/, auth/ or sessions/.
"""

from __future__ import annotations

import uuid


class SigmaError(Exception):
    """Base class for every error the core raises on purpose."""


class RepositoryError(SigmaError):
    """The store could not complete an operation (connectivity, constraint, ...)."""


class AdminAlreadyExistsError(RepositoryError):
    """An admin with this email already exists.

    Raised from the unique constraint on admins.email, which is the
    authoritative uniqueness check even when the caller pre-checked.
    """

    def __init__(self, email: str) -> None:
        super().__init__("An admin with that email already exists.")
        self.email = email


class HashingError(SigmaError):
    """Password hashing failed. Fatal to the request; never retried."""


class InvalidCredentialsError(SigmaError):
    """Unknown email or wrong password. The message never says which."""

    def __init__(self) -> None:
        super().__init__("The provided credentials are incorrect.")


class TokenError(SigmaError):
    """A bearer token is malformed, tampered with, from another issuer, or expired."""

    def __init__(self, message: str = "Invalid or expired token.") -> None:
        super().__init__(message)


class MissingFieldError(SigmaError):
    """A credential strategy was invoked without one of its required fields."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


class UnsupportedStrategyError(SigmaError):
    """The credentials name a strategy this service does not implement."""

    def __init__(self, strategy: str) -> None:
        super().__init__(f"Unsupported authentication strategy: {strategy!r}")
        self.strategy = strategy


class TableOccupiedError(SigmaError):
    """The table already has an active session and concurrent sessions are disabled."""

    def __init__(self, table_id: uuid.UUID) -> None:
        super().__init__("The table already has an active session.")
        self.table_id = table_id
