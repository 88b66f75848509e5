"""
auth/store.py -- SQLAlchemy Core persistence layer for administrator accounts.

Pattern: Repository + Data Mapper.
AdminStore is the repository; _row_to_admin is the mapper. Services never
touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  The plaintext password enters create() and is hashed before any SQL runs.
  It is never logged and never written.

Uniqueness:
  admins.email is the primary key. The constraint, not any pre-check, decides
  whether a registration wins. An IntegrityError on insert is translated to
  AdminAlreadyExistsError only when the email row exists afterwards, so the
  API can answer 409 without knowing SQL. Any other constraint failure is a
  RepositoryError.

Every method is one statement in its own transaction (engine.begin()), so
concurrent callers rely on the database's per-row atomicity and nothing else.

Layer rule: no imports from api/ or sessions/.
"""

from __future__ import annotations

import logging

from sqlalchemy import Column, String, Table, Text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from auth.models import AdminAccount
from auth.passwords import hash_password
from core.database import metadata
from core.errors import AdminAlreadyExistsError, RepositoryError

logger = logging.getLogger("sigma.auth.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_admins = Table(
    "admins",
    metadata,
    Column("email", String(320), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("password_hash", Text, nullable=False),
)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AdminStore:
    """Repository for AdminAccount records.

    Usage:
        store = AdminStore(engine)
        admin = store.create("a@x.com", "Alice", "Secr3t!2")
        found = store.find_by_email("a@x.com")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(self.engine, tables=[_admins])

    def create(self, email: str, name: str, password: str) -> AdminAccount:
        """Hash password and insert a new admin.

        Raises HashingError if the password cannot be hashed,
        AdminAlreadyExistsError if the email is taken, and RepositoryError for
        any other database failure.
        """
        password_hash = hash_password(password)
        try:
            with self.engine.begin() as conn:
                row = conn.execute(
                    _admins.insert()
                    .values(email=email, name=name, password_hash=password_hash)
                    .returning(*_admins.c)
                ).one()
        except IntegrityError as exc:
            # Only the primary key makes this a duplicate; NOT NULL and the like are not.
            if self.find_by_email(email) is not None:
                raise AdminAlreadyExistsError(email) from exc
            logger.exception("Failed to create admin")
            raise RepositoryError("Failed to create admin.") from exc
        except SQLAlchemyError as exc:
            logger.exception("Failed to create admin")
            raise RepositoryError("Failed to create admin.") from exc
        return _row_to_admin(row)

    def find_by_email(self, email: str) -> AdminAccount | None:
        """Look up an admin by exact email. Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(_admins.select().where(_admins.c.email == email)).fetchone()
        except SQLAlchemyError as exc:
            logger.exception("Failed to look up admin")
            raise RepositoryError("Failed to look up admin.") from exc
        return _row_to_admin(row) if row is not None else None

    def rename(self, email: str, new_name: str) -> AdminAccount | None:
        """Change an admin's display name. Returns the updated record, or None if not found."""
        try:
            with self.engine.begin() as conn:
                row = conn.execute(
                    _admins.update().where(_admins.c.email == email).values(name=new_name).returning(*_admins.c)
                ).fetchone()
        except SQLAlchemyError as exc:
            logger.exception("Failed to rename admin")
            raise RepositoryError("Failed to rename admin.") from exc
        return _row_to_admin(row) if row is not None else None

    def delete(self, email: str) -> bool:
        """Permanently delete an admin. Returns True if deleted, False if not found."""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(_admins.delete().where(_admins.c.email == email))
        except SQLAlchemyError as exc:
            logger.exception("Failed to delete admin")
            raise RepositoryError("Failed to delete admin.") from exc
        return result.rowcount > 0


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_admin(row) -> AdminAccount:
    return AdminAccount(
        email=row.email,
        name=row.name,
        password_hash=row.password_hash,
    )
