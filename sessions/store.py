"""
sessions/store.py -- SQLAlchemy Core persistence layer for table sessions.

Pattern: Repository + Data Mapper (same as auth/store.py).

Every write is a single INSERT or UPDATE ... RETURNING in its own transaction,
so the record handed back is exactly what the row looked like after the
statement. Partial updates on a missing id return None instead of raising --
a missing session is not a database failure.

No uniqueness on (table_id, order_id): this layer happily stores several
active sessions for the same table. Whether that is allowed is decided by
TableSessionService.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Table, Uuid, func, true
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from core.database import metadata
from core.errors import RepositoryError
from sessions.models import TableSession

logger = logging.getLogger("sigma.sessions.store")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_table_sessions = Table(
    "table_sessions",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("table_id", Uuid, nullable=False),
    Column("order_id", Uuid, nullable=False),
    Column("checkout_id", Uuid, nullable=True),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Index("ix_table_sessions_table_id", "table_id"),
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class TableSessionStore:
    """Repository for TableSession records.

    Usage:
        store = TableSessionStore(engine)
        session = store.create(table_id, order_id)
        store.set_checkout_id(session.id, checkout_id)
        store.deactivate(session.id)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        metadata.create_all(self.engine, tables=[_table_sessions])

    def create(self, table_id: uuid.UUID, order_id: uuid.UUID) -> TableSession:
        """Insert a new active session with no checkout and return it."""
        try:
            with self.engine.begin() as conn:
                row = conn.execute(
                    _table_sessions.insert()
                    .values(
                        id=uuid.uuid4(),
                        table_id=table_id,
                        order_id=order_id,
                        checkout_id=None,
                        is_active=True,
                        created_at=_now(),
                    )
                    .returning(*_table_sessions.c)
                ).one()
        except SQLAlchemyError as exc:
            logger.exception("Failed to create table session")
            raise RepositoryError("Failed to create table session.") from exc
        return _row_to_session(row)

    def find_by_id(self, session_id: uuid.UUID) -> TableSession | None:
        """Look up a session by primary key. Returns None if not found."""
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    _table_sessions.select().where(_table_sessions.c.id == session_id)
                ).fetchone()
        except SQLAlchemyError as exc:
            logger.exception("Failed to look up table session")
            raise RepositoryError("Failed to look up table session.") from exc
        return _row_to_session(row) if row is not None else None

    def find_active_by_table(self, table_id: uuid.UUID) -> list[TableSession]:
        """Return the active sessions bound to table_id, newest first."""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(
                    _table_sessions.select()
                    .where((_table_sessions.c.table_id == table_id) & (_table_sessions.c.is_active == true()))
                    .order_by(_table_sessions.c.created_at.desc())
                ).fetchall()
        except SQLAlchemyError as exc:
            logger.exception("Failed to list active table sessions")
            raise RepositoryError("Failed to list active table sessions.") from exc
        return [_row_to_session(r) for r in rows]

    def deactivate(self, session_id: uuid.UUID) -> TableSession | None:
        """Mark a session inactive. Returns the updated record, or None if not found.

        Idempotent: deactivating an inactive session returns it unchanged.
        """
        return self._update(session_id, "deactivate", is_active=False)

    def set_checkout_id(self, session_id: uuid.UUID, checkout_id: uuid.UUID | None) -> TableSession | None:
        """Attach (or, with None, detach) a checkout. Returns the updated record, or None if not found."""
        return self._update(session_id, "set checkout on", checkout_id=checkout_id)

    def _update(self, session_id: uuid.UUID, action: str, **fields) -> TableSession | None:
        try:
            with self.engine.begin() as conn:
                row = conn.execute(
                    _table_sessions.update()
                    .where(_table_sessions.c.id == session_id)
                    .values(**fields)
                    .returning(*_table_sessions.c)
                ).fetchone()
        except SQLAlchemyError as exc:
            logger.exception("Failed to %s table session", action)
            raise RepositoryError(f"Failed to {action} table session.") from exc
        return _row_to_session(row) if row is not None else None


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_session(row) -> TableSession:
    created_at = row.created_at
    if created_at.tzinfo is None:
        # SQLite drops the offset; values are always written as UTC.
        created_at = created_at.replace(tzinfo=timezone.utc)
    return TableSession(
        id=row.id,
        table_id=row.table_id,
        order_id=row.order_id,
        checkout_id=row.checkout_id,
        is_active=bool(row.is_active),
        created_at=created_at,
    )
