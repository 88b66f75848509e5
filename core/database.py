"""
core/database.py -- Engine construction and the shared schema metadata.

One Engine per process owns the connection pool. The lifespan in api/main.py
builds it at startup and disposes it at shutdown; stores receive it through
their constructors and never create their own.

Every store module declares its Table objects against `metadata` so a single
create_all() call sees the full schema.

Layer rule: core/ is the kernel. No imports from api/, auth/ or sessions/.
"""

from __future__ import annotations

import logging

from sqlalchemy import MetaData, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger("sigma.database")

metadata = MetaData()


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign keys on each new SQLite connection.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(db_url: str, pool_size: int = 10) -> Engine:
    """Build the process-wide Engine for db_url.

    SQLite connections are shared across the request thread pool, so
    check_same_thread is disabled. Server databases get a sized pool with
    pre-ping so stale connections are replaced transparently.
    """
    connect_args: dict = {}
    options: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    else:
        options["pool_size"] = pool_size
        options["pool_pre_ping"] = True
    engine = create_engine(db_url, connect_args=connect_args, **options)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    logger.info("Database engine created (dialect=%s)", engine.dialect.name)
    return engine


def ping(engine: Engine) -> bool:
    """Return True if a trivial query succeeds. Used by the health endpoint."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database ping failed")
        return False
    return True
