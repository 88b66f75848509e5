"""
sessions/service.py -- Table-session business rules on top of TableSessionStore.

State machine per session row:

    (Active, NoCheckout) --deactivate_session--> (Inactive, ...)      one way
    (..., NoCheckout) <--set_checkout_id--> (..., HasCheckout(id))    any state

The two axes are independent; a checkout may be recorded after the service
session ended.

Occupancy policy:
  By default a table may carry any number of active sessions -- the store
  has no constraint and the historical behaviour is unrestricted. With
  allow_concurrent_sessions=False, create_session() refuses a table that
  already has an active session. That check runs before the insert and is not
  atomic with it: two simultaneous requests for an empty table can both
  succeed.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import logging
import uuid

from core.errors import TableOccupiedError
from sessions.models import TableSession
from sessions.store import TableSessionStore

logger = logging.getLogger("sigma.sessions")


class TableSessionService:
    def __init__(self, store: TableSessionStore, allow_concurrent_sessions: bool = True) -> None:
        self.store = store
        self.allow_concurrent_sessions = allow_concurrent_sessions

    def create_session(self, table_id: uuid.UUID, order_id: uuid.UUID) -> TableSession:
        """Open a new active session for table_id/order_id.

        Raises TableOccupiedError only when concurrent sessions are disabled
        and the table already has an active one.
        """
        if not self.allow_concurrent_sessions and self.store.find_active_by_table(table_id):
            logger.info("Rejected session for occupied table %s", table_id)
            raise TableOccupiedError(table_id)
        session = self.store.create(table_id, order_id)
        logger.info("Opened table session %s (table=%s order=%s)", session.id, table_id, order_id)
        return session

    def find_by_id(self, session_id: uuid.UUID) -> TableSession | None:
        return self.store.find_by_id(session_id)

    def deactivate_session(self, session_id: uuid.UUID) -> TableSession | None:
        session = self.store.deactivate(session_id)
        if session is not None:
            logger.info("Deactivated table session %s", session_id)
        return session

    def set_checkout_id(self, session_id: uuid.UUID, checkout_id: uuid.UUID | None) -> TableSession | None:
        session = self.store.set_checkout_id(session_id, checkout_id)
        if session is not None:
            if checkout_id is None:
                logger.info("Cleared checkout on table session %s", session_id)
            else:
                logger.info("Attached checkout %s to table session %s", checkout_id, session_id)
        return session
