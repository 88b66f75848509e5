"""
sessions/models.py -- Domain dataclass for table sessions.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime


@dataclass
class TableSession:
    """A lease binding a table and an order for one service interaction.

    Two independent axes of state:
      is_active   -- True at creation, flipped to False by deactivation. Never
                     flipped back.
      checkout_id -- None at creation; set and cleared freely, whether or not
                     the session is still active.

    id, table_id, order_id and created_at never change after creation. Rows
    are never deleted.
    """

    id: uuid.UUID
    table_id: uuid.UUID
    order_id: uuid.UUID
    is_active: bool
    created_at: datetime
    checkout_id: uuid.UUID | None = None
