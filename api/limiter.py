"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in both api/main.py (to mount as middleware) and
api/routes/v1/admins.py (to apply per-route limits with @limiter.limit()).

A single shared instance keeps every route on the same in-memory counter
store; separate instances per module would never trip their limits.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
