"""
api/limiter.py -- Shared slowapi rate limiter instance.

Import this in both api/main.py (to mount as middleware) and the route modules
(to apply per-route limits with @limiter.limit()). A single shared instance
means all routes share the same in-memory counter store.

RATE_LIMIT_ENABLED=false turns every limit into a no-op; the test suite sets
it so repeated logins from the same TestClient address are not throttled.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=get_settings().rate_limit_enabled,
)
