"""Per-client rate limiting using slowapi.

The limiter is stored on ``app.state`` and enforced for every route by
``SlowAPIMiddleware`` with the configured default limit.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from leavedesk.config import get_settings


def build_limiter() -> Limiter:
    settings = get_settings()
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        enabled=settings.rate_limit_enabled,
        storage_uri="memory://",
    )


limiter = build_limiter()
