from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from jobboard.core.config import settings

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT_DEFAULT])


def maybe_limit(rule: str | None = None):
    """
    SlowAPI limit decorator when rate limiting is enabled, passthrough otherwise.
    Decorators bind at import time; reload the route module after toggling the setting.
    """
    if not settings.ENABLE_RATE_LIMITING:
        def passthrough(fn):
            return fn
        return passthrough
    return limiter.limit(rule or settings.RATE_LIMIT_DEFAULT)
