"""
Per-client rate limiting for the credential endpoints (slowapi).
"""

from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from storerating.core.config import settings

# Rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
