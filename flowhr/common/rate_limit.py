"""Rate limiting configuration using slowapi.

Provides a module-level Limiter instance wired into the FastAPI app in
main.py. Every gateway route shares the default per-client-IP limit.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from flowhr.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT],
)
