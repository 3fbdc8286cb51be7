"""Rate limiting for activity logging.

Counters are kept per gateway user in Redis (or ``rate_limit_storage_uri``).
While the storage is unreachable slowapi counts in process memory and
re-checks the backend with exponential backoff.
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from storefront_recommender.config import get_settings


def rate_limit_key(request: Request) -> str:
    """Key requests by gateway user id, or by client address without one."""
    user_id = request.headers.get(get_settings().user_id_header, "").strip()
    return f"user:{user_id}" if user_id else get_remote_address(request)


def activity_rate_limit() -> str:
    return f"{get_settings().rate_limit_per_minute}/minute"


_settings = get_settings()

limiter = Limiter(
    key_func=rate_limit_key,
    storage_uri=_settings.limiter_storage_uri,
    enabled=_settings.rate_limit_enabled,
    in_memory_fallback_enabled=True,
)
