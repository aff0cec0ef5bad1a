"""Rate limiting configuration for the API."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from tutsin.core.config import settings

# Per-client-IP limits. Point RATE_LIMIT_STORAGE_URI at a shared backend
# (e.g. redis://) when running several workers.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)

AUTH_LIMIT = f"{settings.RATE_LIMIT_AUTH}/minute"
PAGE_VIEW_LIMIT = f"{settings.RATE_LIMIT_PAGEVIEWS}/minute"
