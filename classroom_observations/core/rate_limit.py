"""Rate limiting configuration for the observations API."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from classroom_observations.core.config import settings

AUTH_LIMIT = f"{settings.RATE_LIMIT_AUTH}/minute"

# Single-process deployment: in-memory storage is enough
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)
