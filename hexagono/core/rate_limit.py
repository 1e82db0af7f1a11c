# hexagono/core/rate_limit.py
from slowapi import Limiter
from slowapi.util import get_remote_address

from hexagono.core.settings import settings

# Un único Limiter compartido por toda la app
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)

exempt = limiter.exempt
