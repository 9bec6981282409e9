"""Per-client rate limiting (slowapi)."""

from slowapi import Limiter
from slowapi.util import get_remote_address

from src.config import Settings, settings

limiter = Limiter(
    key_func=get_remote_address,
    enabled=settings.rate_limit_enabled,
)

_rate_limit = settings.rate_limit


def configure_limiter(config: Settings) -> None:
    """Apply *config*'s rate limit to the shared limiter."""
    global _rate_limit
    limiter.enabled = config.rate_limit_enabled
    _rate_limit = config.rate_limit


def current_rate_limit() -> str:
    # slowapi calls this on every request
    return _rate_limit
