from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)


def rate_limit(limit: str | None = None):
    """Per-route limit; routes that call the model pass the tighter quiz limit."""
    return limiter.limit(limit or settings.rate_limit)


def quiz_rate_limit():
    return rate_limit(settings.quiz_rate_limit)
