"""FastAPI dependency utilities."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from fastapi import HTTPException, Request, status

from bakery.config import get_settings
from bakery.infrastructure.rate_limiter import RateWindow, client_ip, rate_limit_key

logger = logging.getLogger(__name__)


def get_rate_window(request: Request) -> RateWindow:
    """Return the process-wide :class:`RateWindow` owned by the application."""

    rate_window = getattr(request.app.state, "rate_window", None)
    if rate_window is None:
        raise RuntimeError("Application was created without a rate window")
    return rate_window


def require_rate_limit(
    identifier: str | None = None,
    *,
    window_ms: int | None = None,
    max_requests: int | None = None,
) -> Callable[[Request], None]:
    """Build a dependency rejecting callers that exceeded their window.

    The key combines the client address with ``identifier`` so every endpoint
    keeps its own budget. Limits left as ``None`` come from the settings used
    for the activity collector.
    """

    def dependency(request: Request) -> None:
        settings = get_settings()
        window = window_ms or settings.client_activity_rate_window_ms
        limit = max_requests or settings.client_activity_rate_max_requests

        key = rate_limit_key(client_ip(request), identifier)
        if get_rate_window(request).check(key, window, limit):
            return

        logger.warning("Rate limit exceeded for %s", key)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests, please try again later",
            headers={"Retry-After": str(math.ceil(window / 1000))},
        )

    return dependency


__all__ = ["get_rate_window", "require_rate_limit"]
