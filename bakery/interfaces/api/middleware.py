"""Middleware recording page views and unhandled errors as activities."""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from bakery.infrastructure.activity import navigation_context


def is_navigation_request(request: Request) -> bool:
    """Return ``True`` when ``request`` is a browser loading a page."""

    if request.method != "GET":
        return False

    fetch_mode = request.headers.get("sec-fetch-mode")
    if fetch_mode is not None:
        return fetch_mode.lower() == "navigate"

    accept = request.headers.get("accept", "")
    return "text/html" in accept.lower()


class ActivityTrackingMiddleware(BaseHTTPMiddleware):
    """Track one page view per navigation and every unhandled exception."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        batcher = getattr(request.app.state, "activity_batcher", None)
        if batcher is None:
            return await call_next(request)

        path = request.url.path
        with navigation_context(
            url=path,
            referrer=request.headers.get("referer"),
            user_agent=request.headers.get("user-agent"),
            title=path,
        ):
            if is_navigation_request(request):
                batcher.track_page_view(path)
            try:
                return await call_next(request)
            except Exception as exc:
                batcher.track_error(exc, "Unhandled request error")
                raise


__all__ = ["ActivityTrackingMiddleware", "is_navigation_request"]
