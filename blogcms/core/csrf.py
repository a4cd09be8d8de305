"""Double-submit CSRF middleware for cookie-authenticated sessions."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from blogcms.core.config import Settings
from blogcms.core.session import SAFE_METHODS, cookie_from_header, csrf_tokens_match

logger = logging.getLogger(__name__)


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Reject unsafe requests whose CSRF header does not echo the CSRF cookie.

    Active only when cookie transport and CSRF protection are both enabled.
    Requests without the session cookie are passed through (they authenticate
    by header, if at all), as are the configured skip paths.
    """

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        super().__init__(app)
        self.settings = settings
        self.skip_paths = frozenset(p.rstrip("/") or "/" for p in settings.CSRF_SKIP_PATHS)

    def _enabled(self) -> bool:
        return self.settings.AUTH_COOKIE_ENABLED and self.settings.CSRF_PROTECTION

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self._enabled() or request.method.upper() in SAFE_METHODS:
            return await call_next(request)
        path = request.url.path.rstrip("/") or "/"
        if path in self.skip_paths:
            return await call_next(request)
        cookie_header = request.headers.get("cookie")
        if not cookie_from_header(cookie_header, self.settings.AUTH_COOKIE_NAME):
            return await call_next(request)
        header_token = request.headers.get(self.settings.CSRF_HEADER_NAME)
        cookie_token = cookie_from_header(cookie_header, self.settings.CSRF_COOKIE_NAME)
        if not csrf_tokens_match(header_token, cookie_token):
            logger.warning(
                "CSRF check failed",
                extra={"path": path, "method": request.method, "has_header": bool(header_token)},
            )
            return JSONResponse(
                status_code=403,
                content={"detail": "Invalid CSRF token", "code": "forbidden"},
            )
        return await call_next(request)
