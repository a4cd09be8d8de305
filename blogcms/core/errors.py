"""Service-layer exceptions mapped to HTTP responses at the request boundary."""

from typing import Any


class ServiceError(Exception):
    """
    Base class for service errors.

    Each subclass fixes an HTTP status code and a stable error code:
    bad_request (400), validation_error (422), unauthorized (401), forbidden (403),
    not_found (404), conflict (409), rate_limited (429).
    """

    status_code: int = 400
    error_code: str = "bad_request"

    def __init__(self, message: str, *, detail: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class BadRequest(ServiceError):
    """The request refers to something unusable (missing ids, unknown post, spam markers)."""


class ValidationError(ServiceError):
    """Malformed input that passed schema validation but failed a business rule."""

    status_code = 422
    error_code = "validation_error"


class Unauthorized(ServiceError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    error_code = "unauthorized"

    @property
    def headers(self) -> dict[str, str] | None:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(ServiceError):
    """Authenticated, but the role is not allowed on this route."""

    status_code = 403
    error_code = "forbidden"


class NotFound(ServiceError):
    status_code = 404
    error_code = "not_found"


class Conflict(ServiceError):
    status_code = 409
    error_code = "conflict"


class TooManyRequests(ServiceError):
    """A rate limit was hit (login lockout or comment limiter); retry_after is in whole seconds."""

    status_code = 429
    error_code = "rate_limited"

    def __init__(self, message: str, *, retry_after: int | None = None, detail: Any = None) -> None:
        super().__init__(message, detail=detail)
        self.retry_after = retry_after

    @property
    def headers(self) -> dict[str, str] | None:
        if self.retry_after is None:
            return None
        return {"Retry-After": str(max(1, self.retry_after))}
