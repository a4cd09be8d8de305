"""Request dependencies: settings, rate limiters and the authentication/authorization guard chain."""

from collections.abc import Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request

from blogcms.core.config import Settings, get_settings
from blogcms.core.errors import Forbidden, Unauthorized
from blogcms.core.permissions import roles_for
from blogcms.core.ratelimit import CommentRateLimiter
from blogcms.core.security import principal_from_token
from blogcms.core.session import extract_token
from blogcms.core.throttle import LoginThrottle
from blogcms.models.user import Role
from blogcms.schemas.auth import CurrentUser


@lru_cache
def get_login_throttle() -> LoginThrottle:
    """Process-wide throttle built from settings (overridable in tests)."""
    return LoginThrottle.from_settings(get_settings())


SettingsDep = Annotated[Settings, Depends(get_settings)]
ThrottleDep = Annotated[LoginThrottle, Depends(get_login_throttle)]


def get_current_user(request: Request, settings: SettingsDep) -> CurrentUser:
    """
    Stage 1: require a valid session token (cookie in cookie mode, else Bearer header).

    Raises Unauthorized when the token is missing, malformed, badly signed or expired.
    """
    token = extract_token(
        cookie_header=request.headers.get("cookie"),
        authorization=request.headers.get("authorization"),
        settings=settings,
    )
    if not token:
        raise Unauthorized("Not authenticated")
    return CurrentUser(**principal_from_token(token, settings=settings))


def authorize(principal: CurrentUser, allowed: frozenset[Role]) -> CurrentUser:
    """Stage 2: the principal's role must be in allowed. An empty set allows any authenticated user."""
    if allowed and principal.role not in allowed:
        raise Forbidden("Insufficient permissions")
    return principal


def require_route(route_id: str) -> Callable[..., CurrentUser]:
    """
    Guard dependency for a route declared in core.permissions.ROUTE_ROLES.

    The role set is looked up once, when the route module is imported.
    """
    allowed = roles_for(route_id)

    def guard(principal: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
        return authorize(principal, allowed)

    guard.__name__ = f"require_{route_id.replace('.', '_')}"
    return guard


@lru_cache
def get_comment_limiter() -> CommentRateLimiter:
    """Process-wide comment limiter built from settings (overridable in tests)."""
    return CommentRateLimiter.from_settings(get_settings())


CommentLimiterDep = Annotated[CommentRateLimiter, Depends(get_comment_limiter)]


def get_optional_user(request: Request, settings: SettingsDep) -> CurrentUser | None:
    """Principal for public routes that show more to staff; a missing or bad token reads as anonymous."""
    try:
        return get_current_user(request, settings)
    except Unauthorized:
        return None


def can_access(principal: CurrentUser | None, route_id: str) -> bool:
    """True when principal passes the role check of route_id (never for anonymous callers)."""
    if principal is None:
        return False
    allowed = roles_for(route_id)
    return not allowed or principal.role in allowed


def client_ip(request: Request, settings: SettingsDep) -> str | None:
    """
    Caller address for rate limiting. The first X-Forwarded-For hop is used
    only when TRUST_PROXY_HEADERS is set, since clients can forge the header.
    """
    if settings.TRUST_PROXY_HEADERS:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None
