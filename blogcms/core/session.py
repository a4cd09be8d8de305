"""Session transport: where the token travels (Authorization header or HttpOnly cookie) and CSRF cookies."""

import re
import secrets
from dataclasses import dataclass
from typing import Any, Literal
from urllib.parse import unquote

from starlette.responses import Response

from blogcms.core.config import Settings

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

CSRF_TOKEN_BYTES = 32


@dataclass(frozen=True)
class CookieAttributes:
    """Attributes shared by every cookie this service sets or clears."""

    samesite: Literal["lax", "strict", "none"]
    secure: bool
    domain: str | None
    path: str = "/"

    def as_kwargs(self) -> dict[str, Any]:
        return {
            "samesite": self.samesite,
            "secure": self.secure,
            "domain": self.domain,
            "path": self.path,
        }


def cookie_attributes(settings: Settings) -> CookieAttributes:
    """
    Derive cookie attributes from configuration.

    Set and clear must both use this: a browser only overwrites a cookie when
    name, domain and path match, so any drift leaves the old cookie in place.
    """
    return CookieAttributes(
        samesite=settings.AUTH_COOKIE_SAMESITE,
        secure=settings.AUTH_COOKIE_SECURE,
        domain=settings.AUTH_COOKIE_DOMAIN,
    )


def generate_csrf_token() -> str:
    return secrets.token_hex(CSRF_TOKEN_BYTES)


def set_session_cookies(
    response: Response,
    token: str,
    *,
    remember: bool,
    settings: Settings,
) -> str | None:
    """
    In cookie mode, set the HttpOnly session cookie and a readable CSRF cookie.

    Without remember the cookies carry no Max-Age (browser-session cookies).
    Returns the CSRF token, or None when cookie mode is off.
    """
    if not settings.AUTH_COOKIE_ENABLED:
        return None
    attrs = cookie_attributes(settings).as_kwargs()
    max_age = settings.AUTH_COOKIE_REMEMBER_MAX_AGE if remember else None
    response.set_cookie(
        settings.AUTH_COOKIE_NAME,
        token,
        max_age=max_age,
        httponly=True,
        **attrs,
    )
    csrf_token = generate_csrf_token()
    response.set_cookie(
        settings.CSRF_COOKIE_NAME,
        csrf_token,
        max_age=max_age,
        httponly=False,
        **attrs,
    )
    return csrf_token


def clear_session_cookies(response: Response, *, settings: Settings) -> None:
    """Overwrite both cookies with an empty, already-expired value (cookie mode only)."""
    if not settings.AUTH_COOKIE_ENABLED:
        return
    attrs = cookie_attributes(settings).as_kwargs()
    response.set_cookie(settings.AUTH_COOKIE_NAME, "", max_age=0, httponly=True, **attrs)
    response.set_cookie(settings.CSRF_COOKIE_NAME, "", max_age=0, httponly=False, **attrs)


def cookie_from_header(cookie_header: str | None, name: str) -> str | None:
    """First value of the named cookie in a raw Cookie header, URL-decoded."""
    if not cookie_header:
        return None
    match = re.search(r"(?:^|;\s*)" + re.escape(name) + r"=([^;]+)", cookie_header)
    if match is None:
        return None
    return unquote(match.group(1))


def bearer_from_authorization(authorization: str | None) -> str | None:
    """Token from an 'Authorization: Bearer <token>' header, else None."""
    if not authorization:
        return None
    scheme, _, credentials = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    credentials = credentials.strip()
    return credentials or None


def extract_token(
    *,
    cookie_header: str | None,
    authorization: str | None,
    settings: Settings,
) -> str | None:
    """Session token from the cookie (cookie mode only), falling back to the Bearer header."""
    if settings.AUTH_COOKIE_ENABLED:
        token = cookie_from_header(cookie_header, settings.AUTH_COOKIE_NAME)
        if token:
            return token
    return bearer_from_authorization(authorization)


def csrf_tokens_match(header_value: str | None, cookie_value: str | None) -> bool:
    """Double-submit check: both present and equal (constant-time)."""
    if not header_value or not cookie_value:
        return False
    return secrets.compare_digest(header_value.encode("utf-8"), cookie_value.encode("utf-8"))
