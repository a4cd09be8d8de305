"""
Asset URL resolution shared by API responses and server-rendered pages.

The same rules must hold wherever a settings payload is rendered, otherwise
server output and client hydration disagree on image URLs.
"""

import re

_ABSOLUTE_RE = re.compile(r"^(https?:)?//", re.IGNORECASE)
_LEGACY_UPLOADS_RE = re.compile(r"^/api/uploads/")
_LEGACY_ABSOLUTE_UPLOADS_RE = re.compile(r"^(https?://[^/]+)/api/+uploads/", re.IGNORECASE)
_TRAILING_API_RE = re.compile(r"/api/?$")
_DUPLICATE_SLASHES_RE = re.compile(r"/{2,}")


def is_absolute_url(url: str) -> bool:
    """http(s):// or protocol-relative //host URLs."""
    return bool(_ABSOLUTE_RE.match(url))


def normalize_asset_path(url: str | None) -> str:
    """
    Normalize a possibly relative asset path.

    Absolute, protocol-relative and data: URLs are returned as-is. Relative
    paths get one leading slash, duplicate slashes are collapsed, and the
    legacy /api/uploads/ prefix becomes /uploads/. Empty input gives ''.
    """
    u = (url or "").strip()
    if not u:
        return ""
    if is_absolute_url(u) or u.startswith("data:"):
        return u
    if not u.startswith("/"):
        u = "/" + u
    u = _DUPLICATE_SLASHES_RE.sub("/", u)
    return _LEGACY_UPLOADS_RE.sub("/uploads/", u)


def api_base_from_raw(raw_api_url: str | None) -> str:
    """Origin for assets from a raw API URL: trailing /api and slashes removed. Blank gives ''."""
    given = (raw_api_url or "").strip()
    if not given:
        return ""
    return _TRAILING_API_RE.sub("", given).rstrip("/")


def asset_url(url: str | None, api_base: str | None = "") -> str:
    """
    Resolve an asset path against an API origin.

    Without an origin the normalized relative path is returned, so pages still
    render when no backend address is known (e.g. at build time).
    """
    p = normalize_asset_path(url)
    if not p or p.startswith("data:"):
        return p
    if is_absolute_url(p):
        # Older rows stored https://host/api//uploads/...; serve them from /uploads/.
        return _LEGACY_ABSOLUTE_UPLOADS_RE.sub(r"\1/uploads/", p)
    base = (api_base or "").strip().rstrip("/")
    return f"{base}{p}" if base else p
