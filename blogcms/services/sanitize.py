"""Minimal HTML scrubbing for post bodies written in the admin editor."""

import re

_DANGEROUS_TAGS = "script|style|noscript|iframe|object|embed|link|meta"

_BLOCK_RE = re.compile(rf"<({_DANGEROUS_TAGS})\b[\s\S]*?>[\s\S]*?</\1\s*>", re.IGNORECASE)
_SELF_CLOSING_RE = re.compile(rf"<({_DANGEROUS_TAGS})\b[\s\S]*?/>", re.IGNORECASE)
_STRAY_TAG_RE = re.compile(rf"</?({_DANGEROUS_TAGS})\b[\s\S]*?>", re.IGNORECASE)

_EVENT_HANDLER_RES = (
    re.compile(r'\son[a-z]+\s*=\s*"[^"]*"', re.IGNORECASE),
    re.compile(r"\son[a-z]+\s*=\s*'[^']*'", re.IGNORECASE),
    re.compile(r"\son[a-z]+\s*=\s*[^\s>]+", re.IGNORECASE),
)

_SCRIPT_URL_RES = (
    re.compile(r'\s(href|src)\s*=\s*"\s*javascript:[^"]*"', re.IGNORECASE),
    re.compile(r"\s(href|src)\s*=\s*'\s*javascript:[^']*'", re.IGNORECASE),
    re.compile(r"\s(href|src)\s*=\s*javascript:[^\s>]+", re.IGNORECASE),
)

# data: URLs are allowed in src only for raster images.
_DATA_SRC_RES = (
    re.compile(r'\ssrc\s*=\s*"\s*data:(?!image/(?:png|jpe?g|gif|webp|avif))[^"]*"', re.IGNORECASE),
    re.compile(r"\ssrc\s*=\s*'\s*data:(?!image/(?:png|jpe?g|gif|webp|avif))[^']*'", re.IGNORECASE),
)


def sanitize_html(html: str | None) -> str:
    """
    Remove script-capable markup: dangerous elements, on* handlers,
    javascript: links and non-image data: sources. Everything else is kept.
    """
    if not html:
        return ""
    out = str(html)
    for pattern in (_BLOCK_RE, _SELF_CLOSING_RE, _STRAY_TAG_RE):
        out = pattern.sub("", out)
    for pattern in (*_EVENT_HANDLER_RES, *_SCRIPT_URL_RES, *_DATA_SRC_RES):
        out = pattern.sub("", out)
    return out
