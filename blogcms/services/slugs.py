"""URL slugs for posts, categories and tags."""

import re

_WHITESPACE_RE = re.compile(r"\s+")
_INVALID_RE = re.compile(r"[^\w-]+", re.ASCII)
_DASHES_RE = re.compile(r"--+")


def slugify(text: str) -> str:
    """lowercase, trim, whitespace to '-', drop anything but word chars and '-', collapse '--'."""
    slug = _WHITESPACE_RE.sub("-", str(text).lower().strip())
    slug = _INVALID_RE.sub("", slug)
    return _DASHES_RE.sub("-", slug)
