"""Image upload storage: type and size checks, signature sniffing, unique file names."""

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from blogcms.core.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = frozenset({
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/avif",
})

# Upload kind -> (subdirectory, file name prefix)
UPLOAD_KINDS: dict[str, tuple[str, str]] = {
    "image": ("images", "image"),
    "cover": ("covers", "cover"),
    "avatar": ("avatars", "avatar"),
}

_EXTENSIONS = {
    "jpeg": ".jpg",
    "png": ".png",
    "gif": ".gif",
    "webp": ".webp",
    "avif": ".avif",
}


@dataclass
class StoredUpload:
    path: Path
    url: str
    size: int
    image_format: str


def sniff_image_format(data: bytes) -> str | None:
    """Image format from the leading bytes, or None when unrecognized."""
    if data.startswith(b"\xff\xd8\xff"):
        return "jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    if len(data) >= 12 and data[4:8] == b"ftyp" and data[8:12] in (b"avif", b"avis"):
        return "avif"
    return None


def validate_image(data: bytes, content_type: str | None, max_bytes: int) -> str:
    """Return the sniffed format; raise ValidationError for empty, oversized, mistyped or unknown data."""
    if not data:
        raise ValidationError("Empty upload")
    declared = (content_type or "").split(";")[0].strip().lower()
    if declared not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Invalid file type. Only images are allowed.")
    if len(data) > max_bytes:
        raise ValidationError(f"File size must not exceed {max_bytes // (1024 * 1024)} MB.")
    image_format = sniff_image_format(data)
    if image_format is None:
        raise ValidationError("Invalid or unsupported image")
    if declared != f"image/{image_format}":
        raise ValidationError("File content does not match its declared type")
    return image_format


def store_upload(
    upload_dir: str | Path,
    kind: str,
    data: bytes,
    content_type: str | None,
    max_bytes: int,
) -> StoredUpload:
    """Validate and write an upload under upload_dir/<kind>s/; returns its public /uploads/... URL."""
    if kind not in UPLOAD_KINDS:
        raise ValidationError(f"Unknown upload kind {kind!r}")
    image_format = validate_image(data, content_type, max_bytes)
    subdir, prefix = UPLOAD_KINDS[kind]
    dest = Path(upload_dir) / subdir
    dest.mkdir(parents=True, exist_ok=True)
    filename = f"{prefix}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{_EXTENSIONS[image_format]}"
    path = dest / filename
    path.write_bytes(data)
    url = f"/uploads/{subdir}/{filename}"
    logger.info(
        "Upload stored",
        extra={"kind": kind, "bytes": len(data), "image_format": image_format, "url": url},
    )
    return StoredUpload(path=path, url=url, size=len(data), image_format=image_format)
