"""Site settings: key normalization, canonical-key resolution, secret masking and typed upserts."""

import json
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy.orm import Session

from blogcms.core.errors import ValidationError
from blogcms.models import Setting
from blogcms.schemas.setting import SettingType
from blogcms.services.assets import asset_url

logger = logging.getLogger(__name__)

MASK = "********"

# Normalized keys whose values are never echoed to clients.
MASKED_KEYS = frozenset({"smtp_password"})

# Normalized keys whose values are asset paths, resolved to URLs for rendering.
ASSET_KEYS = frozenset({"site_logo_url", "site_logo", "logo", "favicon_url", "favicon"})

DEFAULT_TYPE = SettingType.STRING

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_CANONICAL_RE = re.compile(r"^[a-z0-9_]+$")

_TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off"})


class KeyValue(Protocol):
    key: str
    value: str


def normalize_key(key: str) -> str:
    """trim, lowercase, collapse runs of non [a-z0-9] to '_', strip edge underscores."""
    nk = _NON_ALNUM_RE.sub("_", str(key).strip().lower())
    return nk.strip("_")


def is_canonical_key(key: str) -> bool:
    """True when key is already its own normalized spelling."""
    return bool(_CANONICAL_RE.match(key)) and normalize_key(key) == key


def mask_value(key: str, value: str) -> str:
    return MASK if normalize_key(key) in MASKED_KEYS else value


@dataclass
class _Resolved:
    value: str
    canonical: bool


def resolve_settings(rows: Iterable[KeyValue]) -> dict[str, str]:
    """
    Merge rows into one map keyed by normalized key.

    A canonical spelling beats a legacy one; among rows of equal standing the
    first non-empty value wins. An empty value never replaces a non-empty one.
    Keys that normalize to '' are dropped.
    """
    resolved: dict[str, _Resolved] = {}
    for row in rows:
        nk = normalize_key(row.key)
        if not nk:
            continue
        value = row.value if row.value is not None else ""
        canonical = is_canonical_key(row.key)
        current = resolved.get(nk)
        if current is None:
            resolved[nk] = _Resolved(value, canonical)
        elif not value:
            continue
        elif not current.value or (canonical and not current.canonical):
            resolved[nk] = _Resolved(value, canonical or current.canonical)
    return {k: r.value for k, r in resolved.items()}


def lookup(resolved: dict[str, str], key: str, fallback: str = "") -> str:
    """Read from a resolved map by any spelling of the key."""
    if key in resolved:
        return resolved[key]
    return resolved.get(normalize_key(key), fallback)


def coerce_value(value: str, kind: SettingType) -> str:
    """
    Validate value for its kind and return the string to store.

    Booleans are stored as 'true'/'false'; numbers must parse as int or float;
    json must parse. Raises ValidationError otherwise.
    """
    if kind == SettingType.BOOLEAN:
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return "true"
        if word in _FALSE_WORDS:
            return "false"
        raise ValidationError(f"Value {value!r} is not a boolean", detail={"type": kind.value})
    if kind == SettingType.NUMBER:
        text = value.strip()
        try:
            int(text)
        except ValueError:
            try:
                float(text)
            except ValueError:
                raise ValidationError(
                    f"Value {value!r} is not a number", detail={"type": kind.value}
                ) from None
        return text
    if kind == SettingType.JSON:
        try:
            json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Value is not valid JSON: {e.msg}", detail={"type": kind.value}) from e
        return value
    return value


def parse_value(value: str, kind: str) -> Any:
    """Typed view of a stored value. Unknown kinds read as plain strings."""
    try:
        setting_type = SettingType(kind)
    except ValueError:
        return value
    if setting_type == SettingType.BOOLEAN:
        return value.strip().lower() in _TRUE_WORDS
    if setting_type == SettingType.NUMBER:
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            return float(text)
    if setting_type == SettingType.JSON:
        return json.loads(value)
    return value


def list_settings(db: Session) -> list[dict[str, Any]]:
    """All rows ordered by key, with secret values masked."""
    rows = db.query(Setting).order_by(Setting.key.asc()).all()
    return [
        {
            "id": row.id,
            "key": row.key,
            "value": mask_value(row.key, row.value),
            "type": row.type,
            "created_at": row.created_at,
            "updated_at": row.updated_at,
        }
        for row in rows
    ]


def get_setting_value(db: Session, key: str, default: Any = None) -> Any:
    """Typed value for a logical key (any spelling), or default when unset."""
    nk = normalize_key(key)
    rows = [r for r in db.query(Setting).order_by(Setting.key.asc()).all() if normalize_key(r.key) == nk]
    if not rows:
        return default
    resolved = resolve_settings(rows)
    value = resolved.get(nk, "")
    if value == "":
        return default
    winner = next((r for r in rows if r.value == value), rows[0])
    try:
        return parse_value(value, winner.type)
    except (ValueError, json.JSONDecodeError):
        logger.warning("Stored setting does not match its type", extra={"key": nk, "type": winner.type})
        return default


def update_setting(db: Session, key: str, value: str, kind: SettingType | None = None) -> Setting:
    """
    Upsert by literal key.

    New keys get the given kind or 'string'. Existing keys keep their stored
    kind unless one is passed. The value is validated against the effective kind.
    """
    existing = db.query(Setting).filter(Setting.key == key).first()
    if existing is None:
        effective = kind or DEFAULT_TYPE
        row = Setting(key=key, value=coerce_value(value, effective), type=effective.value)
        db.add(row)
        db.commit()
        db.refresh(row)
        logger.info("Setting created", extra={"setting_key": key, "setting_type": row.type})
        return row
    if kind is not None:
        effective = kind
    else:
        try:
            effective = SettingType(existing.type)
        except ValueError:
            # Legacy tag outside the known kinds: store as given without validation.
            effective = DEFAULT_TYPE
    existing.value = coerce_value(value, effective)
    if kind is not None:
        existing.type = kind.value
    db.commit()
    db.refresh(existing)
    logger.info("Setting updated", extra={"setting_key": key, "setting_type": existing.type})
    return existing


def public_settings(db: Session, api_base: str) -> dict[str, str]:
    """Resolved map for rendering: masked secrets, asset keys turned into URLs."""
    rows = db.query(Setting).order_by(Setting.key.asc()).all()
    resolved = resolve_settings(rows)
    out: dict[str, str] = {}
    for nk, value in resolved.items():
        if nk in MASKED_KEYS:
            out[nk] = MASK
        elif nk in ASSET_KEYS:
            out[nk] = asset_url(value, api_base)
        else:
            out[nk] = value
    return out
