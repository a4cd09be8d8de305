"""Categories: CRUD, post counts and the admin-defined display order."""

import json
import logging
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogcms.core.errors import BadRequest, Conflict, NotFound
from blogcms.models import Category, Setting, post_categories
from blogcms.schemas.setting import SettingType
from blogcms.services.settings import update_setting
from blogcms.services.slugs import slugify

logger = logging.getLogger(__name__)

# Setting holding a JSON list of category ids; listed ids come first, in that order.
ORDER_KEY = "categories_order"


def _read_order(db: Session) -> list[int] | None:
    """Stored order, or None when the setting does not exist. Malformed values read as []."""
    row = db.query(Setting).filter(Setting.key == ORDER_KEY).first()
    if row is None:
        return None
    try:
        parsed = json.loads(row.value or "[]")
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed category order")
        return []
    if not isinstance(parsed, list):
        return []
    order = []
    for item in parsed:
        try:
            order.append(int(item))
        except (TypeError, ValueError):
            continue
    return order


def _write_order(db: Session, ids: list[int]) -> None:
    update_setting(db, ORDER_KEY, json.dumps(ids), SettingType.JSON)


def _as_dict(category: Category, post_count: int) -> dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "color": category.color,
        "post_count": post_count,
        "created_at": category.created_at,
        "updated_at": category.updated_at,
    }


def _post_count(db: Session, category_id: int) -> int:
    return (
        db.query(func.count(post_categories.c.post_id))
        .filter(post_categories.c.category_id == category_id)
        .scalar()
    )


def list_categories(db: Session) -> list[dict[str, Any]]:
    """All categories with post counts: ordered ids first, the rest by name."""
    rows = (
        db.query(Category, func.count(post_categories.c.post_id))
        .outerjoin(post_categories, post_categories.c.category_id == Category.id)
        .group_by(Category.id)
        .order_by(Category.name.asc())
        .all()
    )
    order = _read_order(db) or []
    position = {cid: i for i, cid in enumerate(order)}
    rows.sort(key=lambda row: position.get(row[0].id, len(order)))
    return [_as_dict(category, count) for category, count in rows]


def get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if category is None:
        raise NotFound("Category not found")
    return category


def category_detail(db: Session, category: Category) -> dict[str, Any]:
    return _as_dict(category, _post_count(db, category.id))


def _conflicts(db: Session, *, name: str | None, slug: str | None, exclude_id: int | None = None) -> bool:
    clauses = []
    if name is not None:
        clauses.append(func.lower(Category.name) == name.lower())
    if slug is not None:
        clauses.append(Category.slug == slug)
    query = db.query(Category.id).filter(or_(*clauses))
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    return query.first() is not None


def _commit_or_conflict(db: Session, message: str) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict(message) from e


def create_category(
    db: Session, *, name: str, description: str | None = None, color: str | None = None
) -> Category:
    name = (name or "").strip()
    if not name:
        raise BadRequest("Category name is required")
    slug = slugify(name)
    if not slug:
        raise BadRequest("Category name must contain letters or digits")
    if _conflicts(db, name=name, slug=slug):
        raise Conflict("Category with this name already exists")
    category = Category(name=name, slug=slug, description=description, color=color)
    db.add(category)
    _commit_or_conflict(db, "Category with this name already exists")
    db.refresh(category)
    logger.info("Category created", extra={"category_id": category.id})
    return category


def update_category(db: Session, category_id: int, changes: dict[str, Any]) -> Category:
    """
    Partial edit. A changed name re-derives the slug unless one is given;
    name and slug must stay unique among the other categories.
    """
    category = get_category(db, category_id)
    name = changes.get("name")
    if name is not None:
        name = name.strip()
        if not name:
            raise BadRequest("Category name is required")
    name_changed = name is not None and name != category.name
    slug = changes.get("slug")
    if slug is None and name_changed:
        slug = slugify(name)
        if not slug:
            raise BadRequest("Category name must contain letters or digits")
    if (name_changed or slug is not None) and _conflicts(
        db, name=name if name_changed else None, slug=slug, exclude_id=category.id
    ):
        raise Conflict("Category with this name or slug already exists")
    if name_changed:
        category.name = name
    if slug is not None:
        category.slug = slug
    for field in ("description", "color"):
        if field in changes:
            setattr(category, field, changes[field])
    _commit_or_conflict(db, "Category with this name or slug already exists")
    db.refresh(category)
    logger.info("Category updated", extra={"category_id": category.id, "fields": sorted(changes)})
    return category


def delete_category(db: Session, category_id: int) -> None:
    """Delete the category (its post links go with it) and drop it from the display order."""
    category = get_category(db, category_id)
    db.delete(category)
    db.commit()
    order = _read_order(db)
    if order is not None:
        _write_order(db, [cid for cid in order if cid != category_id])
    logger.info("Category deleted", extra={"category_id": category_id})


def reorder_categories(db: Session, ids: list[int]) -> list[int]:
    """Store the display order. Unknown and repeated ids are dropped."""
    existing = {cid for (cid,) in db.query(Category.id).filter(Category.id.in_(ids)).all()} if ids else set()
    order = [cid for cid in dict.fromkeys(ids) if cid in existing]
    _write_order(db, order)
    return order
