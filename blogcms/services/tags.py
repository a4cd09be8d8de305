"""Tags: CRUD with post counts, merging duplicates and removing unused tags."""

import logging
from typing import Any

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blogcms.core.errors import BadRequest, Conflict, NotFound
from blogcms.models import Tag, post_tags
from blogcms.services.slugs import slugify

logger = logging.getLogger(__name__)


def _as_dict(tag: Tag, post_count: int) -> dict[str, Any]:
    return {
        "id": tag.id,
        "name": tag.name,
        "slug": tag.slug,
        "post_count": post_count,
        "created_at": tag.created_at,
    }


def list_tags(db: Session, q: str | None = None) -> list[dict[str, Any]]:
    """Tags ordered by name with post counts; q matches name or slug, case-insensitively."""
    query = (
        db.query(Tag, func.count(post_tags.c.post_id))
        .outerjoin(post_tags, post_tags.c.tag_id == Tag.id)
        .group_by(Tag.id)
    )
    term = (q or "").strip()
    if term:
        query = query.filter(or_(Tag.name.icontains(term, autoescape=True), Tag.slug.icontains(term, autoescape=True)))
    return [_as_dict(tag, count) for tag, count in query.order_by(Tag.name.asc()).all()]


def get_tag(db: Session, tag_id: int) -> Tag:
    tag = db.query(Tag).filter(Tag.id == tag_id).first()
    if tag is None:
        raise NotFound("Tag not found")
    return tag


def tag_detail(db: Session, tag: Tag) -> dict[str, Any]:
    count = db.query(func.count(post_tags.c.post_id)).filter(post_tags.c.tag_id == tag.id).scalar()
    return _as_dict(tag, count)


def _name_and_slug(name: str) -> tuple[str, str]:
    name = (name or "").strip()
    if not name:
        raise BadRequest("Tag name is required")
    slug = slugify(name)
    if not slug:
        raise BadRequest("Tag name must contain letters or digits")
    return name, slug


def _ensure_unique(db: Session, name: str, slug: str, exclude_id: int | None = None) -> None:
    query = db.query(Tag.id).filter(or_(func.lower(Tag.name) == name.lower(), Tag.slug == slug))
    if exclude_id is not None:
        query = query.filter(Tag.id != exclude_id)
    if query.first() is not None:
        raise Conflict("Tag with this name already exists")


def _commit_or_conflict(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("Tag with this name already exists") from e


def create_tag(db: Session, name: str) -> Tag:
    name, slug = _name_and_slug(name)
    _ensure_unique(db, name, slug)
    tag = Tag(name=name, slug=slug)
    db.add(tag)
    _commit_or_conflict(db)
    db.refresh(tag)
    logger.info("Tag created", extra={"tag_id": tag.id})
    return tag


def update_tag(db: Session, tag_id: int, name: str | None) -> Tag:
    """Rename; the slug follows the name."""
    tag = get_tag(db, tag_id)
    if name is not None and name.strip() != tag.name:
        name, slug = _name_and_slug(name)
        _ensure_unique(db, name, slug, exclude_id=tag.id)
        tag.name = name
        tag.slug = slug
        _commit_or_conflict(db)
        db.refresh(tag)
    return tag


def delete_tag(db: Session, tag_id: int) -> None:
    tag = get_tag(db, tag_id)
    db.delete(tag)
    db.commit()
    logger.info("Tag deleted", extra={"tag_id": tag_id})


def merge_tags(db: Session, source_ids: list[int], target_id: int) -> int:
    """
    Move every post of each source tag onto the target (without duplicating
    links), then delete the sources. Returns the number of sources merged.
    """
    sources = [sid for sid in dict.fromkeys(source_ids) if sid != target_id]
    if not target_id or not sources:
        raise BadRequest("Provide targetId and one or more sourceIds")
    target = db.query(Tag).filter(Tag.id == target_id).first()
    if target is None:
        raise NotFound("Target tag not found")
    merged = 0
    for tag in db.query(Tag).filter(Tag.id.in_(sources)).all():
        for post in list(tag.posts):
            post.tags.remove(tag)
            if target not in post.tags:
                post.tags.append(target)
        db.delete(tag)
        merged += 1
    db.commit()
    logger.info("Tags merged", extra={"target_id": target_id, "merged": merged})
    return merged


def cleanup_unused(db: Session) -> int:
    """Delete every tag without posts; returns how many were removed."""
    unused = db.query(Tag).filter(~Tag.posts.any()).all()
    for tag in unused:
        db.delete(tag)
    db.commit()
    if unused:
        logger.info("Unused tags removed", extra={"deleted": len(unused)})
    return len(unused)
